from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

import httpx

from campaign_importer.core.config import settings
from campaign_importer.schemas.imports import RecipientPayload

T = TypeVar("T")

MAX_RETRY_ATTEMPTS = 3
BASE_RETRY_DELAY = 0.4

logger = logging.getLogger(__name__)


class RecipientsAPIError(RuntimeError):
    """Campaign recipients API call failed."""

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        retryable: bool = False,
        payload: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.retryable = retryable
        self.payload = payload or {}
        # batches accepted upstream before this failure
        self.added_count = 0
        self.batches_completed = 0


@dataclass
class RecipientSubmitResult:
    campaign_id: str
    added_count: int
    total_recipients: Optional[int]
    batches: int


def submit_recipients(
    campaign_id: str,
    recipients: Sequence[RecipientPayload],
    *,
    client: httpx.Client | None = None,
) -> RecipientSubmitResult:
    """Send validated recipients to the campaign, in batches.

    ``client`` overrides the HTTP client, mainly for tests.
    """
    if not recipients:
        raise ValueError("No valid recipients to submit.")

    batch_size = max(settings.recipients_api_batch_size, 1)
    added = 0
    total: Optional[int] = None
    batches = 0
    for chunk in chunked(recipients, batch_size):
        body = {"recipients": [r.model_dump(exclude_none=True) for r in chunk]}

        def _call() -> Dict[str, Any]:
            return _post(f"campaigns/{campaign_id}/recipients/import", body, client=client)

        try:
            data = _run_with_retry("recipients.import", _call)
        except RecipientsAPIError as exc:
            exc.added_count = added
            exc.batches_completed = batches
            if batches:
                logger.error(
                    "Recipients submit failed after partial import (campaign_id=%s, added=%s, batches=%s)",
                    campaign_id,
                    added,
                    batches,
                )
            raise
        added += _to_int(data.get("added_count"), default=len(chunk))
        total = _to_int(data.get("total_recipients"), default=total)
        batches += 1

    logger.info(
        "Recipients submitted (campaign_id=%s, added=%s, batches=%s)",
        campaign_id,
        added,
        batches,
    )
    return RecipientSubmitResult(
        campaign_id=campaign_id,
        added_count=added,
        total_recipients=total,
        batches=batches,
    )


def _post(path: str, body: Dict[str, Any], *, client: httpx.Client | None) -> Dict[str, Any]:
    if client is None and (settings.recipients_api_mock_mode or not settings.recipients_api_base_url):
        return _mock_response(body)

    headers = {"Accept": "application/json"}
    if settings.recipients_api_token:
        headers["Authorization"] = f"Bearer {settings.recipients_api_token}"

    try:
        if client is not None:
            response = client.post(f"/{path}", json=body, headers=headers)
        else:
            url = f"{settings.recipients_api_base_url.rstrip('/')}/{path}"
            with httpx.Client(timeout=settings.recipients_api_timeout, verify=True) as http:
                response = http.post(url, json=body, headers=headers)
    except httpx.HTTPError as exc:  # network / timeout
        raise RecipientsAPIError(f"Recipients API call failed: {exc}", retryable=True) from exc

    if response.status_code >= 400:
        raise RecipientsAPIError(
            f"Recipients API HTTP error: {response.status_code}",
            code=response.status_code,
            retryable=response.status_code >= 500,
            payload=_safe_json(response),
        )

    return _unwrap(_safe_json(response))


def _safe_json(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _unwrap(data: Dict[str, Any]) -> Dict[str, Any]:
    # the upstream wraps payloads as {"status": ..., "data": {...}}
    inner = data.get("data")
    if isinstance(inner, dict):
        return inner
    return data


def _mock_response(body: Dict[str, Any]) -> Dict[str, Any]:
    count = len(body.get("recipients", []))
    return {"message": "Recipients added (mock)", "added_count": count}


def _to_int(value: Any, *, default: Optional[int]) -> Optional[int]:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _run_with_retry(operation: str, func: Callable[[], T]) -> T:
    attempt = 1
    while True:
        try:
            return func()
        except RecipientsAPIError as exc:
            if not exc.retryable or attempt >= MAX_RETRY_ATTEMPTS:
                raise
            delay = min(BASE_RETRY_DELAY * (2 ** (attempt - 1)), 2.0)
            logger.warning(
                "%s failed (attempt %s/%s), retrying in %.1fs: %s",
                operation,
                attempt,
                MAX_RETRY_ATTEMPTS,
                delay,
                exc,
            )
            time.sleep(delay)
            attempt += 1


def chunked(items: Sequence[T], size: int) -> List[List[T]]:
    return [list(items[i:i + size]) for i in range(0, len(items), size)]
