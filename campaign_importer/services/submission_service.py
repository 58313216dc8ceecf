from __future__ import annotations

import httpx

from campaign_importer.schemas.imports import ImportDiagnostics
from campaign_importer.services import recipients_client
from campaign_importer.services.import_service import to_recipient_payloads


def submit_valid_recipients(
    campaign_id: str,
    diagnostics: ImportDiagnostics,
    *,
    client: httpx.Client | None = None,
) -> recipients_client.RecipientSubmitResult:
    """Submit only the valid rows of a validated batch.

    A batch with global errors or without a single valid row is refused so a
    broken file is never partially imported.
    """
    if not diagnostics.is_valid:
        reason = "; ".join(diagnostics.errors) or "no valid recipients in the batch"
        raise ValueError(f"Recipient import blocked: {reason}")
    payloads = to_recipient_payloads(diagnostics)
    return recipients_client.submit_recipients(campaign_id, payloads, client=client)
