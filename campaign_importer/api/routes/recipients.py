from __future__ import annotations

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from campaign_importer.schemas.imports import ImportDiagnostics, ManualImportRequest, RecipientImportSummary
from campaign_importer.services.import_service import (
    build_validation_response,
    validate_csv_import,
    validate_manual_import,
)
from campaign_importer.services.recipients_client import RecipientsAPIError
from campaign_importer.services.submission_service import submit_valid_recipients

router = APIRouter(prefix="/campaigns", tags=["recipients"])


@router.post("/{campaign_id}/recipients/import/csv", response_model=RecipientImportSummary)
async def import_recipients_csv(
    campaign_id: str,
    file: UploadFile = File(...),
    template_body: str = Form(default=""),
):
    """
    Validate a recipients CSV and add its valid rows to the campaign.
    """
    file_bytes = await file.read()
    return _submit(campaign_id, validate_csv_import(template_body, file_bytes))


@router.post("/{campaign_id}/recipients/import/manual", response_model=RecipientImportSummary)
def import_recipients_manual(campaign_id: str, payload: ManualImportRequest):
    """
    Validate pasted recipient lines and add the valid ones to the campaign.
    """
    return _submit(campaign_id, validate_manual_import(payload.template_body, payload.text))


def _submit(campaign_id: str, diagnostics: ImportDiagnostics) -> RecipientImportSummary:
    try:
        result = submit_valid_recipients(campaign_id, diagnostics)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RecipientsAPIError as exc:
        raise HTTPException(status_code=502, detail=_upstream_failure_detail(exc)) from exc
    return RecipientImportSummary(
        campaign_id=campaign_id,
        added_count=result.added_count,
        skipped_count=diagnostics.invalid_count,
        total_recipients=result.total_recipients,
        validation=build_validation_response(diagnostics),
    )


def _upstream_failure_detail(exc: RecipientsAPIError) -> str:
    if not exc.batches_completed:
        return str(exc)
    return (
        f"{exc} (partially imported: {exc.added_count} recipients already added "
        f"in {exc.batches_completed} batch(es))"
    )
