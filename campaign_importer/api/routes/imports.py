from __future__ import annotations

from fastapi import APIRouter, File, Form, UploadFile

from campaign_importer.core.placeholders import extract_placeholders, has_mixed_placeholders
from campaign_importer.schemas.imports import (
    ImportValidationResponse,
    ManualImportRequest,
    PlaceholderRequest,
    PlaceholderResponse,
)
from campaign_importer.services.import_service import (
    build_validation_response,
    validate_csv_import,
    validate_manual_import,
)

router = APIRouter(prefix="/imports", tags=["imports"])


@router.post("/placeholders", response_model=PlaceholderResponse)
def list_placeholders(payload: PlaceholderRequest):
    """
    Template body placeholders in first-occurrence order.
    """
    names = extract_placeholders(payload.template_body)
    return PlaceholderResponse(placeholders=names, has_mixed=has_mixed_placeholders(names))


@router.post("/csv/validate", response_model=ImportValidationResponse)
async def validate_csv(
    file: UploadFile = File(...),
    template_body: str = Form(default=""),
):
    """
    Preview a recipients CSV. Problems are reported in the body, never as HTTP errors.
    """
    file_bytes = await file.read()
    diagnostics = validate_csv_import(template_body, file_bytes)
    return build_validation_response(diagnostics)


@router.post("/manual/validate", response_model=ImportValidationResponse)
def validate_manual(payload: ManualImportRequest):
    diagnostics = validate_manual_import(payload.template_body, payload.text)
    return build_validation_response(diagnostics)
