from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

PHONE_MAX_LENGTH = 50
RECIPIENT_NAME_MAX_LENGTH = 255


class ImportState(str, Enum):
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    VALIDATED = "VALIDATED"
    FAILED = "FAILED"


class ColumnBinding(BaseModel):
    column_index: int = Field(..., ge=0)
    column_name: str
    placeholder: str
    matched_by: Literal["name", "position"]


class ColumnMapping(BaseModel):
    phone_index: int = -1
    name_index: int = -1
    bindings: list[ColumnBinding] = Field(default_factory=list)
    unmapped_placeholders: list[str] = Field(default_factory=list)
    positionally_mapped_named: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    def binding_for(self, placeholder: str) -> ColumnBinding | None:
        for binding in self.bindings:
            if binding.placeholder == placeholder:
                return binding
        return None


class RecipientRow(BaseModel):
    line_number: int = Field(..., ge=1)
    phone: str = ""
    name: str | None = None
    params: dict[str, str] = Field(default_factory=dict)
    is_valid: bool = False
    errors: list[str] = Field(default_factory=list)


class InvalidLineSample(BaseModel):
    line_number: int
    reason: str


class ImportDiagnostics(BaseModel):
    source: Literal["csv", "manual"]
    state: ImportState = ImportState.VALIDATED
    is_valid: bool = False
    placeholders: list[str] = Field(default_factory=list)
    rows: list[RecipientRow] = Field(default_factory=list)
    column_mapping: ColumnMapping | None = None
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    total_rows: int = 0
    valid_count: int = 0
    invalid_count: int = 0
    invalid_samples: list[InvalidLineSample] = Field(default_factory=list)

    @property
    def valid_rows(self) -> list[RecipientRow]:
        return [row for row in self.rows if row.is_valid]


class ImportValidationResponse(BaseModel):
    source: Literal["csv", "manual"]
    state: ImportState
    is_valid: bool
    placeholders: list[str]
    column_mapping: ColumnMapping | None = None
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    total_rows: int = Field(..., ge=0)
    valid_count: int = Field(..., ge=0)
    invalid_count: int = Field(..., ge=0)
    invalid_samples: list[InvalidLineSample] = Field(default_factory=list)
    preview_rows: list[RecipientRow] = Field(default_factory=list)
    preview_truncated: bool = False


class PlaceholderRequest(BaseModel):
    template_body: str


class PlaceholderResponse(BaseModel):
    placeholders: list[str]
    has_mixed: bool


class ManualImportRequest(BaseModel):
    template_body: str = ""
    text: str = ""


class RecipientPayload(BaseModel):
    phone_number: str = Field(..., max_length=PHONE_MAX_LENGTH)
    recipient_name: str | None = Field(default=None, max_length=RECIPIENT_NAME_MAX_LENGTH)
    template_params: dict[str, str] | None = None


class RecipientImportSummary(BaseModel):
    campaign_id: str
    added_count: int = Field(..., ge=0)
    skipped_count: int = Field(..., ge=0)
    total_recipients: int | None = None
    validation: ImportValidationResponse
