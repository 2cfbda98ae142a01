"""
Abbreviation Pydantic Schemas
API validation schemas for abbreviation operations.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from .models import LABEL_PATTERN


# ==================== PROOF SCHEMAS ====================

class ProofCreate(BaseModel):
    """Schema for creating a proof session."""
    name: str = Field(..., min_length=1, max_length=255, description="Proof display name")
    declarations: Dict[str, int] = Field(
        default_factory=dict,
        description="Symbols of the proof namespace: name -> arity",
    )

    @field_validator("declarations")
    @classmethod
    def validate_declarations(cls, v):
        for name, arity in v.items():
            if arity < 0:
                raise ValueError(f"Arity of {name} must not be negative")
        return v


class ProofResponse(BaseModel):
    id: str
    name: str
    abbreviation_count: int
    revision: int
    selected: bool = False


class ProofListResponse(BaseModel):
    proofs: List[ProofResponse]
    total: int
    selected_id: Optional[str] = None


# ==================== ABBREVIATION SCHEMAS ====================

def _check_label(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not LABEL_PATTERN.fullmatch(v):
        raise ValueError("Label must be a non-empty word (letters, digits, underscore)")
    return v


class AbbrevCreate(BaseModel):
    """Schema for adding an abbreviation."""
    label: str = Field(..., min_length=1, max_length=200, description="Abbreviation label")
    term: str = Field(..., min_length=1, description="Term text in the proof's syntax")
    enabled: bool = Field(default=True)

    @field_validator("label")
    @classmethod
    def validate_label(cls, v):
        return _check_label(v)


class AbbrevUpdate(BaseModel):
    """Schema for updating an abbreviation (partial update)."""
    label: Optional[str] = Field(None, max_length=200, description="New label")
    term: Optional[str] = Field(None, min_length=1, description="New term text")
    enabled: Optional[bool] = None

    @field_validator("label")
    @classmethod
    def validate_label(cls, v):
        return _check_label(v)


class AbbrevResponse(BaseModel):
    label: str
    term: str
    display: str
    enabled: bool


class AbbrevListResponse(BaseModel):
    proof_id: str
    abbreviations: List[AbbrevResponse]
    total: int
    revision: int


class ToggleResponse(BaseModel):
    label: str
    enabled: bool


# ==================== IMPORT/EXPORT/TRANSFER ====================

class LineErrorResponse(BaseModel):
    line_no: int
    line: str
    kind: str
    message: str


class ImportResult(BaseModel):
    added: int
    skipped: int
    errors: List[LineErrorResponse] = []


class FileRequest(BaseModel):
    file_name: str = Field(..., min_length=1, max_length=255)


class SaveResult(BaseModel):
    file_name: str
    saved: int


class TransferRequest(BaseModel):
    source_proof_id: str = Field(..., min_length=1)


class TransferErrorResponse(BaseModel):
    label: str
    printed: str
    message: str


class TransferResult(BaseModel):
    transferred: int
    errors: List[TransferErrorResponse] = []
