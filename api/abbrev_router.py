"""
Abbreviation API Router
FastAPI endpoints for proof sessions and abbreviation management.
"""
from fastapi import APIRouter, HTTPException, UploadFile, File
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse

from config.logging_config import get_logger
from config.settings import settings
from core.abbrev.exceptions import (
    AbbrevError, AbbrevFileError, DuplicateLabel, DuplicateTerm,
    InvalidLabel, ParseError, UnknownLabel, UnknownProof, UnknownTerm,
)
from core.abbrev.service import get_abbrev_service, AbbrevService, ProofSession
from core.abbrev.schemas import (
    ProofCreate, ProofResponse, ProofListResponse,
    AbbrevCreate, AbbrevUpdate, AbbrevResponse, AbbrevListResponse, ToggleResponse,
    ImportResult, LineErrorResponse, FileRequest, SaveResult,
    TransferRequest, TransferResult, TransferErrorResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/abbrev", tags=["Abbreviations"])


def get_service() -> AbbrevService:
    """Get abbreviation service instance."""
    return get_abbrev_service()


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, (UnknownProof, UnknownLabel, UnknownTerm)):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (DuplicateLabel, DuplicateTerm)):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, ParseError):
        # Echo the rejected input so the client can offer it for correction
        return HTTPException(
            status_code=422,
            detail={"message": str(exc), "input": exc.text, "position": exc.position},
        )
    if isinstance(exc, InvalidLabel):
        return HTTPException(status_code=422, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def _proof_response(service: AbbrevService, proof: ProofSession) -> ProofResponse:
    selected = service.selected_proof
    return ProofResponse(
        id=proof.id,
        name=proof.name,
        abbreviation_count=len(proof.abbreviations),
        revision=proof.abbreviations.revision,
        selected=selected is not None and selected.id == proof.id,
    )


# =============================================================================
# Proof sessions
# =============================================================================

@router.post("/proofs", response_model=ProofResponse)
async def create_proof(data: ProofCreate):
    """
    Create a proof session.

    - **name**: Proof display name
    - **declarations**: Namespace symbols (name -> arity)
    """
    service = get_service()
    try:
        proof = service.create_proof(data.name, data.declarations)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _proof_response(service, proof)


@router.get("/proofs", response_model=ProofListResponse)
async def list_proofs():
    """List proof sessions."""
    service = get_service()
    proofs = [_proof_response(service, p) for p in service.list_proofs()]
    selected = service.selected_proof
    return ProofListResponse(
        proofs=proofs,
        total=len(proofs),
        selected_id=selected.id if selected else None,
    )


@router.delete("/proofs/{proof_id}")
async def discard_proof(proof_id: str):
    """Discard a proof session and its abbreviations."""
    service = get_service()
    if not service.discard_proof(proof_id):
        raise HTTPException(status_code=404, detail="Proof not found")
    return {"status": "deleted", "proof_id": proof_id}


@router.post("/proofs/{proof_id}/select", response_model=ProofResponse)
async def select_proof(proof_id: str):
    """Make a proof the current selection."""
    service = get_service()
    try:
        proof = service.select_proof(proof_id)
    except AbbrevError as e:
        raise _http_error(e)
    return _proof_response(service, proof)


# =============================================================================
# Abbreviations
# =============================================================================

@router.get("/proofs/{proof_id}/abbreviations", response_model=AbbrevListResponse)
async def list_abbreviations(proof_id: str):
    """List abbreviations sorted by label."""
    service = get_service()
    try:
        proof = service.get_proof(proof_id)
        entries = service.list_abbreviations(proof_id)
    except AbbrevError as e:
        raise _http_error(e)
    items = [
        AbbrevResponse(
            label=entry.label,
            term=proof.codec.print(entry.term),
            display=service.render(proof_id, entry),
            enabled=entry.enabled,
        )
        for entry in entries
    ]
    return AbbrevListResponse(
        proof_id=proof_id,
        abbreviations=items,
        total=len(items),
        revision=proof.abbreviations.revision,
    )


@router.post("/proofs/{proof_id}/abbreviations", response_model=AbbrevResponse)
async def add_abbreviation(proof_id: str, data: AbbrevCreate):
    """
    Add an abbreviation.

    - **label**: Abbreviation label
    - **term**: Term text, parsed under the proof's namespace
    - **enabled**: Whether the abbreviation is shown when printing
    """
    service = get_service()
    try:
        entry = service.add_abbreviation(proof_id, data.label, data.term, data.enabled)
        proof = service.get_proof(proof_id)
    except AbbrevError as e:
        raise _http_error(e)
    return AbbrevResponse(
        label=entry.label,
        term=proof.codec.print(entry.term),
        display=service.render(proof_id, entry),
        enabled=entry.enabled,
    )


@router.patch("/proofs/{proof_id}/abbreviations/{label}")
async def update_abbreviation(proof_id: str, label: str, data: AbbrevUpdate):
    """
    Update an abbreviation.

    Omitted fields keep their value. The update is applied as a whole or not
    at all: a conflict on the new label or term leaves the entry unchanged.
    """
    service = get_service()
    try:
        entry = service.update_abbreviation(
            proof_id, label, text=data.term, enabled=data.enabled, new_label=data.label,
        )
    except AbbrevError as e:
        raise _http_error(e)
    return {"status": "updated", "label": entry.label}


@router.post("/proofs/{proof_id}/abbreviations/{label}/toggle", response_model=ToggleResponse)
async def toggle_abbreviation(proof_id: str, label: str):
    """Enable a disabled abbreviation or disable an enabled one."""
    service = get_service()
    try:
        enabled = service.toggle_abbreviation(proof_id, label)
    except AbbrevError as e:
        raise _http_error(e)
    return ToggleResponse(label=label, enabled=enabled)


@router.delete("/proofs/{proof_id}/abbreviations/{label}")
async def remove_abbreviation(proof_id: str, label: str):
    """Remove an abbreviation."""
    service = get_service()
    try:
        removed = service.remove_abbreviation(proof_id, label)
    except AbbrevError as e:
        raise _http_error(e)
    if not removed:
        raise HTTPException(status_code=404, detail="Abbreviation not found")
    return {"status": "deleted", "label": label}


# =============================================================================
# Import/Export
# =============================================================================

def _import_result(report) -> ImportResult:
    return ImportResult(
        added=report.added,
        skipped=report.skipped,
        errors=[
            LineErrorResponse(line_no=e.line_no, line=e.line, kind=e.kind, message=e.message)
            for e in report.errors
        ],
    )


@router.post("/proofs/{proof_id}/import", response_model=ImportResult)
async def import_abbreviations(proof_id: str, file: UploadFile = File(...)):
    """
    Import abbreviations from an uploaded text file.

    Format: one ``label::==term`` per line; ``#``, ``//`` and blank lines
    are ignored. Bad lines are reported, not fatal.
    """
    service = get_service()
    content = await file.read()
    if len(content) > settings.max_import_size_kb * 1024:
        raise HTTPException(status_code=413, detail="File too large")
    try:
        text = content.decode(settings.abbrev_file_encoding)
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Could not decode file: {e}")

    try:
        report = service.import_text(proof_id, text)
    except AbbrevError as e:
        raise _http_error(e)
    return _import_result(report)


@router.get("/proofs/{proof_id}/export")
async def export_abbreviations(proof_id: str):
    """Download the abbreviations of a proof as text."""
    service = get_service()
    try:
        proof = service.get_proof(proof_id)
        content = service.export_text(proof_id)
    except AbbrevError as e:
        raise _http_error(e)
    file_name = f"{proof.name}{settings.abbrev_file_suffix}".replace(" ", "_")
    return PlainTextResponse(
        content,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.post("/proofs/{proof_id}/load", response_model=ImportResult)
async def load_abbreviations(proof_id: str, data: FileRequest):
    """Load abbreviations from a file in the abbreviation directory."""
    service = get_service()
    try:
        path = settings.abbrev_path(data.file_name)
        report = await run_in_threadpool(service.load_file, proof_id, path)
    except AbbrevFileError as e:
        logger.error(f"Error loading abbreviations: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except AbbrevError as e:
        raise _http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _import_result(report)


@router.post("/proofs/{proof_id}/save", response_model=SaveResult)
async def save_abbreviations(proof_id: str, data: FileRequest):
    """Save abbreviations to a file in the abbreviation directory."""
    service = get_service()
    try:
        path = settings.abbrev_path(data.file_name)
        saved = await run_in_threadpool(service.save_file, proof_id, path)
    except AbbrevFileError as e:
        logger.error(f"Error saving abbreviations: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except AbbrevError as e:
        raise _http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return SaveResult(file_name=path.name, saved=saved)


# =============================================================================
# Transfer
# =============================================================================

@router.post("/proofs/{proof_id}/transfer", response_model=TransferResult)
async def transfer_abbreviations(proof_id: str, data: TransferRequest):
    """
    Transfer all abbreviations from another proof into this one.

    Best effort: each term is printed in the source proof and parsed again
    here; terms using symbols this proof lacks are reported and skipped.
    """
    service = get_service()
    try:
        report = service.transfer(data.source_proof_id, proof_id)
    except AbbrevError as e:
        raise _http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return TransferResult(
        transferred=report.transferred,
        errors=[
            TransferErrorResponse(label=e.label, printed=e.printed, message=e.message)
            for e in report.errors
        ],
    )
