"""
Abbreviation Service
Proof sessions, selection and the abbreviation actions offered to the UI.

Each proof session owns exactly one AbbrevMap, created with the session and
closed when the session is discarded.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from core.logic import LogicCodec, Namespace

from .abbrev_map import AbbrevMap
from .exceptions import UnknownLabel, UnknownProof
from .io import LoadReport, deserialize, load_file, save_file, serialize
from .models import Abbreviation
from .notifier import ChangeNotifier, Listener, Subscription
from .transfer import TransferReport, transfer

logger = logging.getLogger(__name__)


@dataclass
class ProofSession:
    """A loaded proof as far as abbreviations are concerned."""

    id: str
    name: str
    namespace: Namespace
    abbreviations: AbbrevMap = field(default_factory=AbbrevMap)
    codec: LogicCodec = None

    def __post_init__(self):
        if self.codec is None:
            self.codec = LogicCodec(self.namespace, self.abbreviations)

    def __repr__(self):
        return f"<ProofSession {self.name} ({len(self.abbreviations)} abbreviations)>"


class AbbrevService:
    """
    Service layer for abbreviation operations.

    Usage::

        service = AbbrevService()
        proof = service.create_proof("Sum", {"x": 0, "y": 0})
        service.add_abbreviation(proof.id, "pos", "x > 0")
        service.save_file(proof.id, "sum.abbrev")
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self._proofs: Dict[str, ProofSession] = {}
        self._selected_id: Optional[str] = None
        self.selection = ChangeNotifier()

    # ==================== PROOFS ====================

    def create_proof(self, name: str, declarations: Optional[Mapping[str, int]] = None) -> ProofSession:
        """Create a proof session with its own namespace and abbreviation map."""
        proof_id = uuid.uuid4().hex[:12]
        namespace = Namespace.standard(name=f"{name}#{proof_id}", declarations=declarations)
        proof = ProofSession(id=proof_id, name=name, namespace=namespace)
        self._proofs[proof_id] = proof
        logger.info("Created proof %s: %s", proof_id, name)
        return proof

    def get_proof(self, proof_id: str) -> ProofSession:
        proof = self._proofs.get(proof_id)
        if proof is None:
            raise UnknownProof(proof_id)
        return proof

    def list_proofs(self) -> List[ProofSession]:
        return list(self._proofs.values())

    def discard_proof(self, proof_id: str) -> bool:
        """Discard a proof and its abbreviation map. Returns False if unknown."""
        proof = self._proofs.pop(proof_id, None)
        if proof is None:
            return False
        if self._selected_id == proof_id:
            self.select_proof(None)
        proof.abbreviations.close()
        logger.info("Discarded proof %s", proof_id)
        return True

    # ==================== SELECTION ====================

    @property
    def selected_proof(self) -> Optional[ProofSession]:
        if self._selected_id is None:
            return None
        return self._proofs.get(self._selected_id)

    def selected_map(self) -> Optional[AbbrevMap]:
        proof = self.selected_proof
        return proof.abbreviations if proof else None

    def select_proof(self, proof_id: Optional[str]) -> Optional[ProofSession]:
        """Change the selected proof (None clears) and notify selection listeners."""
        if proof_id is not None:
            self.get_proof(proof_id)
        if proof_id == self._selected_id:
            return self.selected_proof
        self._selected_id = proof_id
        self.selection.notify()
        return self.selected_proof

    def on_selection_changed(self, listener: Listener) -> Subscription:
        return self.selection.subscribe(listener)

    # ==================== ABBREVIATIONS ====================

    def list_abbreviations(self, proof_id: str) -> List[Abbreviation]:
        """Entries sorted by label."""
        return self.get_proof(proof_id).abbreviations.list_entries()

    def render(self, proof_id: str, entry: Abbreviation) -> str:
        """Display form ``label : term``."""
        proof = self.get_proof(proof_id)
        return f"{entry.label} : {proof.codec.render(entry.term)}"

    def add_abbreviation(self, proof_id: str, label: str, text: str, enabled: bool = True) -> Abbreviation:
        """Parse ``text`` and bind it to ``label``."""
        proof = self.get_proof(proof_id)
        term = proof.codec.parse(text)
        proof.abbreviations.put(term, label, enabled)
        return Abbreviation(term=term, label=label.strip(), enabled=enabled)

    def rename_abbreviation(self, proof_id: str, label: str, new_label: str) -> None:
        abbrevs = self.get_proof(proof_id).abbreviations
        abbrevs.change_abbrev(self._term_of(abbrevs, label), new_label)

    def change_term(self, proof_id: str, label: str, text: str, enabled: bool = True) -> None:
        """Rebind ``label`` to the term parsed from ``text``.

        A ParseError propagates with the rejected text attached, so the
        caller can show the input again for correction.
        """
        proof = self.get_proof(proof_id)
        if not proof.abbreviations.contains_label(label):
            raise UnknownLabel(label)
        term = proof.codec.parse(text)
        proof.abbreviations.change_term(label, term, enabled)

    def update_abbreviation(
        self,
        proof_id: str,
        label: str,
        text: Optional[str] = None,
        enabled: Optional[bool] = None,
        new_label: Optional[str] = None,
    ) -> Abbreviation:
        """Apply a partial edit of one abbreviation, all or nothing."""
        proof = self.get_proof(proof_id)
        if not proof.abbreviations.contains_label(label):
            raise UnknownLabel(label)
        term = proof.codec.parse(text) if text is not None else None
        return proof.abbreviations.update(label, term, enabled, new_label)

    def set_enabled(self, proof_id: str, label: str, enabled: bool) -> None:
        abbrevs = self.get_proof(proof_id).abbreviations
        abbrevs.set_enabled(self._term_of(abbrevs, label), enabled)

    def toggle_abbreviation(self, proof_id: str, label: str) -> bool:
        """Flip the enabled flag. Returns the new value."""
        abbrevs = self.get_proof(proof_id).abbreviations
        return abbrevs.toggle(self._term_of(abbrevs, label))

    def remove_abbreviation(self, proof_id: str, label: str) -> bool:
        return self.get_proof(proof_id).abbreviations.remove_label(label)

    @staticmethod
    def _term_of(abbrevs: AbbrevMap, label: str):
        term = abbrevs.get_term(label)
        if term is None:
            raise UnknownLabel(label)
        return term

    # ==================== IMPORT/EXPORT ====================

    def import_text(self, proof_id: str, text: str) -> LoadReport:
        proof = self.get_proof(proof_id)
        return deserialize(text, proof.codec, proof.abbreviations)

    def export_text(self, proof_id: str) -> str:
        proof = self.get_proof(proof_id)
        return serialize(proof.abbreviations, proof.codec)

    def load_file(self, proof_id: str, path: Union[str, Path]) -> LoadReport:
        proof = self.get_proof(proof_id)
        return load_file(path, proof.codec, proof.abbreviations, encoding=self.encoding)

    def save_file(self, proof_id: str, path: Union[str, Path]) -> int:
        proof = self.get_proof(proof_id)
        return save_file(path, proof.abbreviations, proof.codec, encoding=self.encoding)

    # ==================== TRANSFER ====================

    def transfer(self, source_id: str, destination_id: str) -> TransferReport:
        """Copy all abbreviations of one proof into another. Best effort."""
        if source_id == destination_id:
            raise ValueError("Cannot transfer abbreviations of a proof into itself")
        source = self.get_proof(source_id)
        destination = self.get_proof(destination_id)
        return transfer(
            source.abbreviations, source.codec,
            destination.abbreviations, destination.codec,
        )


# Global instance
_service: Optional[AbbrevService] = None


def get_abbrev_service() -> AbbrevService:
    """Get or create the global service instance."""
    global _service
    if _service is None:
        from config.settings import settings
        _service = AbbrevService(encoding=settings.abbrev_file_encoding)
    return _service
