"""
Unit tests for api/abbrev_router.py: proof and abbreviation endpoints.
"""
import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient

from api.main import app
from config.settings import settings
from core.abbrev.service import AbbrevService


@pytest.fixture
def service():
    svc = AbbrevService()
    with patch("api.abbrev_router.get_service", return_value=svc):
        yield svc


@pytest.fixture
def client(service):
    return TestClient(app)


@pytest.fixture
def proof(service):
    proof = service.create_proof("Sum", {"x": 0, "y": 0, "f": 1})
    service.add_abbreviation(proof.id, "fx", "f(x)")
    return proof


class TestProofEndpoints:
    """Test /api/abbrev/proofs."""

    def test_create_proof(self, client, service):
        resp = client.post("/api/abbrev/proofs", json={"name": "P", "declarations": {"x": 0}})
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "P"
        assert data["abbreviation_count"] == 0
        assert data["selected"] is False
        assert service.get_proof(data["id"]).name == "P"

    def test_create_proof_negative_arity(self, client):
        resp = client.post("/api/abbrev/proofs", json={"name": "P", "declarations": {"x": -1}})
        assert resp.status_code == 422

    def test_list_and_select(self, client, proof):
        resp = client.post(f"/api/abbrev/proofs/{proof.id}/select")
        assert resp.status_code == 200
        assert resp.json()["selected"] is True

        data = client.get("/api/abbrev/proofs").json()
        assert data["total"] == 1
        assert data["selected_id"] == proof.id
        assert data["proofs"][0]["abbreviation_count"] == 1

    def test_select_unknown(self, client):
        assert client.post("/api/abbrev/proofs/nope/select").status_code == 404

    def test_discard(self, client, proof):
        assert client.delete(f"/api/abbrev/proofs/{proof.id}").status_code == 200
        assert client.delete(f"/api/abbrev/proofs/{proof.id}").status_code == 404


class TestAbbreviationEndpoints:
    """Test /api/abbrev/proofs/{id}/abbreviations."""

    def test_list(self, client, proof, service):
        service.add_abbreviation(proof.id, "sum", "f(x) + y", enabled=False)
        resp = client.get(f"/api/abbrev/proofs/{proof.id}/abbreviations")
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 2
        assert [a["label"] for a in data["abbreviations"]] == ["fx", "sum"]
        assert data["abbreviations"][1] == {
            "label": "sum",
            "term": "f(x) + y",
            "display": "sum : @fx + y",
            "enabled": False,
        }

    def test_list_unknown_proof(self, client):
        assert client.get("/api/abbrev/proofs/nope/abbreviations").status_code == 404

    def test_add(self, client, proof):
        resp = client.post(
            f"/api/abbrev/proofs/{proof.id}/abbreviations",
            json={"label": "pos", "term": "x>0"},
        )
        assert resp.status_code == 200
        assert resp.json()["term"] == "x > 0"
        assert proof.abbreviations.contains_label("pos")

    def test_add_parse_error_echoes_input(self, client, proof):
        resp = client.post(
            f"/api/abbrev/proofs/{proof.id}/abbreviations",
            json={"label": "bad", "term": "x + nope"},
        )
        assert resp.status_code == 422
        detail = resp.json()["detail"]
        assert detail["input"] == "x + nope"
        assert detail["position"] == 4

    def test_add_duplicate_label(self, client, proof):
        resp = client.post(
            f"/api/abbrev/proofs/{proof.id}/abbreviations",
            json={"label": "fx", "term": "y"},
        )
        assert resp.status_code == 409

    def test_add_duplicate_term(self, client, proof):
        resp = client.post(
            f"/api/abbrev/proofs/{proof.id}/abbreviations",
            json={"label": "other", "term": "f(x)"},
        )
        assert resp.status_code == 409

    def test_add_invalid_label(self, client, proof):
        resp = client.post(
            f"/api/abbrev/proofs/{proof.id}/abbreviations",
            json={"label": "two words", "term": "y"},
        )
        assert resp.status_code == 422

    def test_update_term_keeps_flag(self, client, proof):
        proof.abbreviations.set_enabled(proof.codec.parse("f(x)"), False)
        resp = client.patch(
            f"/api/abbrev/proofs/{proof.id}/abbreviations/fx",
            json={"term": "f(y)"},
        )
        assert resp.status_code == 200
        term = proof.abbreviations.get_term("fx")
        assert proof.codec.print(term) == "f(y)"
        assert proof.abbreviations.is_enabled(term) is False

    def test_update_rename(self, client, proof):
        resp = client.patch(
            f"/api/abbrev/proofs/{proof.id}/abbreviations/fx",
            json={"label": "fofx", "enabled": False},
        )
        assert resp.json() == {"status": "updated", "label": "fofx"}
        assert proof.abbreviations.is_enabled(proof.abbreviations.get_term("fofx")) is False

    def test_update_rejected_rename_keeps_term(self, client, proof, service):
        service.add_abbreviation(proof.id, "yy", "y")
        resp = client.patch(
            f"/api/abbrev/proofs/{proof.id}/abbreviations/fx",
            json={"term": "x + y", "label": "yy"},
        )
        assert resp.status_code == 409
        assert proof.codec.print(proof.abbreviations.get_term("fx")) == "f(x)"
        assert proof.codec.print(proof.abbreviations.get_term("yy")) == "y"

    def test_update_rejected_term_keeps_label(self, client, proof, service):
        service.add_abbreviation(proof.id, "yy", "y")
        resp = client.patch(
            f"/api/abbrev/proofs/{proof.id}/abbreviations/fx",
            json={"term": "y", "label": "why"},
        )
        assert resp.status_code == 409
        assert proof.abbreviations.contains_label("fx")
        assert not proof.abbreviations.contains_label("why")

    def test_update_unknown_label(self, client, proof):
        resp = client.patch(
            f"/api/abbrev/proofs/{proof.id}/abbreviations/ghost",
            json={"term": "y"},
        )
        assert resp.status_code == 404

    def test_toggle(self, client, proof):
        resp = client.post(f"/api/abbrev/proofs/{proof.id}/abbreviations/fx/toggle")
        assert resp.json() == {"label": "fx", "enabled": False}

    def test_remove(self, client, proof):
        assert client.delete(f"/api/abbrev/proofs/{proof.id}/abbreviations/fx").status_code == 200
        assert client.delete(f"/api/abbrev/proofs/{proof.id}/abbreviations/fx").status_code == 404


class TestImportExportEndpoints:
    """Test import, export, load and save."""

    def test_import(self, client, proof):
        content = "# comment\na::==x\nb::==broken(\n".encode("utf-8")
        resp = client.post(
            f"/api/abbrev/proofs/{proof.id}/import",
            files={"file": ("sum.abbrev", content, "text/plain")},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["added"] == 1
        assert data["errors"][0]["line_no"] == 3
        assert data["errors"][0]["kind"] == "parse"

    def test_import_deeply_nested_line(self, client, proof):
        deep = "(" * 5000 + "x" + ")" * 5000
        content = f"a::=={deep}\nb::==y".encode("utf-8")
        resp = client.post(
            f"/api/abbrev/proofs/{proof.id}/import",
            files={"file": ("sum.abbrev", content, "text/plain")},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["added"] == 1
        assert data["errors"][0]["line_no"] == 1
        assert proof.abbreviations.contains_label("b")

    def test_import_too_large(self, client, proof, monkeypatch):
        monkeypatch.setattr(settings, "max_import_size_kb", 0)
        resp = client.post(
            f"/api/abbrev/proofs/{proof.id}/import",
            files={"file": ("sum.abbrev", b"a::==x", "text/plain")},
        )
        assert resp.status_code == 413

    def test_export(self, client, proof):
        resp = client.get(f"/api/abbrev/proofs/{proof.id}/export")
        assert resp.status_code == 200
        assert resp.text == "fx::==f(x)"
        assert 'filename="Sum.abbrev"' in resp.headers["content-disposition"]

    def test_save_and_load(self, client, proof, service, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "abbrev_dir", tmp_path)
        resp = client.post(f"/api/abbrev/proofs/{proof.id}/save", json={"file_name": "sum"})
        assert resp.json() == {"file_name": "sum.abbrev", "saved": 1}
        assert (tmp_path / "sum.abbrev").read_text(encoding="utf-8") == "fx::==f(x)"

        other = service.create_proof("Other", {"x": 0, "f": 1})
        resp = client.post(f"/api/abbrev/proofs/{other.id}/load", json={"file_name": "sum.abbrev"})
        assert resp.status_code == 200
        assert resp.json()["added"] == 1

    def test_load_missing_file(self, client, proof, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "abbrev_dir", tmp_path)
        resp = client.post(f"/api/abbrev/proofs/{proof.id}/load", json={"file_name": "missing"})
        assert resp.status_code == 400


class TestTransferEndpoint:
    """Test POST /api/abbrev/proofs/{id}/transfer."""

    def test_transfer(self, client, proof, service):
        service.add_abbreviation(proof.id, "yy", "y")
        other = service.create_proof("Other", {"x": 0, "f": 1})
        resp = client.post(
            f"/api/abbrev/proofs/{other.id}/transfer",
            json={"source_proof_id": proof.id},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["transferred"] == 1
        assert data["errors"][0]["label"] == "yy"

    def test_transfer_into_itself(self, client, proof):
        resp = client.post(
            f"/api/abbrev/proofs/{proof.id}/transfer",
            json={"source_proof_id": proof.id},
        )
        assert resp.status_code == 400


def test_health():
    resp = TestClient(app).get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
