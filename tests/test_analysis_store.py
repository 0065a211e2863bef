import json
from unittest.mock import patch

import pytest

from exception.custom_exception import StorageError
from legal_analysis_core.analysis_store import AnalysisStore, document_tags, overall_risk_level
from model.models import DocumentAnalysis, RiskLevel


@pytest.fixture
def store(tmp_path):
    return AnalysisStore(str(tmp_path / "nested" / "analyses.json"))


def test_save_and_reload(tmp_path, sample_analysis):
    path = str(tmp_path / "analyses.json")
    AnalysisStore(path).save_analysis("analysis_1", "msa.pdf", sample_analysis, text="contract text", user_id="u1")

    record = AnalysisStore(path).get("analysis_1")
    assert record.file_name == "msa.pdf"
    assert record.analysis == sample_analysis
    assert record.has_deadlines is True
    assert record.text_length == len("contract text")
    with open(path) as f:
        assert "analysis_1" in json.load(f)


def test_get_missing_returns_none(store):
    assert store.get("nope") is None


def test_delete(store, sample_analysis):
    store.save_analysis("a", "a.pdf", sample_analysis)
    assert store.delete("a") is True
    assert store.delete("a") is False
    assert store.get("a") is None


def test_list_filters_and_orders_newest_first(store, sample_analysis):
    low = DocumentAnalysis(risks=[{"level": "Low", "description": "minor"}])
    with patch("legal_analysis_core.analysis_store._now", side_effect=["2025-01-01T00:00:00", "2025-02-01T00:00:00"]):
        store.save_analysis("old", "old.pdf", sample_analysis, user_id="u1")
        store.save_analysis("new", "new.pdf", low, user_id="u1")

    assert [r.id for r in store.list()] == ["new", "old"]
    assert [r.id for r in store.list(risk_level=RiskLevel.HIGH)] == ["old"]
    assert store.list(user_id="u2") == []
    assert [r.id for r in store.list(predicate=lambda r: r.file_name.startswith("new"))] == ["new"]


def test_failed_write_raises_storage_error(store, sample_analysis):
    with patch("builtins.open", side_effect=PermissionError("read-only")):
        with pytest.raises(StorageError):
            store.save_analysis("a", "a.pdf", sample_analysis)


def test_overall_risk_level():
    assert overall_risk_level(DocumentAnalysis()) == RiskLevel.LOW
    assert overall_risk_level(DocumentAnalysis(risks=["unleveled"])) == RiskLevel.MEDIUM


def test_document_tags(sample_analysis):
    tags = document_tags(sample_analysis, "Confidential lease agreement")
    assert tags == ["Service Agreement", "High Risk", "Has Deadlines", "Contract", "Real Estate"]
    assert len(document_tags(sample_analysis, "contract employee lease patent nda")) == 5


def test_failed_save_leaves_store_unchanged(store, sample_analysis):
    with patch("builtins.open", side_effect=PermissionError("read-only")):
        with pytest.raises(StorageError):
            store.save_analysis("a", "a.pdf", sample_analysis)
    assert store.get("a") is None
    assert store.list() == []


def test_failed_delete_keeps_record(store, sample_analysis):
    store.save_analysis("a", "a.pdf", sample_analysis)
    with patch("builtins.open", side_effect=PermissionError("read-only")):
        with pytest.raises(StorageError):
            store.delete("a")
    assert [r.id for r in store.list()] == ["a"]
