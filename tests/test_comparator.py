"""
Unit tests for the Comparator module in legal_analysis_core.
"""
import asyncio
import json

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.runnables import RunnableLambda

from exception.custom_exception import AnalysisServiceError
from legal_analysis_core.comparator import Comparator
from model.models import DocumentAnalysis, DocumentInput

REPLY = {
    "executiveSummary": "Lease B is more tenant friendly.",
    "overallSimilarity": "High",
    "keyDifferences": [{
        "category": "Rent",
        "difference": "Monthly rent differs",
        "document1Value": "$1,500",
        "document2Value": "$1,400",
        "impact": "Medium",
        "recommendation": "Prefer lease B",
    }],
    "riskComparison": {"document1Risks": ["Repairs"], "document2Risks": [], "riskAssessment": "A is riskier"},
    "recommendations": [{"priority": "High", "action": "Sign B", "rationale": "Cheaper", "targetDocument": "Document 2"}],
    "metadata": {"document1Name": "spoofed", "document2Name": "spoofed", "comparisonDate": "x", "documentTypes": {}},
}


@pytest.fixture
def documents(sample_analysis):
    other = DocumentAnalysis(document_type="Lease Agreement", risks=[{"level": "Low", "description": "Pets allowed"}])
    return DocumentInput(name="msa.pdf", analysis=sample_analysis), DocumentInput(name="lease.pdf", analysis=other)


def test_compare_parses_structured_reply(documents):
    comparator = Comparator(llm=FakeListChatModel(responses=[json.dumps(REPLY)]))
    result = asyncio.run(comparator.compare(*documents))

    assert result.executive_summary == "Lease B is more tenant friendly."
    assert result.key_differences[0].document2_value == "$1,400"
    assert result.recommendations[0].target_document == "Document 2"
    assert result.risk_comparison.document1_risks == ["Repairs"]


def test_metadata_comes_from_inputs(documents):
    comparator = Comparator(llm=FakeListChatModel(responses=[json.dumps(REPLY)]))
    result = asyncio.run(comparator.compare(*documents))

    assert result.metadata.document1_name == "msa.pdf"
    assert result.metadata.document2_name == "lease.pdf"
    assert result.metadata.document_types == {"document1": "Service Agreement", "document2": "Lease Agreement"}
    assert "metadata" in result.model_dump(by_alias=True)


def test_prose_reply_uses_fallback_structure(documents):
    comparator = Comparator(llm=FakeListChatModel(responses=["Both documents look broadly similar."]))
    result = asyncio.run(comparator.compare(*documents))

    assert result.executive_summary == "Both documents look broadly similar."
    assert result.overall_similarity == "Medium"
    assert result.risk_comparison.document1_risks == [r.description for r in documents[0].analysis.risks]
    assert result.risk_comparison.document2_risks == ["Pets allowed"]
    assert result.metadata.document1_name == "msa.pdf"


def test_llm_failure_raises_service_error(documents):
    def _unavailable(_):
        raise TimeoutError("deadline exceeded")

    with pytest.raises(AnalysisServiceError):
        asyncio.run(Comparator(llm=RunnableLambda(_unavailable)).compare(*documents))
