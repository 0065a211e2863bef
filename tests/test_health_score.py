from legal_analysis_core.health_score import score, score_label
from model.models import DocumentAnalysis


def _analysis(*risks):
    return DocumentAnalysis(risks=[{"level": level, "description": description} for level, description in risks])


def test_no_risks_is_perfect():
    result = score(DocumentAnalysis())
    assert result.overall == 100
    assert result.label == "Excellent"
    assert result.categories.model_dump() == {"legal": 100, "financial": 100, "compliance": 100, "operational": 100}
    assert result.risk_counts == {"High": 0, "Medium": 0, "Low": 0}


def test_three_high_risks():
    result = score(_analysis(("High", "a"), ("High", "b"), ("High", "c")))
    assert result.overall == 55
    assert result.label == "Poor"
    assert result.risk_counts["High"] == 3


def test_mixed_levels_and_categories():
    result = score(_analysis(
        ("High", "Payment penalties and litigation exposure"),
        ("Medium", "GDPR compliance gaps"),
        ("Low", "Delivery timeline is vague"),
    ))
    assert result.overall == 100 - 15 - 8 - 3
    # one risk can hit more than one category
    assert result.categories.financial == 80
    assert result.categories.legal == 80
    assert result.categories.compliance == 88
    assert result.categories.operational == 95


def test_scores_are_clamped_at_zero():
    result = score(_analysis(*[("High", "late fee")] * 10))
    assert result.overall == 0
    assert result.categories.financial == 0
    assert result.label == "Critical"


def test_unknown_level_counts_as_medium():
    result = score(DocumentAnalysis(risks=[{"level": "severe", "description": "x"}]))
    assert result.overall == 92
    assert result.risk_counts["Medium"] == 1


def test_score_labels():
    assert [score_label(s) for s in (95, 85, 65, 45, 10)] == ["Excellent", "Good", "Fair", "Poor", "Critical"]
