from legal_analysis_core.negotiation import (
    GENERIC_TEMPLATE,
    MAX_STRATEGIES,
    average_leverage,
    build_strategies,
    classify,
    leverage_band,
    leverage_summary,
)
from model.models import DocumentAnalysis, RiskLevel


def _analysis(*risks):
    return DocumentAnalysis(risks=[{"level": level, "description": description} for level, description in risks])


def test_at_most_six_strategies():
    analysis = _analysis(*[("High", f"Unlimited liability case {n}") for n in range(10)])
    strategies = build_strategies(analysis)
    assert len(strategies) == MAX_STRATEGIES
    assert strategies[-1].risk_title == "Unlimited liability case 5"


def test_low_risks_are_excluded():
    strategies = build_strategies(_analysis(
        ("Low", "Payment schedule is slightly long"),
        ("Medium", "Termination requires 180 days notice"),
    ))
    assert len(strategies) == 1
    assert strategies[0].risk_level == RiskLevel.MEDIUM
    assert strategies[0].leverage_score == 85


def test_classification_by_keyword():
    assert classify("Broad indemnity obligations").leverage_score == 75
    assert classify("Late payment fee").leverage_score == 70
    assert classify("Intellectual property assignment").leverage_score == 80
    assert classify("NDA has no end date").leverage_score == 90
    assert classify("Warranty runs forever").leverage_score == 65
    assert classify("Governing law is foreign") is GENERIC_TEMPLATE


def test_first_matching_template_wins():
    # mentions both liability and payment; liability is checked first
    assert classify("Liability for late payment").leverage_score == 75


def test_leverage_summary():
    strategies = build_strategies(_analysis(("High", "Confidential data"), ("High", "Governing law")))
    assert average_leverage(strategies) == 75
    assert leverage_summary(strategies) == {"count": 2, "average_leverage": 75, "band": "Moderate Leverage"}
    assert average_leverage([]) == 0
    assert leverage_band(80) == "Strong Leverage"
    assert leverage_band(59) == "Weak Leverage"


def test_average_leverage_rounds_halves_up():
    strategies = build_strategies(_analysis(("High", "Unlimited liability"), ("High", "Late payment fee")))
    assert [s.leverage_score for s in strategies] == [75, 70]
    assert average_leverage(strategies) == 73
