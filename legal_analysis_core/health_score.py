"""
Document health scoring.
Folds the categorized risks of an analysis into an overall 0-100 score and four
category sub-scores. Category assignment is keyword matching on the risk
description, a best-effort heuristic rather than a classifier.
"""
from typing import Dict, Tuple

from model.models import CategoryScores, DocumentAnalysis, HealthScore, RiskLevel

OVERALL_PENALTY = {RiskLevel.HIGH: 15, RiskLevel.MEDIUM: 8, RiskLevel.LOW: 3}
CATEGORY_PENALTY = {RiskLevel.HIGH: 20, RiskLevel.MEDIUM: 12, RiskLevel.LOW: 5}

CATEGORY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "legal": ("legal", "law", "litigation"),
    "financial": ("payment", "fee", "cost", "financial"),
    "compliance": ("compliance", "regulation", "gdpr"),
    "operational": ("operational", "delivery", "timeline"),
}

# (minimum score, label), checked top-down
SCORE_LABELS = ((90, "Excellent"), (80, "Good"), (60, "Fair"), (40, "Poor"), (0, "Critical"))


def _clamp(score: int) -> int:
    return max(0, min(100, score))


def score_label(score: int) -> str:
    for minimum, label in SCORE_LABELS:
        if score >= minimum:
            return label
    return "Critical"


def score(analysis: DocumentAnalysis) -> HealthScore:
    """Compute the health score of an analysis."""
    overall = 100
    categories = {name: 100 for name in CATEGORY_KEYWORDS}
    counts = {level.value: 0 for level in RiskLevel}

    for risk in analysis.risks:
        level = RiskLevel.coerce(risk.level)
        counts[level.value] += 1
        overall -= OVERALL_PENALTY[level]

        description = risk.description.lower()
        for name, keywords in CATEGORY_KEYWORDS.items():
            # a single risk may hit several categories
            if any(keyword in description for keyword in keywords):
                categories[name] -= CATEGORY_PENALTY[level]

    overall = _clamp(overall)
    return HealthScore(
        overall=overall,
        categories=CategoryScores(**{name: _clamp(value) for name, value in categories.items()}),
        label=score_label(overall),
        risk_counts=counts,
    )
