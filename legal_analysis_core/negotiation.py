"""
Negotiation strategies for High and Medium risks.
Each qualifying risk is classified by keywords in its description and filled from a
fixed editorial template (counter-proposal, talking points, leverage score).
"""
import math
from typing import Dict, List, NamedTuple, Sequence, Tuple

from model.models import DocumentAnalysis, NegotiationStrategy, RiskLevel

MAX_STRATEGIES = 6


class StrategyTemplate(NamedTuple):
    keywords: Tuple[str, ...]
    current_issue: str
    counter_proposal: str
    talking_points: Tuple[str, ...]
    leverage_score: int
    rationale: str
    fallback_position: str


# checked in order, first match wins
STRATEGY_TEMPLATES: Sequence[StrategyTemplate] = (
    StrategyTemplate(
        keywords=("liability", "indemnity"),
        current_issue="Unlimited liability exposure puts your organization at significant financial risk.",
        counter_proposal=(
            "Propose mutual liability cap at 2x annual contract value, excluding intentional "
            "misconduct and confidentiality breaches."
        ),
        talking_points=(
            "Industry standard liability caps typically range from 1-3x contract value",
            "Mutual caps demonstrate good faith and balanced risk allocation",
            "Insurance coverage should align with liability limits",
            "Carve-outs for gross negligence protect against bad faith",
        ),
        leverage_score=75,
        rationale="Most companies accept reasonable liability caps to limit exposure while maintaining accountability.",
        fallback_position=(
            "If full cap rejected, propose separate caps for direct damages (2x) and indirect damages (1x), "
            "with uncapped liability only for willful misconduct."
        ),
    ),
    StrategyTemplate(
        keywords=("termination", "cancel"),
        current_issue="Restrictive termination terms lock you into unfavorable arrangements with limited exit options.",
        counter_proposal="Add mutual termination for convenience with 90-day notice and pro-rated refund of prepaid fees.",
        talking_points=(
            "Business needs change, flexibility is essential for both parties",
            "Mutual termination rights create balanced relationship",
            "90-day notice provides adequate transition period",
            "Fair refund policy demonstrates confidence in service quality",
        ),
        leverage_score=85,
        rationale=(
            "Termination flexibility is highly negotiable, especially in service agreements. "
            "Most vendors prefer happy customers."
        ),
        fallback_position=(
            "If convenience termination rejected, negotiate for cause termination with reasonable cure "
            "periods (30-60 days) and clear breach definitions."
        ),
    ),
    StrategyTemplate(
        keywords=("payment", "fee"),
        current_issue="Aggressive payment terms strain cash flow and create financial pressure.",
        counter_proposal="Modify to Net 45 payment terms with milestone-based invoicing and 1.5% monthly late fee cap.",
        talking_points=(
            "Extended payment terms align with standard accounting cycles",
            "Milestone-based payments tie cost to value delivery",
            "Reasonable late fees incentivize timely payment without being punitive",
            "Better terms enable longer partnership and additional purchases",
        ),
        leverage_score=70,
        rationale="Payment terms are often negotiable, especially for larger contracts or repeat customers.",
        fallback_position="If Net 45 rejected, offer Net 30 with early payment discount (2% for payment within 10 days).",
    ),
    StrategyTemplate(
        keywords=("intellectual property", "ip"),
        current_issue="Overly broad IP assignment could transfer your proprietary technology and background IP.",
        counter_proposal=(
            "Limit IP assignment to deliverables specifically created under this agreement, with explicit "
            "exclusion of background IP and general methodologies."
        ),
        talking_points=(
            "Background IP represents significant prior investment",
            "Assignment should only cover work product created for this project",
            "General knowledge, tools, and methodologies should remain yours",
            "Clear IP boundaries prevent future disputes",
        ),
        leverage_score=80,
        rationale="IP rights are critical and most parties accept work-for-hire limited to specific deliverables.",
        fallback_position=(
            "If full ownership required, negotiate perpetual license back to your background IP for your "
            "own business purposes."
        ),
    ),
    StrategyTemplate(
        keywords=("confidential", "nda"),
        current_issue=(
            "Indefinite or overly restrictive confidentiality obligations create long-term compliance burden."
        ),
        counter_proposal=(
            "Limit confidentiality period to 3 years post-disclosure with standard exclusions (public domain, "
            "independently developed, rightfully received)."
        ),
        talking_points=(
            "Industry standard confidentiality periods are 2-5 years",
            "Information loses commercial value over time",
            "Standard exclusions are universally accepted",
            "Reasonable terms ensure practical compliance",
        ),
        leverage_score=90,
        rationale="Time-limited confidentiality with standard carve-outs is nearly universal in commercial agreements.",
        fallback_position=(
            "If 3 years rejected, offer 5 years with automatic expiration (no survival) and clear marking "
            "requirements for confidential information."
        ),
    ),
    StrategyTemplate(
        keywords=("warranty", "guarantee"),
        current_issue=(
            "Unlimited warranties create open-ended obligations that are difficult to manage and expensive to maintain."
        ),
        counter_proposal=(
            "Add express warranty with specific scope and time limit (e.g., 90-day warranty for conformance "
            "to specifications), plus disclaimer of implied warranties."
        ),
        talking_points=(
            "Specific warranties are clearer and more enforceable than general ones",
            "Time limits align with product lifecycle and support capabilities",
            "Disclaimer of implied warranties is standard in B2B agreements",
            "Clear warranty scope sets expectations and prevents disputes",
        ),
        leverage_score=65,
        rationale=(
            "Warranty limitations are common but may face resistance. "
            "Emphasize clarity and specificity over duration."
        ),
        fallback_position=(
            "If implied warranty disclaimer rejected, limit implied warranties to same period as "
            "express warranties (90 days)."
        ),
    ),
)

GENERIC_TEMPLATE = StrategyTemplate(
    keywords=(),
    current_issue="Current terms create imbalanced risk allocation favoring the other party.",
    counter_proposal="Request mutual obligations and balanced risk-sharing for this provision.",
    talking_points=(
        "Best agreements create win-win scenarios for both parties",
        "Mutual obligations demonstrate good faith and partnership",
        "Balanced risk allocation leads to better long-term relationships",
        "Fair terms reduce likelihood of disputes",
    ),
    leverage_score=60,
    rationale="Most provisions can be made mutual without significant business impact.",
    fallback_position="If full mutuality rejected, propose graduated remedies tied to materiality of breach.",
)

_QUALIFYING_LEVELS = (RiskLevel.HIGH, RiskLevel.MEDIUM)


def classify(description: str) -> StrategyTemplate:
    # substring match, so "ip" also hits words like "shipping"
    text = description.lower()
    for template in STRATEGY_TEMPLATES:
        if any(keyword in text for keyword in template.keywords):
            return template
    return GENERIC_TEMPLATE


def build_strategies(analysis: DocumentAnalysis) -> List[NegotiationStrategy]:
    """Strategies for the first six High/Medium risks, in analysis order."""
    strategies = []
    for risk in analysis.risks:
        level = RiskLevel.coerce(risk.level)
        if level not in _QUALIFYING_LEVELS:
            continue
        template = classify(risk.description)
        strategies.append(NegotiationStrategy(
            risk_title=risk.description,
            risk_level=level,
            current_issue=template.current_issue,
            counter_proposal=template.counter_proposal,
            talking_points=template.talking_points,
            leverage_score=template.leverage_score,
            rationale=template.rationale,
            fallback_position=template.fallback_position,
        ))
        if len(strategies) == MAX_STRATEGIES:
            break
    return strategies


def average_leverage(strategies: Sequence[NegotiationStrategy]) -> int:
    if not strategies:
        return 0
    # halves round up
    return math.floor(sum(s.leverage_score for s in strategies) / len(strategies) + 0.5)


def leverage_band(score: int) -> str:
    if score >= 80:
        return "Strong Leverage"
    if score >= 60:
        return "Moderate Leverage"
    return "Weak Leverage"


def leverage_summary(strategies: Sequence[NegotiationStrategy]) -> Dict[str, object]:
    average = average_leverage(strategies)
    return {"count": len(strategies), "average_leverage": average, "band": leverage_band(average)}
