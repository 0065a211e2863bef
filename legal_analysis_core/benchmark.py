"""
Clause benchmarking against industry-standard clause types.
"""
from typing import Dict, Optional, Sequence

from model.models import (
    BenchmarkReport,
    Clause,
    ClauseRating,
    DocumentAnalysis,
    IndustryStandard,
    RatedClause,
)

# checked in order, first match wins
INDUSTRY_STANDARDS: Sequence[IndustryStandard] = (
    IndustryStandard(
        name="Confidentiality",
        rating=ClauseRating.STANDARD,
        best_practice=(
            "Should include clear definitions of confidential information, explicit exclusions, "
            "and reasonable time limits (typically 2-5 years)."
        ),
        improvements=(
            "Add explicit definition of what constitutes confidential information",
            "Include carve-outs for publicly available information",
            "Specify duration of confidentiality obligations",
        ),
    ),
    IndustryStandard(
        name="Termination",
        rating=ClauseRating.BETTER,
        best_practice=(
            "Should specify grounds for termination, notice periods, and post-termination obligations. "
            "Industry standard is 30-90 days notice."
        ),
        improvements=(
            "Ensure mutual termination rights",
            "Include cure period for breaches (typically 30 days)",
            "Clarify survival clauses",
        ),
    ),
    IndustryStandard(
        name="Liability",
        rating=ClauseRating.WORSE,
        best_practice=(
            "Should include reasonable liability caps and clear exclusions. Common practice limits "
            "indirect damages and caps liability at contract value."
        ),
        improvements=(
            "Consider mutual liability caps",
            "Exclude consequential damages",
            "Specify insurance requirements",
        ),
    ),
    IndustryStandard(
        name="Intellectual Property",
        rating=ClauseRating.STANDARD,
        best_practice=(
            "Should clearly define IP ownership, license grants, and derivative works. "
            "Best practice includes background IP protection."
        ),
        improvements=(
            "Clarify ownership of work product",
            "Define scope of license grants",
            "Address improvements and derivatives",
        ),
    ),
    IndustryStandard(
        name="Payment Terms",
        rating=ClauseRating.WORSE,
        best_practice=(
            "Industry standard is Net 30 with clear milestones. Should include late payment penalties "
            "and currency specifications."
        ),
        improvements=(
            "Negotiate more favorable payment terms (Net 30 or better)",
            "Add milestone-based payments",
            "Include interest on late payments",
        ),
    ),
    IndustryStandard(
        name="Indemnification",
        rating=ClauseRating.BETTER,
        best_practice=(
            "Should be mutual with reasonable limitations. Best practice includes notice requirements "
            "and right to control defense."
        ),
        improvements=(
            "Ensure indemnification is mutual",
            "Cap indemnification obligations",
            "Clarify procedures for indemnification claims",
        ),
    ),
)


def match_standard(clause: Clause) -> Optional[IndustryStandard]:
    title = clause.title.lower()
    content = clause.content.lower()
    for standard in INDUSTRY_STANDARDS:
        key = standard.name.lower()
        if key in title or key in content:
            return standard
    return None


def rate_clause(clause: Clause, index: int, analysis: DocumentAnalysis) -> RatedClause:
    standard = match_standard(clause)
    if standard is not None:
        rating = standard.rating
    else:
        title = clause.title.lower()
        flagged = any(title in risk.description.lower() for risk in analysis.risks)
        rating = ClauseRating.WORSE if flagged else ClauseRating.STANDARD
    return RatedClause(
        title=clause.title,
        content=clause.content,
        importance=clause.importance,
        rating=rating,
        matched_standard=standard,
        index=index,
    )


def benchmark(analysis: DocumentAnalysis) -> BenchmarkReport:
    """Rate every important clause; one rated entry per input clause, same order."""
    rated = [rate_clause(clause, index, analysis) for index, clause in enumerate(analysis.important_clauses)]
    counts: Dict[str, int] = {rating.value: 0 for rating in ClauseRating}
    for clause in rated:
        counts[clause.rating.value] += 1
    return BenchmarkReport(clauses=rated, counts=counts)
