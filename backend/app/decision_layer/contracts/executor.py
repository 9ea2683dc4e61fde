"""Answer Contract Executor helpers

Display headers and coverage (hedging) qualifications appended to the
answer-generation prompt.
"""

from typing import Optional, Union

from backend.app.decision_layer.models import (
    AnswerContract,
    CoverageSummary,
    CoverageThresholds,
)

CONTRACT_HEADERS: dict[AnswerContract, str] = {
    AnswerContract.CROSS_MEETING_QUESTIONS: "Customer Questions Across Meetings",
    AnswerContract.PATTERN_ANALYSIS: "Pattern Analysis",
    AnswerContract.COMPARISON: "Comparison",
    AnswerContract.TREND_SUMMARY: "Trend Summary",
}

LIMITED_COVERAGE_TEMPLATE = (
    "\n\nIMPORTANT - LIMITED COVERAGE QUALIFICATION:\n"
    "You are analyzing only {meetings} meeting(s) from {companies} company/companies.\n"
    "With limited coverage, you MUST:\n"
    "- Explicitly state the sample size: \"Based on {meetings} meeting(s)...\"\n"
    "- Avoid unqualified generalizations like \"customers consistently...\" or \"typically...\"\n"
    "- Use hedged language: \"In these meetings...\", \"From what I found...\", "
    "\"Among the meetings reviewed...\"\n"
    "- Do NOT extrapolate beyond what was directly observed"
)

COVERAGE_NOTE_TEMPLATE = (
    "\n\nCOVERAGE NOTE:\n"
    "You are analyzing {meetings} meeting(s) from {companies} company/companies.\n"
    "- Include sample size when making analytical claims: \"Across {meetings} meetings...\"\n"
    "- Qualify patterns: \"In several meetings reviewed...\" rather than absolute statements"
)

COVERAGE_TEMPLATE = (
    "\n\nCOVERAGE: Analyzing {meetings} meeting(s) from {companies} company/companies.\n"
    "When drawing conclusions, you may make analytical claims but should still ground "
    "them in the evidence."
)


def get_contract_header(contract: Union[AnswerContract, str]) -> str:
    """Display header of a contract; unknown tags are returned unchanged"""
    if isinstance(contract, AnswerContract):
        return CONTRACT_HEADERS.get(contract, contract.value)
    try:
        return CONTRACT_HEADERS.get(AnswerContract(contract), contract)
    except ValueError:
        return contract


def get_coverage_qualification(
    summary: CoverageSummary,
    thresholds: Optional[CoverageThresholds] = None,
) -> str:
    """Hedging instructions scaled to the amount of evidence"""
    limits = thresholds or CoverageThresholds.from_settings()
    meetings, companies = summary.total_meetings, summary.unique_companies

    if meetings <= limits.limited_max_meetings or companies <= limits.limited_max_companies:
        template = LIMITED_COVERAGE_TEMPLATE
    elif meetings <= limits.note_max_meetings or companies <= limits.note_max_companies:
        template = COVERAGE_NOTE_TEMPLATE
    else:
        template = COVERAGE_TEMPLATE

    return template.format(meetings=meetings, companies=companies)
