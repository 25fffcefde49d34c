"""
Stage 1: Rule Scoring
=====================
Deterministic 0-50 score from the lead's own fields and the active offer.

Components:
- Role relevance (0-20): decision maker > influencer > other
- Industry fit (0-20): ICP match > adjacent industry > no match
- Data completeness (0-10): share of the six lead fields that are filled in

Role and industry are ordered tier tables: the first row whose predicate
matches decides the score and reason.
"""

from typing import Callable, List, Optional, Tuple

from ..models.schemas import Lead, Offer, RuleBreakdown, RuleScoreResult
from ..config.settings import (
    DECISION_MAKER_TERMS,
    INFLUENCER_TERMS,
    ADJACENT_INDUSTRY_TERMS,
    REQUIRED_LEAD_FIELDS,
    ROLE_POINTS,
    INDUSTRY_POINTS,
    COMPLETENESS_MAX_POINTS,
    MAX_RULE_SCORE,
)

# (predicate, points, reason)
Tier = Tuple[Callable[..., bool], int, str]


def contains_any(text: str, terms: List[str]) -> bool:
    """True if any term is a substring of text."""
    return any(term in text for term in terms)


def first_token(use_case: str) -> str:
    """First space-delimited token of a use-case ("b2b saas" -> "b2b")."""
    return use_case.split(" ")[0]


def is_icp_match(industry: str, use_cases: List[str]) -> bool:
    """
    Exact ICP match: a use-case contains the whole industry string, or the
    industry contains a use-case's first token. Both inputs are lower-cased.
    """
    for use_case in use_cases:
        if industry in use_case or first_token(use_case) in industry:
            return True
    return False


def is_adjacent_industry(industry: str, use_cases: List[str]) -> bool:
    """Adjacent match: an adjacency term appears in the industry or in any use-case."""
    for term in ADJACENT_INDUSTRY_TERMS:
        if term in industry or any(term in use_case for use_case in use_cases):
            return True
    return False


class RuleScoringStage:
    """
    Stage 1: Score a lead against the offer with fixed rules.
    """

    def __init__(self):
        self.role_tiers: List[Tier] = [
            (
                lambda role: contains_any(role, DECISION_MAKER_TERMS),
                ROLE_POINTS["decision_maker"],
                "Decision maker role",
            ),
            (
                lambda role: contains_any(role, INFLUENCER_TERMS),
                ROLE_POINTS["influencer"],
                "Influencer role",
            ),
            (lambda role: True, ROLE_POINTS["other"], "Other role"),
        ]
        self.industry_tiers: List[Tier] = [
            (is_icp_match, INDUSTRY_POINTS["exact"], "Exact ICP match"),
            (is_adjacent_industry, INDUSTRY_POINTS["adjacent"], "Adjacent industry match"),
            (lambda industry, use_cases: True, INDUSTRY_POINTS["none"], "No industry match"),
        ]

    def process(self, lead: Lead, offer: Optional[Offer]) -> RuleScoreResult:
        """
        Calculate the rule score.

        Args:
            lead: Lead to score
            offer: Active offer; None scores as an offer with no use-cases

        Returns:
            RuleScoreResult with total and per-component breakdown
        """
        role_score, role_reason = self._score_role(lead)
        industry_score, industry_reason = self._score_industry(lead, offer)
        completeness_score, completeness_reason = self._score_completeness(lead)

        breakdown = RuleBreakdown(
            role_score=role_score,
            role_reason=role_reason,
            industry_score=industry_score,
            industry_reason=industry_reason,
            completeness_score=completeness_score,
            completeness_reason=completeness_reason,
        )

        return RuleScoreResult(
            total_rule_score=breakdown.total,
            max_rule_score=MAX_RULE_SCORE,
            breakdown=breakdown,
        )

    def _score_role(self, lead: Lead) -> Tuple[int, str]:
        """Role relevance (max 20 points)"""
        role = (lead.role or "").lower()
        return self._first_matching_tier(self.role_tiers, role)

    def _score_industry(self, lead: Lead, offer: Optional[Offer]) -> Tuple[int, str]:
        """Industry fit against the offer's ideal use-cases (max 20 points)"""
        industry = (lead.industry or "").lower()
        use_cases = [uc.lower() for uc in offer.ideal_use_cases] if offer else []
        return self._first_matching_tier(self.industry_tiers, industry, use_cases)

    def _score_completeness(self, lead: Lead) -> Tuple[int, str]:
        """Data completeness (max 10 points)"""
        total_fields = len(REQUIRED_LEAD_FIELDS)
        present = sum(
            1 for field in REQUIRED_LEAD_FIELDS
            if isinstance(getattr(lead, field, None), str) and getattr(lead, field).strip()
        )

        if present == total_fields:
            return COMPLETENESS_MAX_POINTS, "All fields present"
        return (
            COMPLETENESS_MAX_POINTS * present // total_fields,
            f"{present}/{total_fields} fields complete",
        )

    @staticmethod
    def _first_matching_tier(tiers: List[Tier], *args) -> Tuple[int, str]:
        for predicate, points, reason in tiers:
            if predicate(*args):
                return points, reason
        # Every table ends with a catch-all row
        raise ValueError("No tier matched")
