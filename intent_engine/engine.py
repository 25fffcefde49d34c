"""
Lead Intent Scoring Engine - Main Orchestrator
==============================================
Orchestrates the two-stage pipeline for every lead in a batch:
  Stage 1: Rule Scoring (0-50) -> Stage 2: Intent Classification (10/30/50)

Key properties:
- One failing lead never aborts the batch; it is scored with its rule score
  and a Low intent
- Leads are classified concurrently, results keep the input order
- The stored result set is replaced in one step once the batch is done
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from .models.schemas import (
    Intent,
    IntentResult,
    IntentSource,
    Lead,
    Offer,
    RuleScoreResult,
    ScoredLead,
    intent_points,
)
from .config.settings import SCORING_CONFIG
from .exceptions import PreconditionError
from .stages.stage1_rules import RuleScoringStage
from .stages.stage2_intent import IntentClassificationStage
from .store import ScoreStore

logger = logging.getLogger(__name__)

SCORING_FALLBACK_REASONING = "AI scoring failed, using fallback"


class LeadScoringEngine:
    """
    Main engine that scores lead batches against the active offer.
    """

    def __init__(
        self,
        store: Optional[ScoreStore] = None,
        intent_stage: Optional[IntentClassificationStage] = None,
        llm_api_key: Optional[str] = None,
        llm_provider: Optional[str] = None,
        max_concurrency: Optional[int] = None,
    ):
        """
        Initialize the scoring engine.

        Args:
            store: Store that receives each batch's results
            intent_stage: Preconfigured intent stage (built from the LLM settings if omitted)
            llm_api_key: API key for LLM provider
            llm_provider: LLM provider ("openrouter", "openai" or "anthropic")
            max_concurrency: Leads classified at once (1 = sequential)
        """
        self.store = store
        self.stage1 = RuleScoringStage()
        self.stage2 = intent_stage or IntentClassificationStage(
            api_key=llm_api_key, provider=llm_provider
        )
        self.max_concurrency = max(1, max_concurrency or SCORING_CONFIG["max_concurrency"])

        self.stats = self._empty_stats()

    async def run_scoring(self) -> List[ScoredLead]:
        """
        Score the store's current leads against its active offer.

        Raises:
            PreconditionError: no store, no active offer or no leads
        """
        if self.store is None:
            raise PreconditionError("No store configured for this engine.")

        offer = self.store.get_active_offer()
        if offer is None:
            raise PreconditionError("No offer found. Please create an offer first.")

        leads = self.store.get_leads()
        if not leads:
            raise PreconditionError("No leads uploaded. Please upload leads first.")

        return await self.score_batch(leads, offer)

    async def score_batch(self, leads: Sequence[Lead], offer: Optional[Offer]) -> List[ScoredLead]:
        """
        Score every lead in the batch.

        Args:
            leads: Leads to score
            offer: Active offer

        Returns:
            One ScoredLead per input lead, in input order

        Raises:
            PreconditionError: offer missing or no leads
        """
        if offer is None:
            raise PreconditionError("No offer found. Please create an offer first.")
        if not leads:
            raise PreconditionError("No leads uploaded. Please upload leads first.")

        start_time = time.time()
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def score_with_limit(lead: Lead) -> ScoredLead:
            async with semaphore:
                return await self.score_lead(lead, offer)

        # gather keeps input order regardless of completion order
        results = list(await asyncio.gather(*(score_with_limit(lead) for lead in leads)))

        total_time = (time.time() - start_time) * 1000
        self.stats["batches_run"] += 1
        self.stats["total_processing_time_ms"] += total_time

        if self.store is not None:
            self.store.set_results(results)

        logger.info(
            "Scored %d leads against offer %r in %.1f ms", len(results), offer.name, total_time
        )
        return results

    async def score_lead(self, lead: Lead, offer: Offer) -> ScoredLead:
        """
        Score one lead. Never raises: any unexpected failure falls back to the
        rule score plus a Low intent.
        """
        self.stats["total_processed"] += 1
        try:
            rule_result = self.stage1.process(lead, offer)
            intent_result = await self.stage2.classify(lead, offer)
            scored = self.combine(lead, rule_result, intent_result)
        except Exception:
            logger.exception("Error scoring lead %r, using fallback", lead.name)
            intent_result = IntentResult(
                intent=Intent.LOW,
                reasoning=SCORING_FALLBACK_REASONING,
                source=IntentSource.SCORING_FALLBACK,
            )
            scored = self.combine(lead, self.stage1.process(lead, offer), intent_result)

        self.stats["intent_sources"][intent_result.source.value] += 1
        return scored

    @staticmethod
    def combine(lead: Lead, rule_result: RuleScoreResult, intent_result: IntentResult) -> ScoredLead:
        """Final score = rule total + intent points"""
        return ScoredLead(
            name=lead.name,
            role=lead.role,
            company=lead.company,
            intent=intent_result.intent,
            score=rule_result.total_rule_score + intent_points(intent_result.intent),
            reasoning=intent_result.reasoning,
            rule_breakdown=rule_result.breakdown,
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics"""
        stats = {**self.stats, "intent_sources": dict(self.stats["intent_sources"])}
        stats["llm_configured"] = self.stage2.is_configured
        if stats["batches_run"] > 0:
            stats["avg_batch_time_ms"] = round(
                stats["total_processing_time_ms"] / stats["batches_run"], 2
            )
        if stats["total_processed"] > 0:
            stats["fallback_rate"] = round(
                (stats["total_processed"] - stats["intent_sources"][IntentSource.LLM.value])
                / stats["total_processed"] * 100, 1
            )
        return stats

    def reset_stats(self):
        """Reset engine statistics"""
        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            "batches_run": 0,
            "total_processed": 0,
            "intent_sources": {source.value: 0 for source in IntentSource},
            "total_processing_time_ms": 0,
        }


# =============================================================================
# Convenience Functions
# =============================================================================

def create_engine(
    store: Optional[ScoreStore] = None,
    llm_api_key: Optional[str] = None,
    llm_provider: Optional[str] = None,
) -> LeadScoringEngine:
    """
    Factory function to create a scoring engine bound to a store.

    Args:
        store: Store for offer, leads and results (a new one if omitted)
        llm_api_key: API key for LLM provider
        llm_provider: LLM provider name

    Returns:
        Configured LeadScoringEngine instance
    """
    return LeadScoringEngine(
        store=store or ScoreStore(),
        llm_api_key=llm_api_key,
        llm_provider=llm_provider,
    )


def quick_score(lead_data: Dict[str, Any], offer_data: Dict[str, Any]) -> RuleScoreResult:
    """
    Rule score for a single lead, no LLM.

    Args:
        lead_data: Dictionary with lead fields
        offer_data: Dictionary with offer fields

    Returns:
        RuleScoreResult
    """
    return RuleScoringStage().process(Lead(**lead_data), Offer(**offer_data))
