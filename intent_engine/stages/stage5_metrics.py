"""
Stage 5: Aggregate Metrics
==========================
Summary statistics for a run and a coarse data-quality tier.

Tier = mean(contact rate, high-intent rate, enrichment rate):
    >= 0.7 high, >= 0.4 medium, >= 0.2 low, else very_low
    no_data when no company survived
"""

from typing import List, Dict, Optional, Any

from ..models.schemas import AggregateMetrics, Company, DataQualityTier
from ..config.settings import (
    TOTAL_SOURCES,
    QUALITY_TIERS,
    HIGH_INTENT_THRESHOLD,
    STRONG_INTENT_THRESHOLD,
)
from .stage3_scoring import round_half_up


class AggregateMetricsStage:
    """
    Stage 5: Compute run-level metrics.
    """

    def process(
        self,
        source_collections: Optional[Dict[Any, Any]],
        companies: Optional[List[Company]],
    ) -> AggregateMetrics:
        """
        Summarize a run. Never raises; missing collections count as empty.

        Args:
            source_collections: Mentions per source as fed to the pipeline
            companies: Final ranked companies

        Returns:
            AggregateMetrics
        """
        lengths = [self._length(c) for c in (source_collections or {}).values()]
        companies = companies or []
        total = len(companies)

        with_contacts = sum(1 for c in companies if c.contacts)
        high_intent = sum(1 for c in companies if c.intent_score >= HIGH_INTENT_THRESHOLD)
        enriched = sum(1 for c in companies if c.enrichment)

        metrics = AggregateMetrics(
            total_sources=TOTAL_SOURCES,
            sources_with_data=sum(1 for n in lengths if n > 0),
            total_data_points=sum(lengths),
            companies_found=total,
            companies_with_verified_contacts=with_contacts,
            companies_with_high_intent=sum(1 for c in companies if c.intent_score >= STRONG_INTENT_THRESHOLD),
            companies_enriched=enriched,
        )

        if total == 0:
            metrics.data_quality_tier = DataQualityTier.NO_DATA
            return metrics

        metrics.avg_intent_score = round_half_up(sum(c.intent_score for c in companies) / total)
        metrics.avg_confidence_score = round_half_up(sum(c.confidence_score for c in companies) / total)
        metrics.data_quality_tier = self.quality_tier(
            (with_contacts / total + high_intent / total + enriched / total) / 3
        )
        return metrics

    @staticmethod
    def quality_tier(quality: float) -> DataQualityTier:
        for threshold, tier in QUALITY_TIERS:
            if quality >= threshold:
                return DataQualityTier(tier)
        return DataQualityTier.VERY_LOW

    @staticmethod
    def _length(collection: Any) -> int:
        try:
            return len(collection) if collection is not None else 0
        except TypeError:
            return 0
