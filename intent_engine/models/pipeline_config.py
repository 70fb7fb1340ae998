"""
Pipeline Configuration Models
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from ..config.settings import (
    DEFAULT_QUALIFICATION,
    DEFAULT_BACKFILL,
    DEFAULT_RANKING,
    SOURCE_CONFIG,
    CACHE_CONFIG,
)


class QualificationGate(BaseModel):
    """Evidence a company needs to survive the merge stage"""
    min_forum_intent: int = DEFAULT_QUALIFICATION["min_forum_intent"]
    min_news_mentions: int = DEFAULT_QUALIFICATION["min_news_mentions"]
    min_social_engagement: float = DEFAULT_QUALIFICATION["min_social_engagement"]
    budget_pattern: str = DEFAULT_QUALIFICATION["budget_pattern"]


class BackfillPolicy(BaseModel):
    """Placeholder insertion when extraction yields too few companies"""
    enabled: bool = DEFAULT_BACKFILL["enabled"]
    min_companies: int = DEFAULT_BACKFILL["min_companies"]
    target_companies: int = DEFAULT_BACKFILL["target_companies"]
    suffixes: List[str] = Field(default_factory=lambda: list(DEFAULT_BACKFILL["suffixes"]))
    discovery_source: str = DEFAULT_BACKFILL["discovery_source"]


class RankingConfig(BaseModel):
    """Weights for the composite rank score"""
    intent_weight: float = DEFAULT_RANKING["intent_weight"]
    confidence_weight: float = DEFAULT_RANKING["confidence_weight"]
    signal_points: int = DEFAULT_RANKING["signal_points"]
    signal_cap: int = DEFAULT_RANKING["signal_cap"]
    contact_base: int = DEFAULT_RANKING["contact_base"]
    contact_high_confidence_bonus: int = DEFAULT_RANKING["contact_high_confidence_bonus"]
    enrichment_base: int = DEFAULT_RANKING["enrichment_base"]
    enrichment_revenue_bonus: int = DEFAULT_RANKING["enrichment_revenue_bonus"]
    enrichment_employee_bonus: int = DEFAULT_RANKING["enrichment_employee_bonus"]
    max_results: int = DEFAULT_RANKING["max_results"]


class SourceFetchConfig(BaseModel):
    """Fan-out settings for source collection"""
    timeout_seconds: float = SOURCE_CONFIG["task_timeout_seconds"]
    max_workers: int = SOURCE_CONFIG["max_workers"]
    per_source_limit: int = SOURCE_CONFIG["per_source_limit"]


class CacheConfig(BaseModel):
    """Response cache sizing"""
    enabled: bool = True
    max_entries: int = CACHE_CONFIG["max_entries"]
    ttl_seconds: int = CACHE_CONFIG["ttl_seconds"]


class PipelineConfig(BaseModel):
    """Complete pipeline configuration"""

    # Stage 2: Merge
    qualification: QualificationGate = Field(default_factory=QualificationGate)
    backfill: BackfillPolicy = Field(default_factory=BackfillPolicy)

    # Stage 4: Ranking
    ranking: RankingConfig = Field(default_factory=RankingConfig)

    # Orchestration
    sources: SourceFetchConfig = Field(default_factory=SourceFetchConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    enable_enrichment: bool = True
    enable_llm_summary: bool = True


def create_default_pipeline_config(
    max_results: Optional[int] = None,
    backfill_enabled: Optional[bool] = None,
    source_timeout_seconds: Optional[float] = None,
    enable_llm_summary: Optional[bool] = None,
) -> PipelineConfig:
    """
    Factory function to create a pipeline config with sensible defaults
    """
    config = PipelineConfig()

    if max_results is not None:
        config.ranking.max_results = max_results

    if backfill_enabled is not None:
        config.backfill.enabled = backfill_enabled

    if source_timeout_seconds is not None:
        config.sources.timeout_seconds = source_timeout_seconds

    if enable_llm_summary is not None:
        config.enable_llm_summary = enable_llm_summary

    return config
