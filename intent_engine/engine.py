"""
Lead Intent Engine - Main Orchestrator
======================================
Orchestrates source collection and the staged pipeline:
  Sources (concurrent) → Stage 1: Extraction → Stage 2: Merge →
  Enrichment → Stage 3: Scoring → Stage 4: Ranking →
  Stage 5: Metrics → Stage 6: Summary

Key properties:
- One dead or slow source never fails the batch (it resolves to [])
- The core stages are synchronous and deterministic
- Full search responses are cached per normalized query
"""

import logging
import threading
import time
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from datetime import datetime
from typing import Optional, List, Dict, Any, Callable, Tuple

from pydantic import ValidationError

from .cache import ResultCache, normalize_query
from .errors import PipelineInputError
from .models.schemas import (
    Company,
    Enrichment,
    EnrichmentResult,
    PipelineResult,
    RawMention,
    SearchMetadata,
    SearchResponse,
    SourceType,
    SummaryMode,
)
from .models.pipeline_config import PipelineConfig, create_default_pipeline_config
from .stages.stage1_extraction import EntityExtractionStage
from .stages.stage2_merge import EntityMergeStage
from .stages.stage3_scoring import IntentScoringStage
from .stages.stage4_ranking import RankingStage
from .stages.stage5_metrics import AggregateMetricsStage
from .stages.stage6_summary import NarrativeSummaryStage, build_payload
from .sources.providers import SourceProvider, create_default_providers
from .enrichment.lookups import create_default_enrichment_lookup

logger = logging.getLogger(__name__)

EnrichmentLookup = Callable[[Optional[str]], Any]

MIN_QUERY_LENGTH = 2


class IntentPipelineEngine:
    """
    Main Lead Intent Engine that orchestrates sources and all six stages.
    """

    def __init__(
        self,
        pipeline_config: Optional[PipelineConfig] = None,
        providers: Optional[List[SourceProvider]] = None,
        enrichment_lookup: Optional[EnrichmentLookup] = None,
        summarizer: Optional[NarrativeSummaryStage] = None,
        llm_api_key: Optional[str] = None,
        llm_provider: Optional[str] = None,
    ):
        """
        Initialize the engine.

        Args:
            pipeline_config: Pipeline configuration (uses defaults if not provided)
            providers: Source providers (uses configured live providers if not provided)
            enrichment_lookup: Callable website -> EnrichmentResult used by search()
            summarizer: Narrative summary stage (built from the LLM settings if not provided)
            llm_api_key: API key for LLM provider
            llm_provider: LLM provider ("openrouter", "openai" or "anthropic")
        """
        self.config = pipeline_config or create_default_pipeline_config()
        self.providers = providers if providers is not None else create_default_providers()

        if enrichment_lookup is None and self.config.enable_enrichment:
            enrichment_lookup = create_default_enrichment_lookup()
        self.enrichment_lookup = enrichment_lookup

        # Initialize stages
        self.stage1 = EntityExtractionStage()
        self.stage2 = EntityMergeStage(self.config, extractor=self.stage1)
        self.stage3 = IntentScoringStage()
        self.stage4 = RankingStage(self.config.ranking)
        self.stage5 = AggregateMetricsStage()
        self.stage6 = summarizer or NarrativeSummaryStage(api_key=llm_api_key, provider=llm_provider)

        self.cache = ResultCache(
            max_entries=self.config.cache.max_entries,
            ttl_seconds=self.config.cache.ttl_seconds,
        )

        # Track statistics
        self._stats_lock = threading.Lock()
        self.reset_stats()

    # =========================================================================
    # SOURCE COLLECTION
    # =========================================================================

    def collect_sources(self, query: str) -> Dict[SourceType, List[RawMention]]:
        """
        Fetch every provider concurrently and wait for all to settle.

        Args:
            query: Search query

        Returns:
            Mentions per source; every SourceType is present, failed
            or timed-out providers contribute nothing
        """
        collections: Dict[SourceType, List[RawMention]] = {source: [] for source in SourceType}
        if not self.providers:
            return collections

        timeout = self.config.sources.timeout_seconds
        executor = ThreadPoolExecutor(max_workers=max(1, min(self.config.sources.max_workers, len(self.providers))))
        try:
            futures = [(executor.submit(provider.fetch, query), provider) for provider in self.providers]
            deadline = time.time() + timeout

            for future, provider in futures:
                try:
                    mentions = future.result(timeout=max(0.0, deadline - time.time()))
                except FuturesTimeoutError:
                    future.cancel()
                    self._bump("source_failures")
                    logger.warning("sources.timeout provider=%s timeout_s=%s", provider.name, timeout)
                    continue
                except Exception as e:
                    self._bump("source_failures")
                    logger.warning(
                        "sources.failed provider=%s code=%s error=%s",
                        provider.name, getattr(e, "code", "unexpected"), str(e)[:200],
                    )
                    continue

                valid = [m for m in mentions or [] if isinstance(m, RawMention)]
                collections[SourceType(provider.source_type)].extend(valid)
                logger.info("sources.fetched provider=%s mentions=%d", provider.name, len(valid))
        finally:
            # Do not block on providers that outlived their deadline
            executor.shutdown(wait=False)

        return collections

    # =========================================================================
    # CORE PIPELINE
    # =========================================================================

    def run_pipeline(
        self,
        query: str,
        source_collections: Any,
        enrichment_lookup: Optional[EnrichmentLookup] = None,
    ) -> PipelineResult:
        """
        Run stages 1-5 over already-collected mentions.

        Args:
            query: Search query (names backfill placeholders)
            source_collections: Mapping of source -> list of RawMention or dicts
            enrichment_lookup: Optional callable website -> EnrichmentResult

        Returns:
            PipelineResult with ranked companies, metrics and source counts

        Raises:
            PipelineInputError: source_collections is structurally invalid
        """
        start_time = time.time()
        self._bump("pipeline_runs")

        collections, source_counts = self._normalize_collections(source_collections)

        # =====================================================================
        # STAGES 1-2: Extraction + Merge
        # =====================================================================
        companies = self.stage2.process(collections, query)

        # =====================================================================
        # ENRICHMENT (once per surviving company)
        # =====================================================================
        if enrichment_lookup is not None:
            for company in companies:
                if company.is_placeholder:
                    continue
                self._enrich(company, enrichment_lookup)

        # =====================================================================
        # STAGE 3: Scoring
        # =====================================================================
        for company in companies:
            breakdown = self.stage3.process(company, collections)
            company.intent_score = breakdown.intent_score
            company.confidence_score = breakdown.confidence_score
            company.signals = breakdown.signals

        # =====================================================================
        # STAGES 4-5: Ranking + Metrics
        # =====================================================================
        ranked = self.stage4.process(companies)
        metrics = self.stage5.process(source_collections, ranked)

        total_time = (time.time() - start_time) * 1000
        self._bump("total_processing_time_ms", total_time)
        logger.info(
            "pipeline.completed query=%s companies=%d tier=%s duration_ms=%.2f",
            query, len(ranked), metrics.data_quality_tier.value, total_time,
        )

        return PipelineResult(
            query=query,
            companies=ranked,
            metrics=metrics,
            source_counts=source_counts,
        )

    def summarize(self, result: PipelineResult) -> Tuple[str, SummaryMode]:
        """Stage 6 with template fallback"""
        payload = build_payload(result)
        if not self.config.enable_llm_summary:
            analysis, mode = self.stage6.render_template(payload), SummaryMode.TEMPLATE
        else:
            analysis, mode = self.stage6.process(payload)

        if mode == SummaryMode.LLM:
            self._bump("llm_summaries")
        else:
            self._bump("template_summaries")
        return analysis, mode

    # =========================================================================
    # SEARCH
    # =========================================================================

    def search(self, query: str, use_cache: bool = True) -> SearchResponse:
        """
        Full search: cache, sources, pipeline, summary.

        Args:
            query: Search query (at least 2 characters)
            use_cache: Serve and store cached responses

        Returns:
            SearchResponse
        """
        start_time = time.time()
        if not isinstance(query, str) or len(query.strip()) < MIN_QUERY_LENGTH:
            raise PipelineInputError(
                f"query must be at least {MIN_QUERY_LENGTH} characters", code="invalid_query"
            )
        query = query.strip()
        self._bump("total_searches")

        use_cache = use_cache and self.config.cache.enabled
        if use_cache:
            cached = self.cache.get(query)
            if cached is not None:
                self._bump("cache_hits")
                logger.info("search.cache_hit query=%s", normalize_query(query))
                response = cached.model_copy(deep=True)
                response.metadata.cached = True
                response.metadata.processing_time_ms = round((time.time() - start_time) * 1000, 2)
                return response

        collections = self.collect_sources(query)
        result = self.run_pipeline(query, collections, self.enrichment_lookup)
        analysis, mode = self.summarize(result)

        response = SearchResponse(
            query=query,
            companies=result.companies,
            metrics=result.metrics,
            source_counts=result.source_counts,
            analysis=analysis,
            metadata=SearchMetadata(
                timestamp=datetime.utcnow(),
                processing_time_ms=round((time.time() - start_time) * 1000, 2),
                cached=False,
                summary_mode=mode,
            ),
        )

        if use_cache:
            self.cache.set(query, response)
        return response

    # =========================================================================
    # STATISTICS
    # =========================================================================

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics"""
        with self._stats_lock:
            stats = self.stats.copy()
        if stats["total_searches"] > 0:
            stats["cache_hit_rate"] = round(stats["cache_hits"] / stats["total_searches"] * 100, 1)
        if stats["pipeline_runs"] > 0:
            stats["avg_processing_time_ms"] = round(
                stats["total_processing_time_ms"] / stats["pipeline_runs"], 2
            )
        stats["cached_queries"] = len(self.cache)
        stats["providers"] = [p.name for p in self.providers]
        return stats

    def reset_stats(self):
        """Reset engine statistics"""
        with self._stats_lock:
            self.stats = {
                "total_searches": 0,
                "cache_hits": 0,
                "pipeline_runs": 0,
                "source_failures": 0,
                "enrichment_failures": 0,
                "llm_summaries": 0,
                "template_summaries": 0,
                "total_processing_time_ms": 0,
            }

    def _bump(self, key: str, amount: int = 1):
        with self._stats_lock:
            self.stats[key] += amount

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def _normalize_collections(
        self, source_collections: Any
    ) -> Tuple[Dict[SourceType, List[RawMention]], Dict[str, int]]:
        """Validate caller input into mentions per SourceType plus raw counts"""
        if not isinstance(source_collections, Mapping):
            raise PipelineInputError(
                "source_collections must be a mapping of source type to list",
                code="invalid_collections",
            )

        collections: Dict[SourceType, List[RawMention]] = {source: [] for source in SourceType}
        counts: Dict[str, int] = {source.value: 0 for source in SourceType}

        for key, collection in source_collections.items():
            try:
                source = SourceType(key)
            except ValueError:
                raise PipelineInputError(f"unknown source type: {key!r}", code="unknown_source") from None

            if not isinstance(collection, (list, tuple)):
                raise PipelineInputError(
                    f"collection for {source.value} must be a list", code="invalid_collection"
                )

            counts[source.value] += len(collection)
            for item in collection:
                mention = self._coerce_mention(source, item)
                if mention is not None:
                    collections[source].append(mention)

        return collections, counts

    @staticmethod
    def _coerce_mention(source: SourceType, item: Any) -> Optional[RawMention]:
        """RawMention from a mention or dict; None for malformed items"""
        if isinstance(item, RawMention):
            return item if item.source == source else item.model_copy(update={"source": source})

        if not isinstance(item, dict):
            logger.debug("pipeline.skipped_item source=%s type=%s", source.value, type(item).__name__)
            return None

        data = dict(item)
        data["source"] = source
        if not data.get("text"):
            body = data.pop("body", None) or data.get("description")
            data["text"] = " ".join(part for part in (data.get("title"), body) if part)
        data.pop("description", None)

        try:
            return RawMention.model_validate(data)
        except ValidationError:
            logger.debug("pipeline.skipped_item source=%s reason=invalid", source.value)
            return None

    def _enrich(self, company: Company, lookup: EnrichmentLookup):
        """Attach enrichment and contacts; failures leave the company unenriched"""
        try:
            result = lookup(company.website)
        except Exception as e:
            self._bump("enrichment_failures")
            logger.warning(
                "enrichment.unavailable company=%s code=%s error=%s",
                company.name, getattr(e, "code", "unexpected"), str(e)[:200],
            )
            return

        if result is None:
            return
        if isinstance(result, Enrichment):
            result = EnrichmentResult(enrichment=result)
        elif isinstance(result, dict):
            try:
                result = EnrichmentResult.model_validate(result)
            except ValidationError:
                logger.warning("enrichment.invalid company=%s", company.name)
                return

        company.enrichment = result.enrichment
        company.contacts = list(result.contacts)


# =============================================================================
# Convenience Functions
# =============================================================================

def create_engine(
    providers: Optional[List[SourceProvider]] = None,
    max_results: Optional[int] = None,
    backfill_enabled: Optional[bool] = None,
    llm_api_key: Optional[str] = None,
) -> IntentPipelineEngine:
    """
    Factory function to create a Lead Intent Engine with common settings.

    Args:
        providers: Source providers (live providers if not provided)
        max_results: Output budget for the ranked list
        backfill_enabled: Toggle placeholder backfill
        llm_api_key: API key for LLM provider

    Returns:
        Configured IntentPipelineEngine instance
    """
    config = create_default_pipeline_config(
        max_results=max_results,
        backfill_enabled=backfill_enabled,
    )
    return IntentPipelineEngine(pipeline_config=config, providers=providers, llm_api_key=llm_api_key)


def quick_run(query: str, source_collections: Dict[Any, List[Any]]) -> PipelineResult:
    """
    Run the core pipeline once over in-memory collections.

    Args:
        query: Search query
        source_collections: Mapping of source -> list of mentions or dicts

    Returns:
        PipelineResult
    """
    config = create_default_pipeline_config(enable_llm_summary=False)
    config.enable_enrichment = False
    engine = IntentPipelineEngine(pipeline_config=config, providers=[])
    return engine.run_pipeline(query, source_collections)
