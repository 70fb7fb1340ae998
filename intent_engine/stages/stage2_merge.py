"""
Stage 2: Entity Merge
=====================
Folds candidates from every source document into unique companies keyed by
normalized name, then drops low-evidence entities.

Qualification gate (any one is enough):
- A forum post with pre-scale intent >= 6
- Two or more distinct news articles
- A social post with engagement above the threshold
- A forum post mentioning a budget or a currency amount

When too few companies survive, placeholder companies derived from the query
are added and tagged as market research.
"""

import logging
import re
from typing import List, Dict, Optional, Any

from ..models.schemas import Company, RawMention, SourceType
from ..models.pipeline_config import PipelineConfig, create_default_pipeline_config
from .stage1_extraction import EntityExtractionStage, normalize_name, infer_domain
from .stage3_scoring import mention_intent

logger = logging.getLogger(__name__)

DISCOVERY_CONTEXT_LENGTH = 100


class EntityMergeStage:
    """
    Stage 2: Merge extracted candidates into qualified companies.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        extractor: Optional[EntityExtractionStage] = None,
    ):
        self.config = config or create_default_pipeline_config()
        self.extractor = extractor or EntityExtractionStage()
        self.budget_regex = re.compile(self.config.qualification.budget_pattern, re.IGNORECASE)

    def process(self, source_collections: Dict[SourceType, List[RawMention]], query: str) -> List[Company]:
        """
        Merge and qualify companies across all sources.

        Args:
            source_collections: Mentions per source (every SourceType present)
            query: Search query, used for backfill names

        Returns:
            Qualified companies in discovery order, plus any placeholders
        """
        folded = self.fold(source_collections)
        qualified = [c for c in folded if self.qualifies(c)]

        logger.info(
            "merge.completed candidates=%d qualified=%d",
            len(folded), len(qualified),
        )

        backfill = self.config.backfill
        if backfill.enabled and len(qualified) < backfill.min_companies:
            qualified.extend(self._backfill(source_collections, query, qualified, len(folded)))

        return qualified

    # =========================================================================
    # FOLDING
    # =========================================================================

    def fold(self, source_collections: Dict[SourceType, List[RawMention]]) -> List[Company]:
        """Fold every candidate into a running map keyed by normalized name"""
        companies: Dict[str, Company] = {}

        for source, mention in self._iter_mentions(source_collections):
            for candidate in self.extractor.extract(mention.text):
                key = normalize_name(candidate.name)
                company = companies.get(key)

                if company is None:
                    companies[key] = Company(
                        name=candidate.name,
                        normalized_name=key,
                        website=candidate.inferred_domain,
                        mentions=[mention],
                        mention_counts={source.value: 1},
                        discovery_source=source.value,
                        discovery_context=mention.text[:DISCOVERY_CONTEXT_LENGTH],
                        discovery_order=len(companies),
                    )
                else:
                    company.mention_counts[source.value] = company.mention_counts.get(source.value, 0) + 1
                    company.mentions.append(mention)

        return list(companies.values())

    def _iter_mentions(self, source_collections: Dict[SourceType, List[RawMention]]):
        """Well-formed mentions in SourceType order, then collection order"""
        for source in SourceType:
            for mention in source_collections.get(source) or []:
                if not isinstance(mention, RawMention) or not isinstance(mention.text, str) \
                        or not mention.text.strip():
                    logger.debug("merge.skipped_mention source=%s", source.value)
                    continue
                yield source, mention

    # =========================================================================
    # QUALIFICATION
    # =========================================================================

    def qualifies(self, company: Company) -> bool:
        """True if the company clears at least one gate condition"""
        gate = self.config.qualification
        news_keys = set()

        for mention in company.mentions:
            if mention.source == SourceType.FORUM_POST:
                if mention_intent(mention) >= gate.min_forum_intent:
                    return True
                if self.budget_regex.search(mention.text):
                    return True
            elif mention.source == SourceType.SOCIAL_POST:
                if mention.engagement > gate.min_social_engagement:
                    return True
            elif mention.source == SourceType.NEWS_ARTICLE:
                news_keys.add(mention.url or mention.text)

        return len(news_keys) >= gate.min_news_mentions

    # =========================================================================
    # BACKFILL
    # =========================================================================

    def _backfill(
        self,
        source_collections: Dict[SourceType, List[RawMention]],
        query: str,
        existing: List[Company],
        order_offset: int,
    ) -> List[Company]:
        """Placeholder companies named after the query"""
        backfill = self.config.backfill
        term = (query or "").strip()
        all_mentions = [m for _, m in self._iter_mentions(source_collections)]
        if not term or not all_mentions:
            return []

        lowered = term.lower()
        evidence = [m for m in all_mentions if lowered in m.text.lower()] or all_mentions
        display = " ".join(word.capitalize() for word in term.split())

        taken = {c.normalized_name for c in existing}
        placeholders = []
        for suffix in backfill.suffixes:
            if len(existing) + len(placeholders) >= backfill.target_companies:
                break

            name = f"{display} {suffix}"
            key = normalize_name(name)
            if key in taken:
                continue
            taken.add(key)

            placeholders.append(Company(
                name=name,
                normalized_name=key,
                website=infer_domain(name),
                mentions=list(evidence),
                mention_counts={},
                discovery_source=backfill.discovery_source,
                discovery_context=evidence[0].text[:DISCOVERY_CONTEXT_LENGTH],
                discovery_order=order_offset + len(placeholders),
            ))

        logger.info("merge.backfilled query=%s placeholders=%d", term, len(placeholders))
        return placeholders
