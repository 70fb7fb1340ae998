"""
Stage 3: Intent Scoring
=======================
Fixed weight table turning a company's evidence into an itemized score.

Scoring Formula:
    intent_score = min(100, sum of signal points)
    confidence_score = round(mean signal confidence * 100)

Signals:
- Forum posts, by pre-scale buying intent (high / medium / low)
- News articles reporting funding (one signal per article)
- Firmographics: funding, company size, target market, industry
- Contacts: high-quality or merely available
"""

import math
import re
from typing import List, Dict, Optional, Any, Iterable

from ..models.schemas import (
    Company,
    Enrichment,
    RawMention,
    ScoreBreakdown,
    SignalRecord,
    SourceType,
)
from ..config.settings import (
    INTENT_LEXICON,
    BUDGET_PATTERN,
    ENGAGEMENT_BONUS,
    SIGNAL_WEIGHTS,
    NEWS_FUNDING_KEYWORDS,
    HIGH_VALUE_INDUSTRIES,
    TARGET_MARKETS,
    OPTIMAL_EMPLOYEE_RANGE,
    HIGH_CONFIDENCE_CONTACT,
    EVIDENCE_EXCERPT_LENGTH,
)
from .stage1_extraction import mentions_company


def _word_pattern(phrases: Iterable[str]):
    return re.compile(r"\b(?:" + "|".join(re.escape(p) for p in phrases) + r")\b", re.IGNORECASE)


_LEXICON = [
    (
        [re.compile(r"\b" + re.escape(p) + r"\b", re.IGNORECASE) for p in group["phrases"]],
        group["weight"],
    )
    for group in INTENT_LEXICON.values()
]
_BUDGET = re.compile(BUDGET_PATTERN["pattern"], re.IGNORECASE)
_NEWS_FUNDING = _word_pattern(NEWS_FUNDING_KEYWORDS)
_HIGH_VALUE_INDUSTRY = _word_pattern(HIGH_VALUE_INDUSTRIES)
_PRIMARY_MARKET = _word_pattern(TARGET_MARKETS["primary"])
_SECONDARY_MARKET = _word_pattern(TARGET_MARKETS["secondary"])


def round_half_up(value: float) -> int:
    return int(math.floor(round(value, 6) + 0.5))


def forum_intent_score(text: Optional[str], comments: int = 0, score: int = 0) -> int:
    """
    Pre-scale buying/selling intent of a forum post (nominally 0-10, uncapped).

    Every lexicon phrase present adds its group weight once; a budget or
    currency pattern adds a flat bonus; engagement adds up to 3 more.
    """
    if not text:
        return 0

    total = 0.0
    for patterns, weight in _LEXICON:
        total += weight * sum(1 for p in patterns if p.search(text))

    if _BUDGET.search(text):
        total += BUDGET_PATTERN["weight"]

    total += min(ENGAGEMENT_BONUS["comments_cap"], max(0, comments) / ENGAGEMENT_BONUS["comments_divisor"])
    total += min(ENGAGEMENT_BONUS["score_cap"], max(0, score) / ENGAGEMENT_BONUS["score_divisor"])

    return round_half_up(total)


def mention_intent(mention: RawMention) -> int:
    return forum_intent_score(mention.text, mention.comments, mention.score)


class IntentScoringStage:
    """
    Stage 3: Score a company's intent from its evidence and enrichment.
    """

    def __init__(self, weights: Optional[Dict[str, Dict[str, Any]]] = None):
        """
        Initialize with a signal weight table or use defaults.
        """
        self.weights = weights or SIGNAL_WEIGHTS

    def process(
        self,
        company: Company,
        all_mentions_by_source: Dict[Any, List[RawMention]],
        enrichment: Optional[Enrichment] = None,
    ) -> ScoreBreakdown:
        """
        Score a single company.

        Args:
            company: Merged company (contacts are read from it)
            all_mentions_by_source: Every mention of the run, keyed by source
            enrichment: Firmographics; falls back to company.enrichment

        Returns:
            ScoreBreakdown with intent, confidence and sorted signals
        """
        enrichment = enrichment or company.enrichment
        signals: List[SignalRecord] = []

        signals.extend(self._score_forum(self._related(company, all_mentions_by_source, SourceType.FORUM_POST)))
        signals.extend(self._score_news(self._related(company, all_mentions_by_source, SourceType.NEWS_ARTICLE)))

        if enrichment:
            signals.extend(self._score_enrichment(enrichment))

        signals.extend(self._score_contacts(company))

        # Highest contribution first; ties keep insertion order
        signals = sorted(signals, key=lambda s: -s.score_contribution)

        intent_score = min(100, sum(s.score_contribution for s in signals))
        confidence_score = 0
        if signals:
            mean_confidence = sum(s.confidence for s in signals) / len(signals)
            confidence_score = round_half_up(mean_confidence * 100)

        return ScoreBreakdown(
            intent_score=intent_score,
            confidence_score=confidence_score,
            signals=signals,
        )

    # =========================================================================
    # EVIDENCE ATTRIBUTION
    # =========================================================================

    def _related(
        self,
        company: Company,
        all_mentions_by_source: Dict[Any, List[RawMention]],
        source: SourceType,
    ) -> List[RawMention]:
        """Mentions of one source attributed to the company, each counted once"""
        own_keys = {m.key for m in company.mentions}
        collection = all_mentions_by_source.get(source)
        if collection is None:
            collection = all_mentions_by_source.get(source.value, [])

        related = []
        seen = set()
        for mention in collection or []:
            if mention.key in seen:
                continue
            if mention.key in own_keys or mentions_company(company.name, company.website, mention.text):
                seen.add(mention.key)
                related.append(mention)

        # Evidence carried by the company but absent from the run's collections
        for mention in company.mentions:
            if mention.source == source and mention.key not in seen:
                seen.add(mention.key)
                related.append(mention)

        return related

    # =========================================================================
    # SIGNAL RULES
    # =========================================================================

    def _signal(self, signal_type: str, description: str, source: Optional[str] = None,
                url: Optional[str] = None) -> SignalRecord:
        weight = self.weights[signal_type]
        return SignalRecord(
            type=signal_type,
            description=description,
            score_contribution=weight["points"],
            confidence=weight["confidence"],
            source=source,
            url=url,
        )

    def _score_forum(self, mentions: List[RawMention]) -> List[SignalRecord]:
        """One signal per forum post that clears the low-intent bar"""
        signals = []
        for mention in mentions:
            intent = mention_intent(mention)
            excerpt = _excerpt(mention.text)

            if intent >= self.weights["forum_high_intent"]["min_intent"]:
                signals.append(self._signal(
                    "forum_high_intent", f'High buying intent: "{excerpt}..."',
                    SourceType.FORUM_POST.value, mention.url,
                ))
            elif intent >= self.weights["forum_medium_intent"]["min_intent"]:
                signals.append(self._signal(
                    "forum_medium_intent", f'Medium buying intent: "{excerpt}..."',
                    SourceType.FORUM_POST.value, mention.url,
                ))
            elif intent >= self.weights["forum_low_intent"]["min_intent"]:
                signals.append(self._signal(
                    "forum_low_intent", f'Possible buying intent: "{excerpt}..."',
                    SourceType.FORUM_POST.value, mention.url,
                ))
        return signals

    def _score_news(self, mentions: List[RawMention]) -> List[SignalRecord]:
        """One signal per article that reports funding"""
        signals = []
        for mention in mentions:
            if _NEWS_FUNDING.search(mention.text or ""):
                signals.append(self._signal(
                    "news_funding", f"Funding news: {_excerpt(mention.title or mention.text)}",
                    SourceType.NEWS_ARTICLE.value, mention.url,
                ))
        return signals

    def _score_enrichment(self, enrichment: Enrichment) -> List[SignalRecord]:
        """Firmographic signals"""
        signals = []

        if enrichment.has_funding():
            signals.append(self._signal(
                "recent_funding", f"Funding: {enrichment.funding_total}", "enrichment",
            ))

        low, high = OPTIMAL_EMPLOYEE_RANGE
        if enrichment.employees is not None and low <= enrichment.employees <= high:
            signals.append(self._signal(
                "optimal_company_size", f"Company size: {enrichment.employees} employees", "enrichment",
            ))

        if enrichment.location:
            if _PRIMARY_MARKET.search(enrichment.location):
                signals.append(self._signal(
                    "target_market_primary", f"Primary market: {enrichment.location}", "enrichment",
                ))
            elif _SECONDARY_MARKET.search(enrichment.location):
                signals.append(self._signal(
                    "target_market_secondary", f"Secondary market: {enrichment.location}", "enrichment",
                ))

        if enrichment.industry and _HIGH_VALUE_INDUSTRY.search(enrichment.industry):
            signals.append(self._signal(
                "high_value_industry", f"High-value industry: {enrichment.industry}", "enrichment",
            ))

        return signals

    def _score_contacts(self, company: Company) -> List[SignalRecord]:
        """Contact signals (the two rows are exclusive)"""
        if not company.contacts:
            return []

        high_quality = [c for c in company.contacts if c.confidence > HIGH_CONFIDENCE_CONTACT]
        if high_quality:
            return [self._signal(
                "high_quality_contacts", f"{len(high_quality)} verified contacts available", "enrichment",
            )]
        return [self._signal(
            "contacts_available", f"{len(company.contacts)} contacts found", "enrichment",
        )]


def _excerpt(text: Optional[str]) -> str:
    return (text or "")[:EVIDENCE_EXCERPT_LENGTH]
