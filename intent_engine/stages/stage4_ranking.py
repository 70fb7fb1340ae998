"""
Stage 4: Ranking
================
Blends intent with actionability and orders the final lead list.

Rank Formula:
    rank = 0.4 * intent + 0.1 * confidence
         + min(10, 2 * signals)
         + contact bonus (25 + 5 per verified contact, if any contact)
         + enrichment bonus (20 + 5 revenue + 5 employees, if enriched)

Ties fall back to intent, then discovery order.
"""

from typing import List, Optional

from ..models.schemas import Company
from ..models.pipeline_config import RankingConfig
from ..config.settings import HIGH_CONFIDENCE_CONTACT


class RankingStage:
    """
    Stage 4: Rank scored companies.
    """

    def __init__(self, config: Optional[RankingConfig] = None):
        self.config = config or RankingConfig()

    def process(self, companies: List[Company]) -> List[Company]:
        """
        Drop zero-intent companies, score, sort and truncate.

        Args:
            companies: Scored companies

        Returns:
            At most max_results companies, best first
        """
        ranked = [c for c in companies if c.intent_score > 0]

        for company in ranked:
            company.rank_score = self.rank_score(company)

        ranked = sorted(
            ranked,
            key=lambda c: (-c.rank_score, -c.intent_score, c.discovery_order),
        )
        return ranked[:self.config.max_results]

    def rank_score(self, company: Company) -> float:
        """Composite rank score for one company"""
        cfg = self.config
        score = cfg.intent_weight * company.intent_score
        score += cfg.confidence_weight * company.confidence_score
        score += min(cfg.signal_cap, cfg.signal_points * len(company.signals))

        if company.contacts:
            verified = sum(1 for c in company.contacts if c.confidence > HIGH_CONFIDENCE_CONTACT)
            score += cfg.contact_base + cfg.contact_high_confidence_bonus * verified

        if company.enrichment:
            score += cfg.enrichment_base
            if company.enrichment.annual_revenue:
                score += cfg.enrichment_revenue_bonus
            if company.enrichment.employees:
                score += cfg.enrichment_employee_bonus

        return round(score, 4)
