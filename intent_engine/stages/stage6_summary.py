"""
Stage 6: Narrative Summary
==========================
Natural-language report over a finished pipeline run.
Calls an LLM when one is configured and falls back to a deterministic
markdown template built only from the metrics and the top companies.
"""

import json
import logging
from typing import Optional, Dict, Any, List, Tuple
import os

from ..models.schemas import PipelineResult, SummaryMode
from ..config.settings import LLM_CONFIG

logger = logging.getLogger(__name__)

TOP_COMPANIES = 5


def build_payload(result: PipelineResult) -> Dict[str, Any]:
    """JSON-serializable summarizer input for a pipeline result"""
    return {
        "query": result.query,
        "source_counts": dict(result.source_counts),
        "companies": [c.model_dump(mode="json", exclude={"mentions"}) for c in result.companies],
        "metrics": result.metrics.model_dump(mode="json"),
    }


class NarrativeSummaryStage:
    """
    Stage 6: Generate the analysis text for a run.
    Uses the LLM when available, the template otherwise.
    """

    def __init__(self, api_key: Optional[str] = None, provider: Optional[str] = None, client: Any = None):
        """
        Initialize LLM client.

        Args:
            api_key: API key for LLM provider
            provider: LLM provider ("openrouter", "openai", or "anthropic")
            client: Pre-built client exposing the provider's SDK interface
        """
        self.api_key = api_key or LLM_CONFIG.get("api_key") or os.getenv("OPENROUTER_API_KEY")
        self.provider = provider or LLM_CONFIG.get("provider", "openrouter")
        self.model = LLM_CONFIG.get("model", "openai/gpt-4-turbo")
        self.base_url = LLM_CONFIG.get("base_url", "https://openrouter.ai/api/v1")
        self.site_url = LLM_CONFIG.get("site_url", "http://localhost:8000")
        self.app_name = LLM_CONFIG.get("app_name", "Lead Intent Engine")
        self.timeout = LLM_CONFIG.get("timeout_seconds", 30)
        self.client = client

        if self.client is None:
            self._initialize_client()

    def _initialize_client(self):
        """Initialize the LLM client based on provider"""
        if not self.api_key:
            return

        if self.provider == "openrouter":
            from openai import OpenAI
            self.client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                default_headers={
                    "HTTP-Referer": self.site_url,
                    "X-Title": self.app_name,
                }
            )
        elif self.provider == "openai":
            from openai import OpenAI
            self.client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        elif self.provider == "anthropic":
            from anthropic import Anthropic
            self.client = Anthropic(api_key=self.api_key, timeout=self.timeout)

    @property
    def llm_available(self) -> bool:
        return self.client is not None

    def process(self, payload: Dict[str, Any]) -> Tuple[str, SummaryMode]:
        """
        Generate the analysis for one run.

        Args:
            payload: {query, source_counts, companies, metrics}

        Returns:
            (analysis text, mode)
        """
        if not self.client:
            return self.render_template(payload), SummaryMode.TEMPLATE

        try:
            text = self._clean_response(self._call_llm(self._generate_prompt(payload)))
            if not text:
                raise ValueError("empty completion")
            return text, SummaryMode.LLM
        except Exception as e:
            logger.warning("summary.llm_failed provider=%s error=%s", self.provider, str(e)[:100])
            return self.render_template(payload), SummaryMode.TEMPLATE

    def _generate_prompt(self, payload: Dict[str, Any]) -> str:
        """Generate the LLM prompt with context"""
        companies = payload.get("companies", [])[:10]
        company_lines = [
            f"- {c.get('name')} (intent {c.get('intent_score')}/100, "
            f"confidence {c.get('confidence_score')}/100, source {c.get('discovery_source')})"
            for c in companies
        ]

        return f"""You are a business intelligence analyst. Analyze the lead data for the query "{payload.get('query', '')}".

SOURCE COUNTS:
{json.dumps(payload.get('source_counts', {}), indent=2)}

METRICS:
{json.dumps(payload.get('metrics', {}), indent=2)}

RANKED COMPANIES:
{chr(10).join(company_lines) if company_lines else '- None'}

Please provide:
1. **INTENT SIGNALS**: What buying/selling/investment intentions can you detect?
2. **MARKET TRENDS**: What patterns emerge from the data?
3. **KEY INSIGHTS**: Top 3 actionable insights
4. **POTENTIAL LEADS**: Companies showing strong intent and why

Format your response in markdown with clear sections and bullet points."""

    def _call_llm(self, prompt: str) -> str:
        """Call the LLM API"""
        if self.provider in ["openrouter", "openai"]:
            # Both OpenRouter and OpenAI use the same SDK interface
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": "You are a business intelligence analyst. Provide clear, actionable insights in markdown format."},
                    {"role": "user", "content": prompt}
                ],
                temperature=LLM_CONFIG.get("temperature", 0.3),
                max_tokens=LLM_CONFIG.get("max_tokens", 1000),
            )
            return response.choices[0].message.content

        elif self.provider == "anthropic":
            response = self.client.messages.create(
                model=self.model,
                max_tokens=LLM_CONFIG.get("max_tokens", 1000),
                messages=[
                    {"role": "user", "content": prompt}
                ],
            )
            return response.content[0].text

        raise ValueError(f"Unknown provider: {self.provider}")

    @staticmethod
    def _clean_response(response: Optional[str]) -> str:
        """Strip a surrounding markdown code fence if present"""
        clean = (response or "").strip()
        if clean.startswith("```"):
            clean = clean.split("```")[1]
            if clean.startswith("markdown"):
                clean = clean[len("markdown"):]
        return clean.strip()

    # =========================================================================
    # TEMPLATE FALLBACK
    # =========================================================================

    def render_template(self, payload: Dict[str, Any]) -> str:
        """Deterministic markdown report from metrics and the top companies"""
        query = payload.get("query", "")
        metrics = payload.get("metrics") or {}
        companies: List[Dict[str, Any]] = (payload.get("companies") or [])[:TOP_COMPANIES]

        data_points = metrics.get("total_data_points", 0)
        if data_points > 20:
            volume = "High"
        elif data_points > 10:
            volume = "Moderate"
        else:
            volume = "Limited"

        lines = [
            f'## Lead Intelligence Report for "{query}"',
            "",
            "### Data Overview",
            f"- Sources with data: {metrics.get('sources_with_data', 0)}/{metrics.get('total_sources', 0)}",
            f"- Total data points: {data_points}",
            f"- Data quality: {metrics.get('data_quality_tier', 'no_data')}",
            "",
            "### Companies",
            f"- Companies found: {metrics.get('companies_found', 0)}",
            f"- High-intent companies: {metrics.get('companies_with_high_intent', 0)}",
            f"- With verified contacts: {metrics.get('companies_with_verified_contacts', 0)}",
            f"- Average intent score: {metrics.get('avg_intent_score', 0)}/100",
            "",
            "### Top Leads",
        ]

        if companies:
            for company in companies:
                signals = company.get("signals") or []
                reason = signals[0].get("description") if signals else "No itemized signals"
                lines.append(
                    f"- **{company.get('name')}** (intent {company.get('intent_score', 0)}/100): {reason}"
                )
        else:
            lines.append("- No qualified companies yet; monitor sources for emerging opportunities")

        lines.extend([
            "",
            "### Key Insights",
            f"1. {volume} volume of relevant information for \"{query}\"",
            f"2. {metrics.get('companies_found', 0)} companies surfaced across "
            f"{metrics.get('sources_with_data', 0)} sources",
        ])
        return "\n".join(lines)
