"""
Pydantic schemas for the Lead Intent Engine
"""

from enum import Enum
from typing import List, Dict, Optional, Any, Union
from pydantic import BaseModel, Field
from datetime import datetime


# =============================================================================
# ENUMS
# =============================================================================

class SourceType(str, Enum):
    """Kind of third-party source a mention came from"""
    FORUM_POST = "forum_post"
    NEWS_ARTICLE = "news_article"
    SOCIAL_POST = "social_post"
    TECH_STORY = "tech_story"
    FILING = "filing"
    DATASET = "dataset"
    LISTING = "listing"
    JOB_POSTING = "job_posting"


class DataQualityTier(str, Enum):
    """Coarse quality label for a pipeline run"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    VERY_LOW = "very_low"
    NO_DATA = "no_data"


class SummaryMode(str, Enum):
    """How the narrative analysis was produced"""
    LLM = "llm"
    TEMPLATE = "template"


# =============================================================================
# INPUT SCHEMAS
# =============================================================================

class RawMention(BaseModel):
    """One piece of text evidence from one source"""
    source: SourceType
    text: str
    timestamp: Optional[datetime] = None
    engagement: float = 0
    comments: int = 0
    score: int = 0
    url: Optional[str] = None
    title: Optional[str] = None

    class Config:
        frozen = True

    @classmethod
    def from_parts(
        cls,
        source: SourceType,
        title: Optional[str] = None,
        body: Optional[str] = None,
        **kwargs,
    ) -> "RawMention":
        """Build a mention whose text is the title and body joined by a space."""
        text = " ".join(part for part in (title, body) if part)
        return cls(source=source, text=text, title=title, **kwargs)

    @property
    def key(self) -> tuple:
        return (self.source.value, self.url, self.text)


class CandidateEntity(BaseModel):
    """A company name extracted from one text"""
    name: str
    inferred_domain: Optional[str] = None
    rule: str
    extraction_confidence: float = 0.7
    source_mention: Optional[RawMention] = None


class Contact(BaseModel):
    """A reachable person at a company"""
    email: str
    confidence: int = Field(default=0, ge=0, le=100)
    role: Optional[str] = None
    source: Optional[str] = None


class Enrichment(BaseModel):
    """Firmographic data for a company"""
    funding_total: Optional[Union[float, str]] = None
    employees: Optional[int] = None
    founded_year: Optional[int] = None
    industry: Optional[str] = None
    location: Optional[str] = None
    annual_revenue: Optional[Union[float, str]] = None

    def has_funding(self) -> bool:
        return bool(self.funding_total)


class EnrichmentResult(BaseModel):
    """What an enrichment lookup returns for one domain"""
    enrichment: Optional[Enrichment] = None
    contacts: List[Contact] = Field(default_factory=list)


# =============================================================================
# STAGE RESULT SCHEMAS
# =============================================================================

class SignalRecord(BaseModel):
    """One itemized, weighted reason behind an intent score"""
    type: str
    description: str
    score_contribution: int
    confidence: float
    source: Optional[str] = None
    url: Optional[str] = None


class ScoreBreakdown(BaseModel):
    """Result from Stage 3: Intent Scoring"""
    intent_score: int = 0
    confidence_score: int = 0
    signals: List[SignalRecord] = Field(default_factory=list)


class Company(BaseModel):
    """A merged, scored company"""
    name: str
    normalized_name: str
    website: Optional[str] = None
    mentions: List[RawMention] = Field(default_factory=list)
    mention_counts: Dict[str, int] = Field(default_factory=dict)
    discovery_source: str
    discovery_context: str = ""
    enrichment: Optional[Enrichment] = None
    contacts: List[Contact] = Field(default_factory=list)
    intent_score: int = 0
    confidence_score: int = 0
    signals: List[SignalRecord] = Field(default_factory=list)

    # Ordering only
    rank_score: float = Field(default=0.0, exclude=True)
    discovery_order: int = Field(default=0, exclude=True)

    @property
    def is_placeholder(self) -> bool:
        return not self.mention_counts


class AggregateMetrics(BaseModel):
    """Result from Stage 5: Aggregate Metrics"""
    total_sources: int = 8
    sources_with_data: int = 0
    total_data_points: int = 0
    companies_found: int = 0
    companies_with_verified_contacts: int = 0
    companies_with_high_intent: int = 0
    companies_enriched: int = 0
    avg_intent_score: int = 0
    avg_confidence_score: int = 0
    data_quality_tier: DataQualityTier = DataQualityTier.NO_DATA


# =============================================================================
# UNIFIED OUTPUT SCHEMAS
# =============================================================================

class PipelineResult(BaseModel):
    """Complete output of the core pipeline for one query"""
    query: str
    companies: List[Company] = Field(default_factory=list)
    metrics: AggregateMetrics = Field(default_factory=AggregateMetrics)
    source_counts: Dict[str, int] = Field(default_factory=dict)


class SearchMetadata(BaseModel):
    """Run metadata attached to a search response"""
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    processing_time_ms: float = 0
    cached: bool = False
    summary_mode: SummaryMode = SummaryMode.TEMPLATE


class SearchResponse(BaseModel):
    """API-level envelope around a pipeline result"""
    query: str
    companies: List[Company] = Field(default_factory=list)
    metrics: AggregateMetrics = Field(default_factory=AggregateMetrics)
    source_counts: Dict[str, int] = Field(default_factory=dict)
    analysis: str = ""
    metadata: SearchMetadata = Field(default_factory=SearchMetadata)
    status: str = "success"


# =============================================================================
# LEAD CAPTURE
# =============================================================================

class Lead(BaseModel):
    """An email alert sign-up"""
    id: str
    email: str
    query: str
    source: str = "website"
    status: str = "active"
    created_at: datetime = Field(default_factory=datetime.utcnow)
    last_active: datetime = Field(default_factory=datetime.utcnow)
    request_count: int = 1


class LeadStats(BaseModel):
    """Aggregate view over captured leads"""
    total_leads: int = 0
    active_leads: int = 0
    top_queries: List[Dict[str, Any]] = Field(default_factory=list)
    recent_leads: List[Lead] = Field(default_factory=list)
    leads_by_source: Dict[str, int] = Field(default_factory=dict)


# =============================================================================
# API REQUEST SCHEMAS
# =============================================================================

class PipelineRequest(BaseModel):
    """Run the core pipeline over caller-supplied source collections"""
    query: str
    source_collections: Any = None
    include_analysis: bool = False


class LeadRequest(BaseModel):
    """Sign up for alerts on a query"""
    email: str
    query: str
    source: Optional[str] = "website"
