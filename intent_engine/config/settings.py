"""
Configuration settings for the Lead Intent Engine
"""

from typing import Dict, List, Any
import os

# =============================================================================
# LLM CONFIGURATION (OpenRouter)
# =============================================================================

LLM_CONFIG = {
    "provider": os.getenv("LLM_PROVIDER", "openrouter"),  # openrouter, openai, anthropic
    "model": os.getenv("LLM_MODEL", "openai/gpt-4-turbo"),  # OpenRouter model format
    "api_key": os.getenv("OPENROUTER_API_KEY", ""),
    "base_url": os.getenv("LLM_BASE_URL", "https://openrouter.ai/api/v1"),
    "max_tokens": 1000,
    "temperature": 0.3,
    "timeout_seconds": float(os.getenv("LLM_TIMEOUT_SECONDS", "30")),
    # OpenRouter specific headers
    "site_url": os.getenv("OPENROUTER_SITE_URL", "http://localhost:8000"),
    "app_name": os.getenv("OPENROUTER_APP_NAME", "Lead Intent Engine"),
}

# =============================================================================
# SOURCE PROVIDERS
# =============================================================================

SOURCE_CONFIG = {
    "reddit_client_id": os.getenv("REDDIT_CLIENT_ID", ""),
    "reddit_client_secret": os.getenv("REDDIT_CLIENT_SECRET", ""),
    "reddit_user_agent": os.getenv("REDDIT_USER_AGENT", "LeadIntentEngine/1.0"),
    "reddit_subreddits": ["business", "entrepreneur", "smallbusiness", "startups", "canada", "toronto"],
    "newsapi_key": os.getenv("NEWSAPI_KEY", ""),
    "newsapi_url": "https://newsapi.org/v2/everything",
    "newsapi_domains": "techcrunch.com,bloomberg.com,reuters.com,wsj.com,fortune.com,businessinsider.com,cnbc.com,theglobeandmail.com,financialpost.com",
    "x_bearer_token": os.getenv("X_BEARER_TOKEN", ""),
    "x_search_url": "https://api.twitter.com/2/tweets/search/recent",
    "hackernews_url": "https://hn.algolia.com/api/v1/search",
    "datagov_url": "https://catalog.data.gov/api/3/action/package_search",
    "sec_search_url": "https://efts.sec.gov/LATEST/search-index",
    "sec_user_agent": os.getenv("SEC_USER_AGENT", "LeadIntentEngine/1.0"),
    "per_source_limit": int(os.getenv("SOURCE_LIMIT", "10")),
    "request_timeout_seconds": float(os.getenv("SOURCE_REQUEST_TIMEOUT", "8")),
    "task_timeout_seconds": float(os.getenv("SOURCE_TASK_TIMEOUT", "10")),
    "max_workers": 8,
}

# =============================================================================
# ENRICHMENT PROVIDERS
# =============================================================================

ENRICHMENT_CONFIG = {
    "hunter_api_key": os.getenv("HUNTER_API_KEY", ""),
    "hunter_url": "https://api.hunter.io/v2/domain-search",
    "hunter_min_confidence": 70,
    "hunter_max_contacts": 3,
    "clearbit_api_key": os.getenv("CLEARBIT_API_KEY", ""),
    "clearbit_url": "https://company.clearbit.com/v2/companies/find",
    "request_timeout_seconds": float(os.getenv("ENRICHMENT_TIMEOUT", "15")),
}

# Roles worth contacting (matched against the contact position)
RELEVANT_CONTACT_ROLES = [
    "ceo", "founder", "president", "director", "sales",
    "business development", "marketing", "manager",
]

# =============================================================================
# API / CACHE
# =============================================================================

ADMIN_API_KEY = os.getenv("ADMIN_API_KEY", "")

CACHE_CONFIG = {
    "max_entries": int(os.getenv("CACHE_MAX_ENTRIES", "100")),
    "ttl_seconds": int(os.getenv("CACHE_TTL_SECONDS", "1800")),
}

# =============================================================================
# STAGE 1: EXTRACTION RULES
# =============================================================================

_CAP_WORD = r"[A-Z][A-Za-z0-9&'\-]*"

LEGAL_SUFFIXES = [
    "Inc", "Corp", "LLC", "Ltd", "Company", "Solutions", "Technologies",
    "Systems", "Software", "Group", "Services", "Consulting", "Partners",
    "Associates",
]

WEB_TLDS = ["com", "ca", "org", "net", "io", "ai"]

BUSINESS_NOUNS = ["startup", "company", "business", "firm", "agency", "studio", "labs?", "ventures?"]

# Suffix and noun tokens that never identify a company on their own
GENERIC_NAME_WORDS = {s.lower() for s in LEGAL_SUFFIXES} | {
    "startup", "company", "business", "firm", "agency", "studio",
    "lab", "labs", "venture", "ventures",
}

# Ordered: earlier rules win when spans overlap
EXTRACTION_RULES = [
    {
        "rule": "legal_suffix",
        "pattern": rf"\b(?:{_CAP_WORD}\s+){{1,5}}(?:{'|'.join(LEGAL_SUFFIXES)})\b\.?",
    },
    {
        "rule": "camel_case",
        "pattern": rf"\b[A-Z][a-z]+[A-Z][A-Za-z0-9]+\b(?!\.(?:{'|'.join(WEB_TLDS)})\b)",
    },
    {
        "rule": "web_domain",
        "pattern": rf"\b{_CAP_WORD}(?:\s+{_CAP_WORD}){{0,3}}\.(?:{'|'.join(WEB_TLDS)})\b",
    },
    {
        "rule": "business_noun",
        "pattern": rf"\b{_CAP_WORD}(?:\s+{_CAP_WORD}){{0,4}}\s+(?i:{'|'.join(BUSINESS_NOUNS)})\b",
    },
]

GENERIC_NAME_STOPLIST = [
    "The Company",
    "Our Company",
    "Your Company",
    "This Company",
    "A Company",
    "The Business",
    "Our Business",
    "Your Business",
    "This Business",
    "The Group",
    "The Firm",
    "The Startup",
]

EXTRACTION_CONFIDENCE = 0.7
MIN_NAME_LENGTH = 4
MAX_NAME_LENGTH = 59

# =============================================================================
# STAGE 3: FORUM INTENT LEXICON (pre-scale, nominally 0-10)
# =============================================================================

INTENT_LEXICON = {
    "strong": {
        "weight": 4,
        "phrases": [
            "looking for", "need urgently", "hiring immediately", "buying",
            "selling", "budget approved", "ready to purchase",
        ],
    },
    "medium": {
        "weight": 2,
        "phrases": ["need", "want", "searching", "recommendations", "advice", "suggestions"],
    },
    "urgency": {
        "weight": 3,
        "phrases": ["urgent", "asap", "immediately", "now", "soon", "today"],
    },
    "location": {
        "weight": 2,
        "phrases": ["canada", "toronto", "vancouver", "montreal", "ontario", "bc", "quebec"],
    },
}

BUDGET_PATTERN = {
    "pattern": r"[$€£]\s?[\d,]+(?:\.\d+)?\s?k?|\b\d+k budget\b|\bbudget\b.*\d+|\brevenue\b.*[$€£]|\bspending\b.*[$€£]",
    "weight": 5,
}

ENGAGEMENT_BONUS = {
    "comments_divisor": 5,
    "comments_cap": 2,
    "score_divisor": 15,
    "score_cap": 1,
}

# =============================================================================
# STAGE 3: SIGNAL WEIGHT TABLE
# =============================================================================

SIGNAL_WEIGHTS = {
    "forum_high_intent": {"points": 30, "confidence": 0.9, "min_intent": 8},
    "forum_medium_intent": {"points": 20, "confidence": 0.8, "min_intent": 6},
    "forum_low_intent": {"points": 10, "confidence": 0.6, "min_intent": 4},
    "recent_funding": {"points": 25, "confidence": 0.95},
    "news_funding": {"points": 20, "confidence": 0.8},
    "optimal_company_size": {"points": 15, "confidence": 0.9},
    "target_market_primary": {"points": 25, "confidence": 0.95},
    "target_market_secondary": {"points": 15, "confidence": 0.85},
    "high_value_industry": {"points": 15, "confidence": 0.8},
    "high_quality_contacts": {"points": 15, "confidence": 0.9},
    "contacts_available": {"points": 8, "confidence": 0.7},
}

NEWS_FUNDING_KEYWORDS = ["funding", "investment", "raised", "series"]

HIGH_VALUE_INDUSTRIES = [
    "software", "saas", "technology", "fintech", "healthtech", "ai",
    "artificial intelligence",
]

TARGET_MARKETS = {
    "primary": ["toronto", "vancouver", "montreal", "calgary", "ottawa", "canada"],
    "secondary": [
        "new york", "san francisco", "los angeles", "chicago", "boston",
        "seattle", "usa", "united states",
    ],
}

OPTIMAL_EMPLOYEE_RANGE = (10, 500)
HIGH_CONFIDENCE_CONTACT = 90
EVIDENCE_EXCERPT_LENGTH = 60

# =============================================================================
# STAGE 2: QUALIFICATION GATE & BACKFILL
# =============================================================================

DEFAULT_QUALIFICATION = {
    "min_forum_intent": 6,
    "min_news_mentions": 2,
    "min_social_engagement": 20,
    "budget_pattern": r"[$€£]|\bbudget\b",
}

DEFAULT_BACKFILL = {
    "enabled": True,
    "min_companies": 2,
    "target_companies": 3,
    "suffixes": ["Solutions", "Group", "Services", "Partners", "Consulting"],
    "discovery_source": "market_research",
}

# =============================================================================
# STAGE 4 / 5: RANKING & QUALITY TIERS
# =============================================================================

DEFAULT_RANKING = {
    "intent_weight": 0.4,
    "confidence_weight": 0.1,
    "signal_points": 2,
    "signal_cap": 10,
    "contact_base": 25,
    "contact_high_confidence_bonus": 5,
    "enrichment_base": 20,
    "enrichment_revenue_bonus": 5,
    "enrichment_employee_bonus": 5,
    "max_results": 15,
}

TOTAL_SOURCES = 8

QUALITY_TIERS = [
    (0.7, "high"),
    (0.4, "medium"),
    (0.2, "low"),
]

HIGH_INTENT_THRESHOLD = 60
STRONG_INTENT_THRESHOLD = 70
