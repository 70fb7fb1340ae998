"""
FastAPI Endpoints for the Lead Intent Engine
============================================
RESTful API for multi-source lead discovery and intent scoring.

Base URL: http://localhost:8000

Endpoints:
- GET  /                  - API info
- GET  /api/health        - Health check and provider configuration
- GET  /api/search        - Full search (sources → pipeline → summary)
- POST /api/pipeline      - Run the pipeline over caller-supplied mentions
- POST /api/leads         - Sign up for alerts on a query
- GET  /api/leads         - List captured leads (requires X-Admin-Key)
- GET  /api/stats         - Get engine statistics
"""

import logging
import os
import secrets
from fastapi import FastAPI, HTTPException, Query, Header
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional, Dict, Any
from datetime import datetime
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from ..models.schemas import (
    LeadRequest,
    PipelineRequest,
    SearchResponse,
)
from ..config.settings import ADMIN_API_KEY, ENRICHMENT_CONFIG, LLM_CONFIG, SOURCE_CONFIG
from ..engine import IntentPipelineEngine, MIN_QUERY_LENGTH
from ..errors import PipelineInputError, LeadValidationError
from ..leads import LeadStore

logger = logging.getLogger(__name__)


# =============================================================================
# FastAPI App Initialization
# =============================================================================

app = FastAPI(
    title="Lead Intent Engine API",
    description="""
## Multi-Source Lead Intelligence

This API discovers companies showing buying or selling intent across forums,
news, social media and tech communities, and ranks them as leads.

### Features:
- **6-Stage Pipeline**: Extraction → Merge → Scoring → Ranking → Metrics → Summary
- **Concurrent Sources**: One slow source never blocks the others
- **Enrichment**: Contacts and firmographics when provider keys are set
- **LLM Analysis**: Narrative report via OpenRouter, with a template fallback

### Quick Start:
1. Use `/api/search?query=...` for a full live search
2. Use `/api/pipeline` to score your own mentions offline
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware - Allow all origins for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Storage & Engine Initialization
# =============================================================================

# In-memory storage (replace with database in production)
lead_store = LeadStore()


def get_default_engine() -> IntentPipelineEngine:
    api_key = os.getenv("OPENROUTER_API_KEY")
    return IntentPipelineEngine(llm_api_key=api_key, llm_provider=LLM_CONFIG.get("provider", "openrouter"))


default_engine = get_default_engine()


# =============================================================================
# Health & Info Endpoints
# =============================================================================

@app.get("/", tags=["Info"])
async def root():
    """API information and available endpoints"""
    return {
        "service": "Lead Intent Engine",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "Search": "GET /api/search?query=...",
            "Pipeline": "POST /api/pipeline",
            "Lead Capture": "POST /api/leads",
            "Leads (admin)": "GET /api/leads",
            "Stats": "GET /api/stats",
            "Health": "GET /api/health",
        }
    }


@app.get("/api/health", tags=["Info"])
async def health_check():
    """Health check endpoint for monitoring"""
    api_key = os.getenv("OPENROUTER_API_KEY", "")
    return {
        "status": "healthy",
        "service": "Lead Intent Engine",
        "version": "1.0.0",
        "timestamp": datetime.utcnow().isoformat(),
        "llm_configured": bool(api_key and len(api_key) > 10),
        "sources": {
            "reddit": bool(SOURCE_CONFIG["reddit_client_id"] and SOURCE_CONFIG["reddit_client_secret"]),
            "newsapi": bool(SOURCE_CONFIG["newsapi_key"]),
            "twitter": bool(SOURCE_CONFIG["x_bearer_token"]),
            "hackernews": True,
            "sec": True,
            "datagov": True,
        },
        "enrichment": {
            "hunter": bool(ENRICHMENT_CONFIG["hunter_api_key"]),
            "clearbit": bool(ENRICHMENT_CONFIG["clearbit_api_key"]),
        },
    }


# =============================================================================
# Search & Pipeline Endpoints
# =============================================================================

@app.get("/api/search", response_model=SearchResponse, tags=["Search"])
def search(
    query: str = Query("", description="Product, service or market to search for"),
    use_cache: bool = Query(True, description="Serve a cached response when available"),
):
    """
    Full search across all configured sources

    - Fetches every source concurrently
    - Extracts, merges, scores and ranks companies
    - Adds a narrative analysis (LLM or template)
    """
    if len(query.strip()) < MIN_QUERY_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Query must be at least {MIN_QUERY_LENGTH} characters",
        )

    return _get_engine().search(query, use_cache=use_cache)


@app.post("/api/pipeline", tags=["Search"])
def run_pipeline(request: PipelineRequest):
    """
    Run the core pipeline over caller-supplied source collections

    `source_collections` maps a source type (`forum_post`, `news_article`,
    `social_post`, ...) to a list of mentions (`text`, or `title` + `body`,
    plus optional `url`, `engagement`, `comments`, `score`).
    """
    engine = _get_engine()
    result = engine.run_pipeline(request.query, request.source_collections, engine.enrichment_lookup)

    response: Dict[str, Any] = result.model_dump(mode="json")
    if request.include_analysis:
        analysis, mode = engine.summarize(result)
        response["analysis"] = analysis
        response["summary_mode"] = mode.value

    return response


# =============================================================================
# Lead Capture Endpoints
# =============================================================================

@app.post("/api/leads", tags=["Leads"])
def capture_lead(request: LeadRequest):
    """Sign up for email alerts on a query"""
    lead, created = lead_store.capture(request.email, request.query, request.source)

    return {
        "message": "Successfully subscribed to alerts!" if created else "Email updated for alerts",
        "status": "created" if created else "updated",
        "lead": lead.model_dump(mode="json"),
    }


@app.get("/api/leads", tags=["Leads"])
def list_leads(x_admin_key: Optional[str] = Header(None)):
    """List captured leads with statistics (admin only)"""
    expected = os.getenv("ADMIN_API_KEY", ADMIN_API_KEY)
    if not expected:
        raise HTTPException(status_code=503, detail="Admin access is not configured")
    if not x_admin_key or not secrets.compare_digest(x_admin_key, expected):
        raise HTTPException(status_code=401, detail="Unauthorized")

    return {
        "stats": lead_store.stats().model_dump(mode="json"),
        "leads": [lead.model_dump(mode="json") for lead in lead_store.list_leads(limit=50)],
    }


# =============================================================================
# Statistics
# =============================================================================

@app.get("/api/stats", tags=["Info"])
async def get_stats():
    """Get engine statistics"""
    return {
        "default_engine": _get_engine().get_stats(),
        "captured_leads": len(lead_store),
    }


# =============================================================================
# Helper Functions
# =============================================================================

def _get_engine() -> IntentPipelineEngine:
    """Get the engine serving this process"""
    return default_engine


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(PipelineInputError)
async def pipeline_input_handler(request, exc: PipelineInputError):
    return JSONResponse(
        status_code=422,
        content={"error": str(exc), "code": exc.code},
    )


@app.exception_handler(LeadValidationError)
async def lead_validation_handler(request, exc: LeadValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": str(exc), "code": exc.code},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.exception("api.unhandled_error path=%s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc),
            "type": type(exc).__name__,
        }
    )
