"""Shared fixtures for the Lead Intent Engine tests."""

from typing import List

import pytest
from fastapi.testclient import TestClient

from intent_engine.engine import IntentPipelineEngine
from intent_engine.leads import LeadStore
from intent_engine.models.pipeline_config import PipelineConfig, create_default_pipeline_config
from intent_engine.models.schemas import RawMention, SourceType
from intent_engine.stages.stage6_summary import NarrativeSummaryStage


PHYSIO_POST = "Need a physiotherapy clinic ASAP, budget $5000, Toronto"


def forum(text: str, comments: int = 0, score: int = 0, url: str = None) -> RawMention:
    return RawMention(source=SourceType.FORUM_POST, text=text, comments=comments, score=score, url=url)


def news(text: str, url: str = None, title: str = None) -> RawMention:
    return RawMention(source=SourceType.NEWS_ARTICLE, text=text, url=url, title=title)


def social(text: str, engagement: float = 0, url: str = None) -> RawMention:
    return RawMention(source=SourceType.SOCIAL_POST, text=text, engagement=engagement, url=url)


def empty_collections() -> dict:
    return {source: [] for source in SourceType}


@pytest.fixture
def offline_config() -> PipelineConfig:
    """Pipeline config with no enrichment and no LLM."""
    config = create_default_pipeline_config(enable_llm_summary=False)
    config.enable_enrichment = False
    return config


@pytest.fixture
def template_summarizer() -> NarrativeSummaryStage:
    """Summarizer that always renders the template."""
    stage = NarrativeSummaryStage(client=None)
    stage.client = None
    return stage


@pytest.fixture
def offline_engine(offline_config, template_summarizer) -> IntentPipelineEngine:
    """Engine with no providers, no enrichment and no LLM."""
    return IntentPipelineEngine(
        pipeline_config=offline_config,
        providers=[],
        summarizer=template_summarizer,
    )


@pytest.fixture
def physio_collections() -> dict:
    collections = empty_collections()
    collections[SourceType.FORUM_POST] = [forum(PHYSIO_POST, comments=12, score=45)]
    return collections


@pytest.fixture
def dataflow_mentions() -> List[RawMention]:
    return [
        news("DataFlow Systems raises $10M Series A funding", url="https://news.example.com/a"),
        news("Investors back DataFlow Systems in new funding round", url="https://news.example.com/b"),
    ]


@pytest.fixture
def api_client(monkeypatch, offline_engine):
    """TestClient bound to an offline engine and an empty lead store."""
    from intent_engine.api import endpoints

    monkeypatch.setattr(endpoints, "default_engine", offline_engine)
    monkeypatch.setattr(endpoints, "lead_store", LeadStore())
    monkeypatch.delenv("ADMIN_API_KEY", raising=False)
    monkeypatch.setattr(endpoints, "ADMIN_API_KEY", "")

    with TestClient(endpoints.app) as client:
        yield client
