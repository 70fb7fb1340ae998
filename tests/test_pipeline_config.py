"""Tests for the pipeline configuration models."""

from intent_engine.models.pipeline_config import PipelineConfig, create_default_pipeline_config


class TestPipelineConfig:
    def test_only_stage_sections_and_switches(self) -> None:
        assert set(PipelineConfig.model_fields) == {
            "qualification", "backfill", "ranking", "sources", "cache",
            "enable_enrichment", "enable_llm_summary",
        }

    def test_factory_overrides(self) -> None:
        config = create_default_pipeline_config(
            max_results=3, backfill_enabled=False, source_timeout_seconds=2.5, enable_llm_summary=False,
        )

        assert config.ranking.max_results == 3
        assert config.backfill.enabled is False
        assert config.sources.timeout_seconds == 2.5
        assert config.enable_llm_summary is False

    def test_factory_defaults_are_independent(self) -> None:
        first = create_default_pipeline_config()
        first.backfill.suffixes.append("Partners")

        assert "Partners" not in create_default_pipeline_config().backfill.suffixes
