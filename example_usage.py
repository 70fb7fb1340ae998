"""
Lead Intent Engine - Usage Examples
===================================
This file demonstrates how to use the Lead Intent Engine
both programmatically and via the API.
"""

# =============================================================================
# EXAMPLE 1: Pipeline over in-memory mentions (no network)
# =============================================================================

def example_offline_pipeline():
    """Run the core pipeline over hand-written mentions"""
    from intent_engine.engine import quick_run

    source_collections = {
        "forum_post": [
            {
                "title": "Looking for a payroll provider ASAP",
                "body": "We switched away from Paylane Solutions. Budget is $2,000/month, Toronto based.",
                "comments": 14,
                "score": 30,
                "url": "https://reddit.com/r/smallbusiness/comments/abc",
            },
        ],
        "news_article": [
            {
                "title": "DataFlow Systems raises $12M Series A",
                "body": "The analytics company plans to double its team.",
                "url": "https://news.example.com/dataflow-series-a",
            },
            {
                "title": "Investors back DataFlow Systems in new funding round",
                "body": "The round was led by a Toronto fund.",
                "url": "https://news.example.com/dataflow-round",
            },
        ],
    }

    print("=" * 60)
    print("OFFLINE PIPELINE: payroll")
    print("=" * 60)

    result = quick_run("payroll", source_collections)

    print(f"\nCompanies: {result.metrics.companies_found}")
    print(f"Data quality: {result.metrics.data_quality_tier.value}")
    for i, company in enumerate(result.companies, 1):
        print(
            f"  {i}. {company.name}: intent {company.intent_score}/100, "
            f"confidence {company.confidence_score}/100 ({company.discovery_source})"
        )
        for signal in company.signals[:3]:
            print(f"      + {signal.type} ({signal.score_contribution}): {signal.description}")

    return result


# =============================================================================
# EXAMPLE 2: Engine with custom configuration and fixture providers
# =============================================================================

def example_custom_engine():
    """Wire an engine with static providers and a stub enrichment lookup"""
    from intent_engine.engine import IntentPipelineEngine
    from intent_engine.models.pipeline_config import create_default_pipeline_config
    from intent_engine.models.schemas import (
        Contact,
        Enrichment,
        EnrichmentResult,
        RawMention,
        SourceType,
    )
    from intent_engine.sources.providers import StaticProvider

    config = create_default_pipeline_config(max_results=5, backfill_enabled=False)
    config.enable_llm_summary = False

    providers = [
        StaticProvider(SourceType.NEWS_ARTICLE, [
            RawMention.from_parts(
                SourceType.NEWS_ARTICLE,
                title="Northwind Analytics Inc. closes Series B funding",
                url="https://news.example.com/northwind-b",
            ),
            RawMention.from_parts(
                SourceType.NEWS_ARTICLE,
                title="Northwind Analytics Inc. raised $40M to expand in Canada",
                url="https://news.example.com/northwind-canada",
            ),
        ]),
    ]

    def enrichment_lookup(website):
        return EnrichmentResult(
            enrichment=Enrichment(employees=120, funding_total="$52M", location="Toronto, ON", industry="Software"),
            contacts=[Contact(email="ceo@northwindanalyticsinc.com", confidence=96, role="CEO", source="fixture")],
        )

    engine = IntentPipelineEngine(
        pipeline_config=config,
        providers=providers,
        enrichment_lookup=enrichment_lookup,
    )

    print("=" * 60)
    print("CUSTOM ENGINE")
    print("=" * 60)

    response = engine.search("analytics")
    print(f"\nSources with data: {response.metrics.sources_with_data}/{response.metrics.total_sources}")
    print(f"Summary mode: {response.metadata.summary_mode.value}")
    for company in response.companies:
        print(f"  - {company.name}: {company.intent_score}/100, {len(company.contacts)} contacts")

    print("\n--- Analysis ---")
    print(response.analysis)

    # Second call is served from the cache
    cached = engine.search("  Analytics ")
    print(f"\nCached: {cached.metadata.cached}")
    print(f"Stats: {engine.get_stats()}")

    return response


# =============================================================================
# EXAMPLE 3: API Usage with requests
# =============================================================================

def example_api_usage():
    """Use the API via HTTP requests"""
    import requests

    BASE_URL = "http://localhost:8000"

    print("=" * 60)
    print("API USAGE EXAMPLE")
    print("=" * 60)
    print("Make sure the server is running: python main.py")
    print()

    payload = {
        "query": "physiotherapy",
        "source_collections": {
            "forum_post": [
                {
                    "text": "Need a physiotherapy clinic ASAP, budget $5000, Toronto",
                    "comments": 12,
                    "score": 45,
                }
            ]
        },
        "include_analysis": True,
    }

    print("Request payload:")
    print(f"  POST {BASE_URL}/api/pipeline")
    print(f"  {payload}")
    print(f"  GET  {BASE_URL}/api/search?query=physiotherapy")

    # Uncomment to actually make the request:
    # response = requests.post(f"{BASE_URL}/api/pipeline", json=payload, timeout=30)
    # print(f"\nResponse: {response.json()}")


# =============================================================================
# MAIN
# =============================================================================

if __name__ == "__main__":
    print("\n" + "=" * 60)
    print("LEAD INTENT ENGINE - USAGE EXAMPLES")
    print("=" * 60 + "\n")

    print("\n[Example 1: Offline Pipeline]")
    example_offline_pipeline()

    print("\n" + "-" * 60)
    print("\n[Example 2: Custom Engine]")
    example_custom_engine()

    print("\n" + "-" * 60)
    print("\n[Example 3: API Usage]")
    example_api_usage()

    print("\n" + "=" * 60)
    print("EXAMPLES COMPLETE")
    print("=" * 60)
