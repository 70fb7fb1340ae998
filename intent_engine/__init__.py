"""
Lead Intent Engine - Multi-Source Company Intelligence
=======================================================
A staged pipeline that turns raw third-party mentions into a ranked lead list:
  Stage 1: Entity Extraction (surface-pattern rules)
  Stage 2: Entity Merge (cross-source dedup + qualification gate)
  Stage 3: Intent Scoring (fixed weight table)
  Stage 4: Ranking (intent blended with actionability)
  Stage 5: Aggregate Metrics (data-quality tiering)
  Stage 6: Narrative Summary (LLM with template fallback)
"""

__version__ = "1.0.0"
__author__ = "Lead Intent Team"
