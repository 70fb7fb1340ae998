# Pipeline stages module
from .stage1_extraction import EntityExtractionStage
from .stage2_merge import EntityMergeStage
from .stage3_scoring import IntentScoringStage
from .stage4_ranking import RankingStage
from .stage5_metrics import AggregateMetricsStage
from .stage6_summary import NarrativeSummaryStage
