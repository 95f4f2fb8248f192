# Filtering, aggregation and heatmap services
from .filters import QuestionFilter, CompanyFilter
from .stats import (
    TopicStat,
    QuestionStats,
    CompanyStats,
    compute_question_stats,
    compute_company_stats,
    distinct_topics,
    distinct_tags,
)
from .heatmap import HeatmapEntry, HeatmapGrid, build_heatmap, heat_level, render_heatmap

__all__ = [
    "QuestionFilter",
    "CompanyFilter",
    "TopicStat",
    "QuestionStats",
    "CompanyStats",
    "compute_question_stats",
    "compute_company_stats",
    "distinct_topics",
    "distinct_tags",
    "HeatmapEntry",
    "HeatmapGrid",
    "build_heatmap",
    "heat_level",
    "render_heatmap",
]
