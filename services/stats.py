# Dashboard statistics
"""
Summary statistics over full question and company collections.

Everything here is a pure function of its input snapshot and is fully
recomputed on each call.
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from core import DIFFICULTIES, CompanyApplication, Question, unique_labels, utc_day


@dataclass
class TopicStat:
    total: int = 0
    solved: int = 0

    @property
    def remaining(self) -> int:
        return self.total - self.solved

    def to_dict(self) -> dict:
        return {"total": self.total, "solved": self.solved}


@dataclass
class QuestionStats:
    total_questions: int = 0
    total_solved: int = 0
    difficulty_stats: dict[str, int] = field(default_factory=dict)
    topic_stats: dict[str, TopicStat] = field(default_factory=dict)
    heatmap_source: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "totalSolved": self.total_solved,
            "totalQuestions": self.total_questions,
            "difficultyStats": dict(self.difficulty_stats),
            "topicStats": {t: s.to_dict() for t, s in self.topic_stats.items()},
            "heatmapData": dict(self.heatmap_source),
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "QuestionStats":
        """Rebuild stats from the ``/stats`` JSON body."""
        return cls(
            total_questions=int(payload.get("totalQuestions", 0)),
            total_solved=int(payload.get("totalSolved", 0)),
            difficulty_stats={k: int(v) for k, v in (payload.get("difficultyStats") or {}).items()},
            topic_stats={
                t: TopicStat(total=int(s.get("total", 0)), solved=int(s.get("solved", 0)))
                for t, s in (payload.get("topicStats") or {}).items()
            },
            heatmap_source={k: int(v) for k, v in (payload.get("heatmapData") or {}).items()},
        )


@dataclass
class CompanyStats:
    total_applications: int = 0
    status_counts: dict[str, int] = field(default_factory=dict)
    selected_count: int = 0
    rejected_count: int = 0

    def to_dict(self) -> dict:
        return {
            "totalApplications": self.total_applications,
            "statusCounts": dict(self.status_counts),
            "selectedCount": self.selected_count,
            "rejectedCount": self.rejected_count,
        }


def compute_question_stats(questions: Iterable[Question]) -> QuestionStats:
    """Aggregate counts by difficulty, topic and solve day.

    Every difficulty appears in ``difficulty_stats`` even at zero, while
    topics only appear once some question lists them. A question counts
    once toward each distinct topic it carries.
    """
    stats = QuestionStats(difficulty_stats={d: 0 for d in DIFFICULTIES})
    heatmap: Counter = Counter()
    for question in questions:
        stats.total_questions += 1
        if question.solved:
            stats.total_solved += 1
            heatmap[utc_day(question.date_solved).isoformat()] += 1
        stats.difficulty_stats[question.difficulty] = stats.difficulty_stats.get(question.difficulty, 0) + 1
        for topic in unique_labels(question.topics):
            topic_stat = stats.topic_stats.setdefault(topic, TopicStat())
            topic_stat.total += 1
            if question.solved:
                topic_stat.solved += 1
    stats.heatmap_source = dict(sorted(heatmap.items()))
    return stats


def compute_company_stats(companies: Iterable[CompanyApplication]) -> CompanyStats:
    """Group applications by status; statuses nobody has are left out."""
    status_counts: Counter = Counter()
    total = 0
    for company in companies:
        total += 1
        status_counts[company.status] += 1
    return CompanyStats(
        total_applications=total,
        status_counts=dict(status_counts),
        selected_count=status_counts.get("SELECTED", 0),
        rejected_count=status_counts.get("REJECTED", 0),
    )


def solved_percentage(stats: QuestionStats) -> int:
    if stats.total_questions <= 0:
        return 0
    # half up, not banker's rounding
    return int(stats.total_solved * 100 / stats.total_questions + 0.5)


def topic_rows(stats: QuestionStats) -> list[dict]:
    """Per-topic chart rows in first-seen order."""
    return [
        {"topic": topic, "solved": s.solved, "total": s.total, "remaining": s.remaining}
        for topic, s in stats.topic_stats.items()
    ]


def distinct_topics(questions: Iterable[Question]) -> list[str]:
    return sorted({topic for q in questions for topic in q.topics})


def distinct_tags(questions: Iterable[Question]) -> list[str]:
    return sorted({tag for q in questions for tag in q.tags})
