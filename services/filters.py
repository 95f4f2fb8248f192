"""Query filters for questions and company applications.

Every supplied criterion must match (AND); the free-text search matches
when any of its fields contains the term. Results are ordered by
creation time, newest first, whether or not any criterion is given.
"""
import datetime as dt
from dataclasses import dataclass, field
from typing import Iterable, Optional

from core import CompanyApplication, Question, unique_labels


_EPOCH = dt.datetime.min.replace(tzinfo=dt.timezone.utc)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _search_term(value: Optional[str]) -> Optional[str]:
    # blank means no search; otherwise the term is matched as given
    if value is None or not str(value).strip():
        return None
    return str(value)


def _contains(term: str, *fields: Optional[str]) -> bool:
    needle = term.lower()
    return any(needle in (f or "").lower() for f in fields)


def _newest_first(records: Iterable) -> list:
    return sorted(records, key=lambda r: r.created_at or _EPOCH, reverse=True)


def _first(params: dict, key: str) -> Optional[str]:
    values = params.get(key) or []
    if isinstance(values, str):
        return values
    return values[0] if values else None


def split_tags(values) -> list[str]:
    """Flatten repeated and comma separated tag parameters."""
    if isinstance(values, str):
        values = [values]
    parts: list[str] = []
    for value in values or []:
        parts.extend(str(value).split(","))
    return unique_labels(parts)


@dataclass
class QuestionFilter:
    search: Optional[str] = None
    topic: Optional[str] = None
    difficulty: Optional[str] = None
    tags: list[str] = field(default_factory=list)

    def __post_init__(self):
        self.search = _search_term(self.search)
        self.topic = _clean(self.topic)
        self.difficulty = _clean(self.difficulty)
        self.tags = unique_labels(self.tags)

    @classmethod
    def from_query(cls, params: dict) -> "QuestionFilter":
        """Build from ``parse_qs`` output (lists of values per key)."""
        return cls(
            search=_first(params, "search"),
            topic=_first(params, "topic"),
            difficulty=_first(params, "difficulty"),
            tags=split_tags(params.get("tags")),
        )

    def matches(self, question: Question) -> bool:
        if self.search and not _contains(self.search, question.title, question.code, question.explanation):
            return False
        if self.topic and self.topic not in question.topics:
            return False
        if self.difficulty and question.difficulty != self.difficulty:
            return False
        if self.tags and not set(self.tags) & set(question.tags):
            return False
        return True

    def apply(self, questions: Iterable[Question]) -> list[Question]:
        return _newest_first(q for q in questions if self.matches(q))


@dataclass
class CompanyFilter:
    search: Optional[str] = None
    status: Optional[str] = None
    limit: Optional[int] = None

    def __post_init__(self):
        self.search = _search_term(self.search)
        self.status = _clean(self.status)
        if self.limit is not None and self.limit < 0:
            self.limit = None

    @classmethod
    def from_query(cls, params: dict) -> "CompanyFilter":
        raw_limit = _clean(_first(params, "limit"))
        limit = int(raw_limit) if raw_limit and raw_limit.isdigit() else None
        return cls(
            search=_first(params, "search"),
            status=_first(params, "status"),
            limit=limit,
        )

    def matches(self, company: CompanyApplication) -> bool:
        if self.search and not _contains(self.search, company.name, company.feedback):
            return False
        if self.status and company.status != self.status:
            return False
        return True

    def apply(self, companies: Iterable[CompanyApplication]) -> list[CompanyApplication]:
        result = _newest_first(c for c in companies if self.matches(c))
        if self.limit is not None:
            return result[: self.limit]
        return result
