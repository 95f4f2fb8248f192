# Domain models
import datetime as dt
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from .errors import TrackerError, ValidationError, NotFoundError, StoreUnavailableError


DIFFICULTIES = ("Easy", "Medium", "Hard")

STATUSES = (
    "APPLIED",
    "INTERVIEW_SCHEDULED",
    "INTERVIEW_COMPLETED",
    "SELECTED",
    "REJECTED",
    "OFFER_RECEIVED",
    "OFFER_ACCEPTED",
    "OFFER_DECLINED",
)

DEFAULT_STATUS = "APPLIED"


def utc_now() -> datetime:
    return dt.datetime.now(dt.timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO date or datetime into an aware UTC datetime.

    Naive values are taken as UTC and a bare ``YYYY-MM-DD`` is midnight UTC.
    Empty values return None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        raw = str(value).strip()
        if not raw:
            return None
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError as exc:
            raise ValidationError(f"Invalid timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.astimezone(dt.timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def utc_day(value: datetime) -> date:
    """Calendar day of a timestamp in UTC."""
    return value.astimezone(dt.timezone.utc).date()


def unique_labels(labels) -> list[str]:
    """Strip labels, drop blanks and duplicates, keep first-seen order.

    Accepts a single string or a list/tuple of them; anything else is a
    ValidationError.
    """
    if isinstance(labels, str):
        labels = [labels]
    elif labels is not None and not isinstance(labels, (list, tuple)):
        raise ValidationError("Topics and tags must be a list of strings")
    seen: set[str] = set()
    ordered: list[str] = []
    for label in labels or []:
        label = str(label).strip()
        if label and label not in seen:
            seen.add(label)
            ordered.append(label)
    return ordered


@dataclass
class Question:
    """A practice question; solved when ``date_solved`` is set."""
    id: Optional[str] = None
    title: str = ""
    difficulty: str = ""
    topics: list[str] = field(default_factory=list)
    source: Optional[str] = None
    link: Optional[str] = None
    date_solved: Optional[datetime] = None
    code: Optional[str] = None
    explanation: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @property
    def solved(self) -> bool:
        return self.date_solved is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "topics": list(self.topics),
            "difficulty": self.difficulty,
            "source": self.source,
            "link": self.link,
            "dateSolved": format_timestamp(self.date_solved),
            "code": self.code,
            "explanation": self.explanation,
            "tags": list(self.tags),
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_payload(cls, payload: dict) -> "Question":
        """Build a question from a camelCase request body.

        Missing optional fields come back as None, which gives update its
        full-replace behaviour.
        """
        return cls(
            title=str(payload.get("title") or "").strip(),
            difficulty=str(payload.get("difficulty") or "").strip(),
            topics=unique_labels(payload.get("topics")),
            source=payload.get("source") or None,
            link=payload.get("link") or None,
            date_solved=parse_timestamp(payload.get("dateSolved")),
            code=payload.get("code") or None,
            explanation=payload.get("explanation") or None,
            tags=unique_labels(payload.get("tags")),
        )

    def validate(self) -> None:
        if not self.title:
            raise ValidationError("Title and difficulty are required")
        if not self.difficulty:
            raise ValidationError("Title and difficulty are required")
        if self.difficulty not in DIFFICULTIES:
            raise ValidationError(f"Unknown difficulty: {self.difficulty}")


@dataclass
class CompanyApplication:
    """A job application tracked through a fixed status pipeline."""
    id: Optional[str] = None
    name: str = ""
    salary: Optional[str] = None
    status: str = DEFAULT_STATUS
    feedback: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "salary": self.salary,
            "status": self.status,
            "feedback": self.feedback,
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_payload(cls, payload: dict) -> "CompanyApplication":
        return cls(
            name=str(payload.get("name") or "").strip(),
            salary=payload.get("salary") or None,
            status=str(payload.get("status") or DEFAULT_STATUS).strip(),
            feedback=payload.get("feedback") or None,
        )

    def validate(self) -> None:
        if not self.name:
            raise ValidationError("Company name is required")
        if self.status not in STATUSES:
            raise ValidationError(f"Unknown status: {self.status}")


__all__ = [
    "DIFFICULTIES",
    "STATUSES",
    "DEFAULT_STATUS",
    "Question",
    "CompanyApplication",
    "TrackerError",
    "ValidationError",
    "NotFoundError",
    "StoreUnavailableError",
    "utc_now",
    "utc_day",
    "parse_timestamp",
    "format_timestamp",
    "unique_labels",
]
