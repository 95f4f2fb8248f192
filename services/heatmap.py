"""Calendar heatmap for daily solve counts.

Expands the sparse ``YYYY-MM-DD -> count`` map served by ``/stats`` into a
dense trailing year of days laid out GitHub style: columns are weeks
starting on Sunday, rows are weekdays.
"""
import datetime as dt
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator, Optional


WINDOW_DAYS = 365
MAX_WEEKS = 53
DAYS_PER_WEEK = 7

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
WEEKDAY_ABBR = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

# One glyph per heat level 0-5.
LEVEL_GLYPHS = ("·", "▁", "▃", "▅", "▇", "█")


@dataclass(frozen=True)
class HeatmapEntry:
    date: date
    count: int

    @property
    def level(self) -> int:
        return heat_level(self.count)

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "count": self.count}


@dataclass(frozen=True)
class MonthLabel:
    week_index: int
    label: str

    def to_dict(self) -> dict:
        return {"index": self.week_index, "label": self.label}


def today_utc() -> date:
    return dt.datetime.now(dt.timezone.utc).date()


def sunday_index(day: date) -> int:
    """Day of week with Sunday = 0."""
    return (day.weekday() + 1) % 7


def window_start(end_date: date) -> date:
    """Start of the trailing window, moved back to the preceding Sunday."""
    start = end_date - timedelta(days=WINDOW_DAYS)
    return start - timedelta(days=sunday_index(start))


def heat_level(count: int) -> int:
    """Colour bucket for a day's count: 0, 1, 2, 3-4, 5-7, 8+."""
    if count <= 0:
        return 0
    if count == 1:
        return 1
    if count == 2:
        return 2
    if count <= 4:
        return 3
    if count <= 7:
        return 4
    return 5


class HeatmapDays:
    """Every day from ``start`` through ``end`` with its count.

    Iterating is lazy and can be repeated; nothing is cached between passes.
    """

    def __init__(self, source: dict, start: date, end: date):
        self.source = source
        self.start = start
        self.end = end

    def __len__(self) -> int:
        return max(0, (self.end - self.start).days + 1)

    def __iter__(self) -> Iterator[HeatmapEntry]:
        current = self.start
        while current <= self.end:
            yield HeatmapEntry(date=current, count=int(self.source.get(current.isoformat(), 0)))
            current += timedelta(days=1)


def chunk_weeks(days) -> list[list[HeatmapEntry]]:
    weeks: list[list[HeatmapEntry]] = []
    for entry in days:
        if not weeks or len(weeks[-1]) == DAYS_PER_WEEK:
            weeks.append([])
        weeks[-1].append(entry)
    return weeks


def month_labels(weeks: list[list[HeatmapEntry]]) -> list[MonthLabel]:
    """Label the first week and every week that starts within a month's first 7 days.

    Duplicate-looking labels are possible and kept.
    """
    labels: list[MonthLabel] = []
    for index, week in enumerate(weeks):
        if not week:
            continue
        week_start = week[0].date
        if index == 0 or week_start.day <= 7:
            labels.append(MonthLabel(week_index=index, label=MONTH_ABBR[week_start.month - 1]))
    return labels


@dataclass
class HeatmapGrid:
    start_date: date
    end_date: date
    days: HeatmapDays
    weeks: list[list[HeatmapEntry]]
    month_labels: list[MonthLabel]

    @property
    def total_days(self) -> int:
        return len(self.days)

    @property
    def visible_weeks(self) -> list[list[HeatmapEntry]]:
        return self.weeks[:MAX_WEEKS]

    @property
    def total_count(self) -> int:
        return sum(entry.count for entry in self.days)

    def to_dict(self) -> dict:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "weeks": [[entry.to_dict() for entry in week] for week in self.visible_weeks],
            "monthLabels": [label.to_dict() for label in self.month_labels],
        }


def build_heatmap(source: dict, end_date: Optional[date] = None) -> HeatmapGrid:
    """Build the trailing-year grid ending on ``end_date`` (today in UTC by default)."""
    if end_date is None:
        end_date = today_utc()
    start_date = window_start(end_date)
    days = HeatmapDays(source or {}, start_date, end_date)
    weeks = chunk_weeks(days)
    return HeatmapGrid(
        start_date=start_date,
        end_date=end_date,
        days=days,
        weeks=weeks,
        month_labels=month_labels(weeks),
    )


def render_heatmap(grid: HeatmapGrid) -> str:
    """Draw the grid as text: a month header then one row per weekday."""
    columns = grid.visible_weeks
    gutter = " " * 4
    header = [" "] * (len(columns) + 3)
    for label in grid.month_labels:
        if label.week_index >= len(columns):
            continue
        for offset, char in enumerate(label.label):
            header[label.week_index + offset] = char
    lines = [gutter + "".join(header).rstrip()]
    for weekday in range(DAYS_PER_WEEK):
        cells = []
        for week in columns:
            cells.append(LEVEL_GLYPHS[week[weekday].level] if weekday < len(week) else " ")
        lines.append(f"{WEEKDAY_ABBR[weekday]} " + "".join(cells).rstrip())
    lines.append(gutter + "less " + "".join(LEVEL_GLYPHS) + " more")
    return "\n".join(lines)
