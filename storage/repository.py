import json
import logging
import sqlite3
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Optional

from core import (
    CompanyApplication,
    NotFoundError,
    Question,
    StoreUnavailableError,
    parse_timestamp,
    utc_now,
)


logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


def stored_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat(timespec="microseconds")


def _labels(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return []
    return [str(v) for v in value] if isinstance(value, list) else []


def question_from_row(row: sqlite3.Row) -> Question:
    return Question(
        id=row["id"],
        title=row["title"],
        topics=_labels(row["topics"]),
        difficulty=row["difficulty"],
        source=row["source"],
        link=row["link"],
        date_solved=parse_timestamp(row["date_solved"]),
        code=row["code"],
        explanation=row["explanation"],
        tags=_labels(row["tags"]),
        created_at=parse_timestamp(row["created_at"]),
    )


def company_from_row(row: sqlite3.Row) -> CompanyApplication:
    return CompanyApplication(
        id=row["id"],
        name=row["name"],
        salary=row["salary"],
        status=row["status"],
        feedback=row["feedback"],
        created_at=parse_timestamp(row["created_at"]),
    )


class _Repository:
    """Shared plumbing: every statement commits and sqlite failures surface as StoreUnavailableError."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def _execute(self, sql: str, params=()) -> sqlite3.Cursor:
        try:
            return self.conn.execute(sql, params)
        except sqlite3.Error as exc:
            logger.error("Record store query failed: %s", exc)
            raise StoreUnavailableError(str(exc)) from exc

    def _commit(self) -> None:
        try:
            self.conn.commit()
        except sqlite3.Error as exc:
            raise StoreUnavailableError(str(exc)) from exc


class QuestionRepository(_Repository):
    """Repository for Question CRUD operations."""

    def add(self, question: Question) -> Question:
        """Validate and insert a question, assigning its id and creation time."""
        question.validate()
        created = replace(question, id=new_id(), created_at=utc_now())
        self._execute(
            """
            INSERT INTO questions (id, title, topics, difficulty, source, link,
                                   date_solved, code, explanation, tags, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                created.id,
                created.title,
                json.dumps(created.topics),
                created.difficulty,
                created.source,
                created.link,
                stored_timestamp(created.date_solved),
                created.code,
                created.explanation,
                json.dumps(created.tags),
                stored_timestamp(created.created_at),
            ),
        )
        self._commit()
        logger.debug("Added question %s (%s)", created.id, created.title)
        return created

    def add_batch(self, questions: list[Question]) -> int:
        """Insert several questions; all are validated before anything is written."""
        if not questions:
            return 0
        for question in questions:
            question.validate()
        for question in questions:
            self.add(question)
        return len(questions)

    def get_by_id(self, question_id: str) -> Optional[Question]:
        row = self._execute("SELECT * FROM questions WHERE id = ?", (question_id,)).fetchone()
        if row:
            return question_from_row(row)
        return None

    def require(self, question_id: str) -> Question:
        question = self.get_by_id(question_id)
        if question is None:
            raise NotFoundError("Question", question_id)
        return question

    def list_all(self) -> list[Question]:
        """All questions, most recently created first."""
        rows = self._execute("SELECT * FROM questions ORDER BY created_at DESC, rowid DESC").fetchall()
        return [question_from_row(row) for row in rows]

    def search(self, criteria) -> list[Question]:
        """Apply a question filter to the full collection."""
        return criteria.apply(self.list_all())

    def update(self, question_id: str, question: Question) -> Question:
        """Replace every editable field; omitted optional fields are cleared."""
        existing = self.require(question_id)
        question.validate()
        updated = replace(question, id=existing.id, created_at=existing.created_at)
        self._execute(
            """
            UPDATE questions
            SET title = ?, topics = ?, difficulty = ?, source = ?, link = ?,
                date_solved = ?, code = ?, explanation = ?, tags = ?
            WHERE id = ?
            """,
            (
                updated.title,
                json.dumps(updated.topics),
                updated.difficulty,
                updated.source,
                updated.link,
                stored_timestamp(updated.date_solved),
                updated.code,
                updated.explanation,
                json.dumps(updated.tags),
                question_id,
            ),
        )
        self._commit()
        return updated

    def delete(self, question_id: str) -> None:
        cursor = self._execute("DELETE FROM questions WHERE id = ?", (question_id,))
        self._commit()
        if cursor.rowcount == 0:
            raise NotFoundError("Question", question_id)


class CompanyRepository(_Repository):
    """Repository for CompanyApplication CRUD operations."""

    def add(self, company: CompanyApplication) -> CompanyApplication:
        company.validate()
        created = replace(company, id=new_id(), created_at=utc_now())
        self._execute(
            """
            INSERT INTO companies (id, name, salary, status, feedback, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                created.id,
                created.name,
                created.salary,
                created.status,
                created.feedback,
                stored_timestamp(created.created_at),
            ),
        )
        self._commit()
        logger.debug("Added company application %s (%s)", created.id, created.name)
        return created

    def get_by_id(self, company_id: str) -> Optional[CompanyApplication]:
        row = self._execute("SELECT * FROM companies WHERE id = ?", (company_id,)).fetchone()
        if row:
            return company_from_row(row)
        return None

    def require(self, company_id: str) -> CompanyApplication:
        company = self.get_by_id(company_id)
        if company is None:
            raise NotFoundError("Company", company_id)
        return company

    def list_all(self) -> list[CompanyApplication]:
        rows = self._execute("SELECT * FROM companies ORDER BY created_at DESC, rowid DESC").fetchall()
        return [company_from_row(row) for row in rows]

    def search(self, criteria) -> list[CompanyApplication]:
        return criteria.apply(self.list_all())

    def update(self, company_id: str, company: CompanyApplication) -> CompanyApplication:
        existing = self.require(company_id)
        company.validate()
        updated = replace(company, id=existing.id, created_at=existing.created_at)
        self._execute(
            "UPDATE companies SET name = ?, salary = ?, status = ?, feedback = ? WHERE id = ?",
            (updated.name, updated.salary, updated.status, updated.feedback, company_id),
        )
        self._commit()
        return updated

    def delete(self, company_id: str) -> None:
        cursor = self._execute("DELETE FROM companies WHERE id = ?", (company_id,))
        self._commit()
        if cursor.rowcount == 0:
            raise NotFoundError("Company", company_id)
