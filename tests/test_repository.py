import os
import tempfile
import unittest
from pathlib import Path

from core import CompanyApplication, NotFoundError, Question, ValidationError, parse_timestamp
from services.filters import CompanyFilter, QuestionFilter
from storage.db import connect
from storage.repository import CompanyRepository, QuestionRepository


class TestQuestionRepository(unittest.TestCase):
    """Tests for QuestionRepository."""

    @classmethod
    def setUpClass(cls):
        """Create a temporary database for testing."""
        cls.temp_db = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
        cls.temp_db.close()
        cls.conn = connect(Path(cls.temp_db.name))
        cls.repo = QuestionRepository(cls.conn)

    @classmethod
    def tearDownClass(cls):
        """Clean up temporary database."""
        cls.conn.close()
        os.unlink(cls.temp_db.name)

    def setUp(self):
        """Clear questions before each test."""
        self.conn.execute("DELETE FROM questions")
        self.conn.commit()

    def test_add_assigns_id_and_created_at(self):
        """Should add a question and fill in identity fields."""
        created = self.repo.add(Question(title="Two Sum", difficulty="Easy", topics=["Array"]))

        self.assertIsNotNone(created.id)
        self.assertIsNotNone(created.created_at)
        self.assertEqual(created.topics, ["Array"])

    def test_add_rejects_invalid(self):
        with self.assertRaises(ValidationError):
            self.repo.add(Question(title="", difficulty="Easy"))
        self.assertEqual(self.repo.list_all(), [])

    def test_get_by_id(self):
        """Should retrieve a question with its multi-value fields intact."""
        created = self.repo.add(Question(
            title="Two Sum",
            difficulty="Easy",
            topics=["Array", "Hash Table"],
            tags=["blind75"],
            date_solved=parse_timestamp("2024-01-01"),
        ))
        question = self.repo.get_by_id(created.id)

        self.assertIsNotNone(question)
        self.assertEqual(question.title, "Two Sum")
        self.assertEqual(question.topics, ["Array", "Hash Table"])
        self.assertEqual(question.tags, ["blind75"])
        self.assertEqual(question.date_solved, parse_timestamp("2024-01-01"))
        self.assertEqual(question.created_at, created.created_at)

    def test_get_by_id_not_found(self):
        """Should return None for non-existent ID."""
        self.assertIsNone(self.repo.get_by_id("missing"))

    def test_list_all_newest_first(self):
        first = self.repo.add(Question(title="First", difficulty="Easy"))
        second = self.repo.add(Question(title="Second", difficulty="Easy"))
        third = self.repo.add(Question(title="Third", difficulty="Easy"))

        ids = [q.id for q in self.repo.list_all()]

        self.assertEqual(ids, [third.id, second.id, first.id])

    def test_search_applies_filter(self):
        self.repo.add(Question(title="Two Sum", difficulty="Easy", tags=["x"]))
        self.repo.add(Question(title="Maximum Subarray", difficulty="Medium", tags=["y"]))

        found = self.repo.search(QuestionFilter(search="two"))

        self.assertEqual([q.title for q in found], ["Two Sum"])

    def test_update_replaces_all_fields(self):
        """Omitted optional fields are cleared and identity is preserved."""
        created = self.repo.add(Question(
            title="Two Sum",
            difficulty="Easy",
            source="LeetCode",
            code="pass",
            date_solved=parse_timestamp("2024-01-01"),
        ))

        updated = self.repo.update(created.id, Question(title="Two Sum II", difficulty="Medium"))
        stored = self.repo.get_by_id(created.id)

        self.assertEqual(updated.id, created.id)
        self.assertEqual(stored.title, "Two Sum II")
        self.assertEqual(stored.difficulty, "Medium")
        self.assertIsNone(stored.source)
        self.assertIsNone(stored.code)
        self.assertIsNone(stored.date_solved)
        self.assertEqual(stored.created_at, created.created_at)

    def test_update_missing_raises(self):
        with self.assertRaises(NotFoundError):
            self.repo.update("missing", Question(title="x", difficulty="Easy"))

    def test_delete(self):
        """Should delete a question."""
        created = self.repo.add(Question(title="Test to delete", difficulty="Hard"))
        self.repo.delete(created.id)

        self.assertIsNone(self.repo.get_by_id(created.id))

    def test_delete_missing_raises(self):
        with self.assertRaises(NotFoundError):
            self.repo.delete("missing")

    def test_add_batch(self):
        count = self.repo.add_batch([
            Question(title="A", difficulty="Easy"),
            Question(title="B", difficulty="Medium"),
        ])

        self.assertEqual(count, 2)
        self.assertEqual(len(self.repo.list_all()), 2)

    def test_add_batch_validates_first(self):
        """An invalid item means nothing is written."""
        with self.assertRaises(ValidationError):
            self.repo.add_batch([Question(title="A", difficulty="Easy"), Question(title="B")])
        self.assertEqual(self.repo.list_all(), [])

    def test_add_batch_empty(self):
        self.assertEqual(self.repo.add_batch([]), 0)


class TestCompanyRepository(unittest.TestCase):
    """Tests for CompanyRepository."""

    @classmethod
    def setUpClass(cls):
        cls.temp_db = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
        cls.temp_db.close()
        cls.conn = connect(Path(cls.temp_db.name))
        cls.repo = CompanyRepository(cls.conn)

    @classmethod
    def tearDownClass(cls):
        cls.conn.close()
        os.unlink(cls.temp_db.name)

    def setUp(self):
        self.conn.execute("DELETE FROM companies")
        self.conn.commit()

    def test_add_defaults_status(self):
        created = self.repo.add(CompanyApplication(name="Acme"))
        stored = self.repo.get_by_id(created.id)

        self.assertEqual(stored.status, "APPLIED")
        self.assertEqual(stored.name, "Acme")

    def test_update_and_clear_feedback(self):
        created = self.repo.add(CompanyApplication(name="Acme", feedback="Good call"))
        self.repo.update(created.id, CompanyApplication(name="Acme", status="REJECTED"))
        stored = self.repo.get_by_id(created.id)

        self.assertEqual(stored.status, "REJECTED")
        self.assertIsNone(stored.feedback)

    def test_search_by_status_with_limit(self):
        for name in ("A", "B", "C"):
            self.repo.add(CompanyApplication(name=name))
        self.repo.add(CompanyApplication(name="D", status="SELECTED"))

        applied = self.repo.search(CompanyFilter(status="APPLIED", limit=2))

        self.assertEqual([c.name for c in applied], ["C", "B"])

    def test_delete_missing_raises(self):
        with self.assertRaises(NotFoundError):
            self.repo.delete("missing")


if __name__ == "__main__":
    unittest.main()
