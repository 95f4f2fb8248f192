import datetime as dt
import unittest
from datetime import datetime, timedelta

from core import CompanyApplication, Question
from services.filters import CompanyFilter, QuestionFilter, split_tags


BASE = datetime(2024, 1, 1, tzinfo=dt.timezone.utc)


def question(title, minutes, **fields):
    return Question(id=title, title=title, difficulty=fields.pop("difficulty", "Easy"),
                    created_at=BASE + timedelta(minutes=minutes), **fields)


def company(name, minutes, **fields):
    return CompanyApplication(id=name, name=name, created_at=BASE + timedelta(minutes=minutes), **fields)


class TestQuestionFilter(unittest.TestCase):
    """Tests for question query criteria."""

    def setUp(self):
        self.questions = [
            question("Two Sum", 1, topics=["Array", "Hash Table"], tags=["x"]),
            question("Maximum Subarray", 3, difficulty="Medium", topics=["Array", "Dynamic Programming"],
                     tags=["y"], explanation="Kadane"),
            question("Word Ladder", 2, difficulty="Hard", topics=["Graph"], tags=["z"],
                     code="def ladder(): two_queues = []"),
        ]

    def titles(self, criteria):
        return [q.title for q in criteria.apply(self.questions)]

    def test_no_criteria_returns_all_newest_first(self):
        self.assertEqual(self.titles(QuestionFilter()), ["Maximum Subarray", "Word Ladder", "Two Sum"])

    def test_search_is_case_insensitive_substring(self):
        """'two' hits the Two Sum title and code mentioning two, not Maximum Subarray."""
        result = self.titles(QuestionFilter(search="two"))

        self.assertIn("Two Sum", result)
        self.assertNotIn("Maximum Subarray", result)

    def test_search_covers_code_and_explanation(self):
        self.assertEqual(self.titles(QuestionFilter(search="QUEUES")), ["Word Ladder"])
        self.assertEqual(self.titles(QuestionFilter(search="kadane")), ["Maximum Subarray"])

    def test_blank_search_is_ignored(self):
        self.assertEqual(len(self.titles(QuestionFilter(search="   "))), 3)

    def test_search_keeps_surrounding_spaces(self):
        """A trailing space is part of the term, so 'Twosome' does not match 'two '."""
        records = [question("Twosome", 1), question("Two Sum", 2)]

        result = QuestionFilter(search="two ").apply(records)

        self.assertEqual([q.title for q in result], ["Two Sum"])
        self.assertEqual(QuestionFilter(search=" sum").search, " sum")

    def test_topic_exact_membership(self):
        self.assertEqual(self.titles(QuestionFilter(topic="Array")), ["Maximum Subarray", "Two Sum"])
        self.assertEqual(self.titles(QuestionFilter(topic="array")), [])

    def test_difficulty_exact(self):
        self.assertEqual(self.titles(QuestionFilter(difficulty="Hard")), ["Word Ladder"])

    def test_unknown_difficulty_gives_empty_result(self):
        self.assertEqual(self.titles(QuestionFilter(difficulty="Impossible")), [])

    def test_tags_match_any(self):
        """Records carrying only one of the requested tags still match."""
        self.assertEqual(self.titles(QuestionFilter(tags=["x", "y"])), ["Maximum Subarray", "Two Sum"])

    def test_empty_tag_list_is_no_filter(self):
        self.assertEqual(len(self.titles(QuestionFilter(tags=[]))), 3)
        self.assertEqual(len(self.titles(QuestionFilter(tags=["", " "]))), 3)

    def test_criteria_combine_with_and(self):
        self.assertEqual(self.titles(QuestionFilter(topic="Array", difficulty="Easy")), ["Two Sum"])
        self.assertEqual(self.titles(QuestionFilter(topic="Graph", tags=["x"])), [])

    def test_from_query(self):
        criteria = QuestionFilter.from_query({
            "search": ["sum"],
            "topic": ["Array"],
            "tags": ["x,y", "z"],
        })

        self.assertEqual(criteria.search, "sum")
        self.assertEqual(criteria.topic, "Array")
        self.assertIsNone(criteria.difficulty)
        self.assertEqual(criteria.tags, ["x", "y", "z"])

    def test_split_tags(self):
        self.assertEqual(split_tags("a, b,,a"), ["a", "b"])
        self.assertEqual(split_tags(None), [])


class TestCompanyFilter(unittest.TestCase):
    """Tests for company query criteria."""

    def setUp(self):
        self.companies = [
            company("Acme", 1, feedback="Strong system design round"),
            company("Globex", 2, status="REJECTED"),
            company("Initech", 3, status="SELECTED"),
        ]

    def names(self, criteria):
        return [c.name for c in criteria.apply(self.companies)]

    def test_no_criteria_newest_first(self):
        self.assertEqual(self.names(CompanyFilter()), ["Initech", "Globex", "Acme"])

    def test_search_name_and_feedback(self):
        self.assertEqual(self.names(CompanyFilter(search="glob")), ["Globex"])
        self.assertEqual(self.names(CompanyFilter(search="SYSTEM")), ["Acme"])

    def test_status_exact(self):
        self.assertEqual(self.names(CompanyFilter(status="REJECTED")), ["Globex"])

    def test_unknown_status_gives_empty_result(self):
        self.assertEqual(self.names(CompanyFilter(status="GHOSTED")), [])

    def test_limit_after_ordering(self):
        self.assertEqual(self.names(CompanyFilter(limit=2)), ["Initech", "Globex"])

    def test_negative_limit_is_ignored(self):
        self.assertEqual(len(self.names(CompanyFilter(limit=-1))), 3)

    def test_from_query_ignores_bad_limit(self):
        criteria = CompanyFilter.from_query({"status": ["APPLIED"], "limit": ["many"]})

        self.assertEqual(criteria.status, "APPLIED")
        self.assertIsNone(criteria.limit)


if __name__ == "__main__":
    unittest.main()
