#!/usr/bin/env python3
"""Grindboard CLI - track practice questions and job applications."""
import argparse
import csv
import json
import logging
import sqlite3
from pathlib import Path

from client import TrackerClient
from config import configure_logging, load_settings
from core import DIFFICULTIES, STATUSES, CompanyApplication, Question, TrackerError
from services.filters import CompanyFilter, QuestionFilter, split_tags
from services.heatmap import build_heatmap, render_heatmap
from services.stats import (
    compute_company_stats,
    compute_question_stats,
    distinct_tags,
    distinct_topics,
    solved_percentage,
    topic_rows,
)
from storage import CompanyRepository, QuestionRepository, connect


logger = logging.getLogger(__name__)


def _read_rows(path: Path) -> list[dict]:
    suffix = path.suffix.lower()
    if suffix == ".jsonl":
        with path.open("r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
    if suffix == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError("JSON import must be a list of question objects.")
        return data
    if suffix == ".csv":
        with path.open("r", encoding="utf-8-sig", newline="") as f:
            return list(csv.DictReader(f))
    raise ValueError("Unsupported format. Use .jsonl, .json, or .csv")


def _parse_import_file(path: Path) -> list[Question]:
    """Read question rows, skipping any without a title.

    CSV cells hold comma separated topics and tags, JSON rows hold lists.
    """
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    questions = []
    for row in _read_rows(path):
        if not isinstance(row, dict):
            raise ValueError("Each imported row must be an object.")
        if not str(row.get("title") or "").strip():
            continue
        payload = dict(row)
        payload["topics"] = _label_field(row.get("topics"))
        payload["tags"] = _label_field(row.get("tags"))
        questions.append(Question.from_payload(payload))
    return questions


def _label_field(value) -> list[str]:
    return split_tags(value)


def _non_negative(raw: str) -> int:
    value = int(raw)
    if value < 0:
        raise argparse.ArgumentTypeError("must be 0 or more")
    return value


def add_question(conn: sqlite3.Connection, args: argparse.Namespace) -> None:
    question = Question.from_payload({
        "title": args.title,
        "difficulty": args.difficulty,
        "topics": _label_field(args.topics),
        "tags": _label_field(args.tags),
        "source": args.source,
        "link": args.link,
        "dateSolved": args.solved,
    })
    created = QuestionRepository(conn).add(question)
    print(f"Added question {created.id}.")


def import_questions(conn: sqlite3.Connection, args: argparse.Namespace) -> None:
    questions = _parse_import_file(Path(args.file))
    if not questions:
        print("No valid questions found.")
        return
    count = QuestionRepository(conn).add_batch(questions)
    print(f"Imported {count} questions.")


def list_questions(conn: sqlite3.Connection, args: argparse.Namespace) -> None:
    criteria = QuestionFilter(
        search=args.search,
        topic=args.topic,
        difficulty=args.difficulty,
        tags=_label_field(args.tags),
    )
    questions = QuestionRepository(conn).search(criteria)
    if not questions:
        print("No questions.")
        return
    for q in (questions[: args.limit] if args.limit else questions):
        solved = f"solved {q.date_solved.date().isoformat()}" if q.solved else "unsolved"
        topics = ", ".join(q.topics) or "-"
        tags = f" #{' #'.join(q.tags)}" if q.tags else ""
        print(f"[{q.id}] {q.title} ({q.difficulty}, {solved})\n  {topics}{tags}")


def delete_question(conn: sqlite3.Connection, args: argparse.Namespace) -> None:
    QuestionRepository(conn).delete(args.id)
    print("Question deleted.")


def add_company(conn: sqlite3.Connection, args: argparse.Namespace) -> None:
    company = CompanyApplication.from_payload({
        "name": args.name,
        "salary": args.salary,
        "status": args.status,
        "feedback": args.feedback,
    })
    created = CompanyRepository(conn).add(company)
    print(f"Added application {created.id}.")


def list_companies(conn: sqlite3.Connection, args: argparse.Namespace) -> None:
    criteria = CompanyFilter(search=args.search, status=args.status, limit=args.limit or None)
    companies = CompanyRepository(conn).search(criteria)
    if not companies:
        print("No applications.")
        return
    for c in companies:
        salary = f" {c.salary}" if c.salary else ""
        print(f"[{c.id}] {c.name} - {c.status.replace('_', ' ').lower()}{salary}")


def set_status(conn: sqlite3.Connection, args: argparse.Namespace) -> None:
    repo = CompanyRepository(conn)
    company = repo.require(args.id)
    company.status = args.status
    if args.feedback is not None:
        company.feedback = args.feedback or None
    repo.update(args.id, company)
    print(f"{company.name}: {company.status}")


def show_stats(conn: sqlite3.Connection, args: argparse.Namespace) -> None:
    stats = compute_question_stats(QuestionRepository(conn).list_all())
    if args.json:
        print(json.dumps(stats.to_dict(), indent=2))
        return
    print(f"Solved {stats.total_solved}/{stats.total_questions} ({solved_percentage(stats)}%)")
    print("\n## Difficulty")
    for difficulty, count in stats.difficulty_stats.items():
        print(f"- {difficulty}: {count}")
    print("\n## Topics")
    rows = topic_rows(stats)
    if not rows:
        print("- None")
    for row in rows:
        print(f"- {row['topic']}: {row['solved']}/{row['total']} ({row['remaining']} left)")


def show_company_stats(conn: sqlite3.Connection, args: argparse.Namespace) -> None:
    stats = compute_company_stats(CompanyRepository(conn).list_all())
    if args.json:
        print(json.dumps(stats.to_dict(), indent=2))
        return
    print(f"Applications: {stats.total_applications}")
    print(f"Selected: {stats.selected_count}  Rejected: {stats.rejected_count}")
    for status, count in stats.status_counts.items():
        print(f"- {status}: {count}")


def show_topics(conn: sqlite3.Connection, args: argparse.Namespace) -> None:
    for topic in distinct_topics(QuestionRepository(conn).list_all()):
        print(topic)


def show_tags(conn: sqlite3.Connection, args: argparse.Namespace) -> None:
    for tag in distinct_tags(QuestionRepository(conn).list_all()):
        print(tag)


def show_heatmap(conn: sqlite3.Connection, args: argparse.Namespace) -> None:
    if args.url:
        stats = TrackerClient(args.url).question_stats()
    else:
        stats = compute_question_stats(QuestionRepository(conn).list_all())
    grid = build_heatmap(stats.heatmap_source)
    print(f"{grid.total_count} solved between {grid.start_date.isoformat()} and {grid.end_date.isoformat()}\n")
    print(render_heatmap(grid))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Grindboard: practice question and job application tracker.")
    parser.add_argument("--db", default=None, help="SQLite database path.")
    parser.add_argument("--env-file", default=".env", help="Dotenv file with GRINDBOARD_* settings.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_add = sub.add_parser("add-question", help="Add one question.")
    p_add.add_argument("--title", required=True, help="Question title.")
    p_add.add_argument("--difficulty", required=True, choices=list(DIFFICULTIES))
    p_add.add_argument("--topics", default="", help="Comma-separated topics.")
    p_add.add_argument("--tags", default="", help="Comma-separated tags.")
    p_add.add_argument("--source", default="", help="Practice platform.")
    p_add.add_argument("--link", default="", help="Problem URL.")
    p_add.add_argument("--solved", default="", help="Date solved (YYYY-MM-DD).")
    p_add.set_defaults(func=add_question)

    p_import = sub.add_parser("import", help="Import questions from json/jsonl/csv.")
    p_import.add_argument("--file", required=True, help="Input file path.")
    p_import.set_defaults(func=import_questions)

    p_list = sub.add_parser("list-questions", help="List questions, newest first.")
    p_list.add_argument("--search", default="")
    p_list.add_argument("--topic", default="")
    p_list.add_argument("--difficulty", default="")
    p_list.add_argument("--tags", default="", help="Comma-separated; matches any.")
    p_list.add_argument("--limit", type=_non_negative, default=0, help="Max items (0 = all).")
    p_list.set_defaults(func=list_questions)

    p_del = sub.add_parser("delete-question", help="Delete a question.")
    p_del.add_argument("id")
    p_del.set_defaults(func=delete_question)

    p_company = sub.add_parser("add-company", help="Track a job application.")
    p_company.add_argument("--name", required=True)
    p_company.add_argument("--salary", default="")
    p_company.add_argument("--status", default="APPLIED", choices=list(STATUSES))
    p_company.add_argument("--feedback", default="")
    p_company.set_defaults(func=add_company)

    p_companies = sub.add_parser("list-companies", help="List applications, newest first.")
    p_companies.add_argument("--search", default="")
    p_companies.add_argument("--status", default="")
    p_companies.add_argument("--limit", type=_non_negative, default=0)
    p_companies.set_defaults(func=list_companies)

    p_status = sub.add_parser("set-status", help="Move an application to another status.")
    p_status.add_argument("id")
    p_status.add_argument("status", choices=list(STATUSES))
    p_status.add_argument("--feedback", default=None)
    p_status.set_defaults(func=set_status)

    p_stats = sub.add_parser("stats", help="Question statistics.")
    p_stats.add_argument("--json", action="store_true")
    p_stats.set_defaults(func=show_stats)

    p_cstats = sub.add_parser("company-stats", help="Application statistics.")
    p_cstats.add_argument("--json", action="store_true")
    p_cstats.set_defaults(func=show_company_stats)

    sub.add_parser("topics", help="All distinct topics.").set_defaults(func=show_topics)
    sub.add_parser("tags", help="All distinct tags.").set_defaults(func=show_tags)

    p_heatmap = sub.add_parser("heatmap", help="Draw the last year of solves.")
    p_heatmap.add_argument("--url", default="", help="Read stats from a running API instead of the database.")
    p_heatmap.set_defaults(func=show_heatmap)

    p_serve = sub.add_parser("serve", help="Run the JSON API.")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.set_defaults(func=None)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings(Path(args.env_file))
    if args.db:
        settings.database = Path(args.db)
    configure_logging(settings)

    if args.command == "serve":
        from web.server import serve

        if args.host:
            settings.host = args.host
        if args.port:
            settings.port = args.port
        serve(settings)
        return 0

    try:
        conn = connect(settings.database)
    except TrackerError as exc:
        print(f"Error: {exc}")
        return 1
    try:
        args.func(conn, args)
    except (TrackerError, ValueError, OSError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}")
        return 1
    finally:
        conn.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
