#!/usr/bin/env python3
"""JSON API for questions, company applications and dashboard stats."""
import argparse
import json
import logging
import sqlite3
from contextlib import contextmanager
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import parse_qs, unquote, urlparse

from config import Settings, configure_logging, load_settings
from core import (
    CompanyApplication,
    NotFoundError,
    Question,
    StoreUnavailableError,
    ValidationError,
    utc_now,
)
from services.filters import CompanyFilter, QuestionFilter
from services.stats import compute_company_stats, compute_question_stats, distinct_tags, distinct_topics
from storage import CompanyRepository, QuestionRepository, connect


logger = logging.getLogger(__name__)


class App:
    def __init__(self, db_path: str):
        self.db_path = db_path

    @contextmanager
    def conn(self):
        conn = connect(Path(self.db_path))
        try:
            yield conn
        finally:
            conn.close()


def route_parts(raw_path: str) -> list[str]:
    """Split a request path into segments, dropping an ``/api`` prefix."""
    path = urlparse(raw_path).path
    parts = [unquote(p) for p in path.split("/") if p]
    if parts and parts[0] == "api":
        parts = parts[1:]
    return parts


def make_handler(app: App):
    class Handler(BaseHTTPRequestHandler):
        def do_GET(self):
            self.dispatch("GET")

        def do_POST(self):
            self.dispatch("POST")

        def do_PUT(self):
            self.dispatch("PUT")

        def do_DELETE(self):
            self.dispatch("DELETE")

        def dispatch(self, method: str):
            parts = route_parts(self.path)
            try:
                handled = self.route(method, parts)
            except ValidationError as exc:
                return self.respond_json(HTTPStatus.BAD_REQUEST, {"error": str(exc)})
            except NotFoundError as exc:
                return self.respond_json(HTTPStatus.NOT_FOUND, {"error": str(exc)})
            except (StoreUnavailableError, sqlite3.Error) as exc:
                logger.error("%s %s failed: %s", method, self.path, exc)
                return self.respond_json(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": "Operation failed"})
            if not handled:
                self.respond_json(HTTPStatus.NOT_FOUND, {"error": "Route not found"})

        def route(self, method: str, parts: list[str]) -> bool:
            if parts == ["health"] and method == "GET":
                return self.handle_health()
            if parts == ["stats"] and method == "GET":
                return self.handle_question_stats()
            if parts == ["topics"] and method == "GET":
                return self.handle_topics()
            if parts == ["tags"] and method == "GET":
                return self.handle_tags()
            if parts == ["questions"]:
                if method == "GET":
                    return self.handle_question_list()
                if method == "POST":
                    return self.handle_question_create()
            if len(parts) == 2 and parts[0] == "questions":
                if method == "GET":
                    return self.handle_question_detail(parts[1])
                if method == "PUT":
                    return self.handle_question_update(parts[1])
                if method == "DELETE":
                    return self.handle_question_delete(parts[1])
            if parts == ["companies"]:
                if method == "GET":
                    return self.handle_company_list()
                if method == "POST":
                    return self.handle_company_create()
            if parts == ["companies", "stats"] and method == "GET":
                return self.handle_company_stats()
            if len(parts) == 2 and parts[0] == "companies":
                if method == "GET":
                    return self.handle_company_detail(parts[1])
                if method == "PUT":
                    return self.handle_company_update(parts[1])
                if method == "DELETE":
                    return self.handle_company_delete(parts[1])
            return False

        def query(self) -> dict:
            return parse_qs(urlparse(self.path).query)

        def read_json(self) -> dict:
            try:
                length = int(self.headers.get("Content-Length", "0") or 0)
            except ValueError as exc:
                raise ValidationError("Invalid Content-Length") from exc
            if length < 0:
                raise ValidationError("Invalid Content-Length")
            try:
                raw = self.rfile.read(length).decode("utf-8") if length else ""
            except UnicodeDecodeError as exc:
                raise ValidationError("Request body must be UTF-8") from exc
            if not raw.strip():
                return {}
            try:
                data = json.loads(raw)
            except ValueError as exc:
                raise ValidationError("Malformed JSON body") from exc
            if not isinstance(data, dict):
                raise ValidationError("JSON body must be an object")
            return data

        def respond_json(self, status: HTTPStatus, payload) -> bool:
            raw = json.dumps(payload).encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", "application/json; charset=utf-8")
            self.send_header("Content-Length", str(len(raw)))
            self.end_headers()
            self.wfile.write(raw)
            return True

        def handle_health(self):
            return self.respond_json(HTTPStatus.OK, {"status": "OK", "timestamp": utc_now().isoformat()})

        # Questions

        def handle_question_list(self):
            criteria = QuestionFilter.from_query(self.query())
            with app.conn() as conn:
                questions = QuestionRepository(conn).search(criteria)
            return self.respond_json(HTTPStatus.OK, [q.to_dict() for q in questions])

        def handle_question_detail(self, question_id: str):
            with app.conn() as conn:
                question = QuestionRepository(conn).require(question_id)
            return self.respond_json(HTTPStatus.OK, question.to_dict())

        def handle_question_create(self):
            question = Question.from_payload(self.read_json())
            with app.conn() as conn:
                created = QuestionRepository(conn).add(question)
            return self.respond_json(HTTPStatus.CREATED, created.to_dict())

        def handle_question_update(self, question_id: str):
            question = Question.from_payload(self.read_json())
            with app.conn() as conn:
                updated = QuestionRepository(conn).update(question_id, question)
            return self.respond_json(HTTPStatus.OK, updated.to_dict())

        def handle_question_delete(self, question_id: str):
            with app.conn() as conn:
                QuestionRepository(conn).delete(question_id)
            return self.respond_json(HTTPStatus.OK, {"message": "Question deleted successfully"})

        def handle_question_stats(self):
            with app.conn() as conn:
                questions = QuestionRepository(conn).list_all()
            return self.respond_json(HTTPStatus.OK, compute_question_stats(questions).to_dict())

        def handle_topics(self):
            with app.conn() as conn:
                questions = QuestionRepository(conn).list_all()
            return self.respond_json(HTTPStatus.OK, distinct_topics(questions))

        def handle_tags(self):
            with app.conn() as conn:
                questions = QuestionRepository(conn).list_all()
            return self.respond_json(HTTPStatus.OK, distinct_tags(questions))

        # Companies

        def handle_company_list(self):
            criteria = CompanyFilter.from_query(self.query())
            with app.conn() as conn:
                companies = CompanyRepository(conn).search(criteria)
            return self.respond_json(HTTPStatus.OK, [c.to_dict() for c in companies])

        def handle_company_detail(self, company_id: str):
            with app.conn() as conn:
                company = CompanyRepository(conn).require(company_id)
            return self.respond_json(HTTPStatus.OK, company.to_dict())

        def handle_company_create(self):
            company = CompanyApplication.from_payload(self.read_json())
            with app.conn() as conn:
                created = CompanyRepository(conn).add(company)
            return self.respond_json(HTTPStatus.CREATED, created.to_dict())

        def handle_company_update(self, company_id: str):
            company = CompanyApplication.from_payload(self.read_json())
            with app.conn() as conn:
                updated = CompanyRepository(conn).update(company_id, company)
            return self.respond_json(HTTPStatus.OK, updated.to_dict())

        def handle_company_delete(self, company_id: str):
            with app.conn() as conn:
                CompanyRepository(conn).delete(company_id)
            return self.respond_json(HTTPStatus.OK, {"message": "Company deleted successfully"})

        def handle_company_stats(self):
            with app.conn() as conn:
                companies = CompanyRepository(conn).list_all()
            return self.respond_json(HTTPStatus.OK, compute_company_stats(companies).to_dict())

        def log_message(self, fmt: str, *args):
            logger.debug("%s - %s", self.address_string(), fmt % args)

    return Handler


def create_server(settings: Settings) -> ThreadingHTTPServer:
    app = App(str(settings.database))
    return ThreadingHTTPServer((settings.host, settings.port), make_handler(app))


def serve(settings: Settings) -> None:
    server = create_server(settings)
    logger.info("Grindboard API running at http://%s:%s (%s)", settings.host, settings.port, settings.env)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()


def main():
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Grindboard JSON API")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--db", default=str(settings.database))
    args = parser.parse_args()

    settings.host = args.host
    settings.port = args.port
    settings.database = Path(args.db)
    configure_logging(settings)
    serve(settings)


if __name__ == "__main__":
    main()
