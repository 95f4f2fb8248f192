"""HTTP client for the Grindboard JSON API."""
import logging
from typing import Optional

import requests

from core import CompanyApplication, Question, TrackerError, parse_timestamp
from services.stats import CompanyStats, QuestionStats


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://127.0.0.1:5000/api"


class ApiError(TrackerError):
    """A request failed or the server answered with an error status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def question_from_dict(data: dict) -> Question:
    question = Question.from_payload(data)
    question.id = data.get("id")
    question.created_at = parse_timestamp(data.get("createdAt"))
    return question


def company_from_dict(data: dict) -> CompanyApplication:
    company = CompanyApplication.from_payload(data)
    company.id = data.get("id")
    company.created_at = parse_timestamp(data.get("createdAt"))
    return company


class TrackerClient:
    """Thin wrapper over the API; each call is one request with no client-side state."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, params: Optional[dict] = None, payload: Optional[dict] = None):
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, params=params, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise ApiError(f"Cannot reach {url}: {exc}") from exc
        if not resp.ok:
            try:
                message = resp.json().get("error", resp.reason)
            except ValueError:
                message = resp.reason
            raise ApiError(message, status=resp.status_code)
        return resp.json()

    def health(self) -> dict:
        return self._request("GET", "/health")

    def list_questions(self, search: str = "", topic: str = "", difficulty: str = "", tags: Optional[list[str]] = None) -> list[Question]:
        params: dict = {}
        if search:
            params["search"] = search
        if topic:
            params["topic"] = topic
        if difficulty:
            params["difficulty"] = difficulty
        if tags:
            params["tags"] = list(tags)
        return [question_from_dict(d) for d in self._request("GET", "/questions", params=params)]

    def get_question(self, question_id: str) -> Question:
        return question_from_dict(self._request("GET", f"/questions/{question_id}"))

    def create_question(self, question: Question) -> Question:
        return question_from_dict(self._request("POST", "/questions", payload=question.to_dict()))

    def update_question(self, question_id: str, question: Question) -> Question:
        return question_from_dict(self._request("PUT", f"/questions/{question_id}", payload=question.to_dict()))

    def delete_question(self, question_id: str) -> None:
        self._request("DELETE", f"/questions/{question_id}")

    def question_stats(self) -> QuestionStats:
        return QuestionStats.from_dict(self._request("GET", "/stats"))

    def topics(self) -> list[str]:
        return self._request("GET", "/topics")

    def tags(self) -> list[str]:
        return self._request("GET", "/tags")

    def list_companies(self, search: str = "", status: str = "", limit: Optional[int] = None) -> list[CompanyApplication]:
        params: dict = {}
        if search:
            params["search"] = search
        if status:
            params["status"] = status
        if limit is not None:
            params["limit"] = limit
        return [company_from_dict(d) for d in self._request("GET", "/companies", params=params)]

    def get_company(self, company_id: str) -> CompanyApplication:
        return company_from_dict(self._request("GET", f"/companies/{company_id}"))

    def create_company(self, company: CompanyApplication) -> CompanyApplication:
        return company_from_dict(self._request("POST", "/companies", payload=company.to_dict()))

    def update_company(self, company_id: str, company: CompanyApplication) -> CompanyApplication:
        return company_from_dict(self._request("PUT", f"/companies/{company_id}", payload=company.to_dict()))

    def delete_company(self, company_id: str) -> None:
        self._request("DELETE", f"/companies/{company_id}")

    def company_stats(self) -> CompanyStats:
        data = self._request("GET", "/companies/stats")
        return CompanyStats(
            total_applications=int(data.get("totalApplications", 0)),
            status_counts={k: int(v) for k, v in (data.get("statusCounts") or {}).items()},
            selected_count=int(data.get("selectedCount", 0)),
            rejected_count=int(data.get("rejectedCount", 0)),
        )
