# Storage layer
from .db import connect, SCHEMA_SQL
from .repository import QuestionRepository, CompanyRepository

__all__ = ["connect", "SCHEMA_SQL", "QuestionRepository", "CompanyRepository"]
