"""Database layer"""

from .client import DatabaseClient, db_client
from .case_repository import CaseRepository
from .models import CaseDB

__all__ = ["DatabaseClient", "db_client", "CaseRepository", "CaseDB"]
