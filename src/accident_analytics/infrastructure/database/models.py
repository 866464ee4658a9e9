"""
Database Models

SQLAlchemy ORM models for the remote case mirror.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Text, JSON
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CaseDB(Base):
    """Case record with the opaque report payload"""

    __tablename__ = "cases"

    id = Column(String(64), primary_key=True, index=True)
    reference_number = Column(String(32), nullable=False, index=True)
    status = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    plaintiff = Column(String(255), nullable=True)
    defendant = Column(String(255), nullable=True)
    report_data = Column(JSON, nullable=True)
    thumbnail_url = Column(Text, nullable=True)

    def __repr__(self):
        return f"<CaseDB(id='{self.id}', reference_number='{self.reference_number}')>"
