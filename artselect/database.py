"""
Submission log database.

Uses SQLite with SQLAlchemy to record which records a user submitted.
The selection store itself is never loaded back from here.
"""

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Iterable

from sqlalchemy import create_engine, Column, Integer, String, Text, DateTime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from .models import Record

Base = declarative_base()


class SubmissionError(Exception):
    """Raised when a submission cannot be written to the database."""


class SubmittedRecord(Base):
    """One selected record within a submission."""

    __tablename__ = "submitted_records"

    submission_id = Column(String, primary_key=True)
    record_id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String, nullable=True)
    payload = Column(Text, nullable=False)  # full record as JSON
    submitted_at = Column(DateTime, nullable=False, default=datetime.now)


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()


def save_submission(db_path: Path, records: Iterable[Record]) -> str:
    """
    Write every record of one submission under a new submission id.

    Args:
        db_path: Path to SQLite database file (created if missing)
        records: Selected records to log

    Returns:
        The generated submission id

    Raises:
        SubmissionError: If the database cannot be created or written
    """
    try:
        init_database(db_path)
    except (OSError, SQLAlchemyError) as e:
        raise SubmissionError(f"Cannot open submission database {db_path}: {e}") from e

    submission_id = uuid.uuid4().hex
    submitted_at = datetime.now()
    session = get_session(db_path)
    try:
        for record in records:
            title = record.get("title")
            session.add(
                SubmittedRecord(
                    submission_id=submission_id,
                    record_id=record.id,
                    title=str(title) if title is not None else None,
                    payload=json.dumps(record.to_dict(), ensure_ascii=False, default=str),
                    submitted_at=submitted_at,
                )
            )
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise SubmissionError(f"Cannot write submission to {db_path}: {e}") from e
    finally:
        session.close()
    return submission_id
