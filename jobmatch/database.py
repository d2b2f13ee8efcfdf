"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for matching record storage.
"""

from datetime import datetime
from pathlib import Path
from sqlalchemy import create_engine, Column, String, Float, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class MatchingRecord(Base):
    """Scoring outcome for one (candidate, job posting) pair."""

    __tablename__ = "matching_records"

    candidate_id = Column(String, primary_key=True)
    job_posting_id = Column(String, primary_key=True)
    skill_score = Column(Float, nullable=False)
    experience_score = Column(Float, nullable=False)
    qualification_score = Column(Float, nullable=False)
    total_score = Column(Float, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def to_dict(self) -> dict:
        return {
            "candidate_id": self.candidate_id,
            "job_posting_id": self.job_posting_id,
            "skill_score": self.skill_score,
            "experience_score": self.experience_score,
            "qualification_score": self.qualification_score,
            "total_score": self.total_score,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return (
            f"<MatchingRecord {self.candidate_id}/{self.job_posting_id} "
            f"total={self.total_score}>"
        )


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
