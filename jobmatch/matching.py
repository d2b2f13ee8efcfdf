"""
Matching record persistence.

One record per (candidate, job posting), written with a single atomic
INSERT ... ON CONFLICT DO UPDATE so concurrent writers for the same pair
end with the last write. Transient store failures are retried with
exponential backoff and surface as RetryError once retries run out.
"""

from datetime import date, datetime
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import OperationalError

from .database import MatchingRecord
from .logger import get_logger
from .models import MatchScores, ProfileSnapshot
from .retry import is_transient_error, retry_call
from .schema import normalize_scores, validate_scores
from .scoring import compute_total_score, score_profile

logger = get_logger()

SCORE_COLUMNS = ("skill_score", "experience_score", "qualification_score", "total_score")
SORTABLE_COLUMNS = SCORE_COLUMNS + ("created_at", "updated_at", "candidate_id", "job_posting_id")


class MatchingStoreError(RuntimeError):
    """Non-transient store failure (schema missing, constraint broken, ...)."""

    retryable = False


def _coerce_scores(scores: Union[MatchScores, Mapping[str, Any]]) -> dict:
    if isinstance(scores, MatchScores):
        scores = scores.to_dict()
    errors = validate_scores(scores)
    if errors:
        raise ValueError("Invalid scores: " + "; ".join(errors))
    values = normalize_scores(scores)
    if values["total_score"] is None:
        values["total_score"] = compute_total_score(
            values["skill_score"], values["experience_score"], values["qualification_score"]
        )
    return values


def _status(stored, values: dict) -> str:
    if stored is None:
        return "new"
    if all(getattr(stored, col) == values[col] for col in SCORE_COLUMNS):
        return "no-change"
    return "updated"


def _write(session, candidate_id: str, job_posting_id: str, values: dict) -> str:
    try:
        # Stored row, not the identity map: another session may have written since.
        stored = session.execute(
            select(*(getattr(MatchingRecord, col) for col in SCORE_COLUMNS)).where(
                MatchingRecord.candidate_id == candidate_id,
                MatchingRecord.job_posting_id == job_posting_id,
            )
        ).first()
        status = _status(stored, values)

        now = datetime.now()
        stmt = sqlite_insert(MatchingRecord).values(
            candidate_id=candidate_id,
            job_posting_id=job_posting_id,
            created_at=now,
            updated_at=now,
            **values,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["candidate_id", "job_posting_id"],
            set_={**values, "updated_at": now},
        )
        session.execute(stmt)
        session.commit()
        return status
    except OperationalError as e:
        session.rollback()
        logger.record_store_failure(type(e).__name__)
        if is_transient_error(e):
            logger.warning(
                "Transient store failure writing matching record",
                candidate_id=candidate_id,
                job_posting_id=job_posting_id,
                error=str(e.orig) if e.orig is not None else str(e),
            )
            raise
        raise MatchingStoreError(f"Matching record write failed: {e}") from e


def upsert_matching_record(
    session,
    candidate_id: str,
    job_posting_id: str,
    scores: Union[MatchScores, Mapping[str, Any]],
    max_retries: int = 3,
    retry_delay: float = 0.1,
) -> MatchingRecord:
    """
    Create or replace the matching record for (candidate_id, job_posting_id).

    Args:
        session: SQLAlchemy session bound to the matching database
        candidate_id: Candidate (user) identifier
        job_posting_id: Job posting identifier
        scores: MatchScores, or a mapping of score fields; total_score is
            derived when omitted
        max_retries: Retries for transient store failures
        retry_delay: Initial backoff delay in seconds

    Returns:
        The stored MatchingRecord

    Raises:
        ValueError: Scores missing, non-numeric or out of range
        RetryError: Transient store failures persisted through all retries
        MatchingStoreError: Non-transient store failure
    """
    if not candidate_id or not job_posting_id:
        raise ValueError("candidate_id and job_posting_id are required")
    values = _coerce_scores(scores)

    def on_retry(attempt, exc, delay):
        logger.info(
            "Retrying matching record write",
            attempt=attempt,
            delay=delay,
            candidate_id=candidate_id,
            job_posting_id=job_posting_id,
        )

    status = retry_call(
        _write,
        session,
        candidate_id,
        job_posting_id,
        values,
        max_retries=max_retries,
        base_delay=retry_delay,
        exceptions=(OperationalError,),
        on_retry=on_retry,
    )

    logger.record_upsert(status)
    logger.debug(
        "Matching record written",
        candidate_id=candidate_id,
        job_posting_id=job_posting_id,
        status=status,
        total_score=values["total_score"],
    )
    return session.get(
        MatchingRecord, (candidate_id, job_posting_id), populate_existing=True
    )


def get_matching_record(session, candidate_id: str, job_posting_id: str) -> Optional[MatchingRecord]:
    return session.get(MatchingRecord, (candidate_id, job_posting_id))


def delete_matching_record(session, candidate_id: str, job_posting_id: str) -> bool:
    """Remove a record; returns False when it did not exist."""
    record = session.get(MatchingRecord, (candidate_id, job_posting_id))
    if record is None:
        return False
    session.delete(record)
    session.commit()
    logger.info("Matching record deleted", candidate_id=candidate_id, job_posting_id=job_posting_id)
    return True


def list_matching_records(
    session,
    page: int = 1,
    page_size: int = 10,
    sort_by: str = "created_at",
    sort_order: str = "asc",
    candidate_id: Optional[str] = None,
    job_posting_id: Optional[str] = None,
    min_total_score: Optional[float] = None,
) -> Tuple[List[MatchingRecord], int]:
    """
    Page through matching records.

    Returns:
        Tuple of (records on this page, total matching the filters)
    """
    if page < 1 or page_size < 1:
        raise ValueError("page and page_size must be positive")
    if sort_by not in SORTABLE_COLUMNS:
        raise ValueError(f"Cannot sort by {sort_by!r}; choose one of {', '.join(SORTABLE_COLUMNS)}")
    if sort_order not in ("asc", "desc"):
        raise ValueError("sort_order must be 'asc' or 'desc'")

    query = session.query(MatchingRecord)
    if candidate_id:
        query = query.filter(MatchingRecord.candidate_id == candidate_id)
    if job_posting_id:
        query = query.filter(MatchingRecord.job_posting_id == job_posting_id)
    if min_total_score is not None:
        query = query.filter(MatchingRecord.total_score >= min_total_score)

    total = query.count()

    column = getattr(MatchingRecord, sort_by)
    ordering = column.desc() if sort_order == "desc" else column.asc()
    records = (
        query.order_by(ordering, MatchingRecord.candidate_id, MatchingRecord.job_posting_id)
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return records, total


def rescore_candidate(
    session,
    candidate_id: str,
    job_posting_ids: Iterable[str],
    profile: ProfileSnapshot,
    today: Optional[date] = None,
    **upsert_kwargs,
) -> List[MatchingRecord]:
    """Recompute a candidate's scores and refresh their record for each job."""
    scores = score_profile(profile.experience, profile.education, today=today)
    records = [
        upsert_matching_record(session, candidate_id, job_id, scores, **upsert_kwargs)
        for job_id in job_posting_ids
    ]
    logger.info(
        "Candidate rescored",
        candidate_id=candidate_id,
        jobs=len(records),
        total_score=scores.total_score,
    )
    return records
