import argparse
import json
from pathlib import Path

from .config import Settings, load_env

from . import __version__
from .completeness import compute_profile_completion, missing_fields
from .database import init_database, get_session
from .logger import get_logger
from .matching import (
    MatchingStoreError,
    get_matching_record,
    list_matching_records,
    rescore_candidate,
    upsert_matching_record,
)
from .media import MediaStoreClient, MediaStoreError
from .models import ProfileSnapshot
from .retry import CircuitOpenError, RetryError
from .schema import validate_profile
from .scoring import score_profile


def load_profile(input_path: Path) -> ProfileSnapshot:
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SystemExit(f"Invalid JSON in {input_path}: {e}")
    errors = validate_profile(data)
    if errors:
        print("Invalid profile:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    try:
        return ProfileSnapshot.from_dict(data)
    except ValueError as e:
        raise SystemExit(f"Invalid profile: {e}")


def _db_path(args: argparse.Namespace, settings: Settings) -> Path:
    db_path = Path(args.db) if args.db else settings.db_path
    init_database(db_path)
    return db_path


def cmd_score(args: argparse.Namespace, settings: Settings) -> None:
    profile = load_profile(Path(args.input))
    scores = score_profile(profile.experience, profile.education, merge_overlaps=args.merge_overlaps)
    print(json.dumps(scores.to_dict(), indent=2))


def cmd_completion(args: argparse.Namespace, settings: Settings) -> None:
    profile = load_profile(Path(args.input))
    has_cv, has_photo = profile.has_primary_cv, profile.has_primary_photo
    if args.fetch_media:
        if not args.candidate:
            raise SystemExit("--fetch-media requires --candidate")
        if not settings.media_api_url:
            raise SystemExit("JOBMATCH_MEDIA_API_URL not set.")
        client = MediaStoreClient(
            settings.media_api_url,
            token=settings.media_api_token,
            timeout=settings.http_timeout,
        )
        try:
            has_cv, has_photo = client.primary_flags(args.candidate)
        except (MediaStoreError, RetryError, CircuitOpenError) as e:
            raise SystemExit(f"Media store lookup failed: {e}")

    completion = compute_profile_completion(profile, has_cv, has_photo)
    print(f"Completion: {completion}%")
    missing = missing_fields(profile, has_cv, has_photo)
    if missing:
        print("Missing:")
        for name in missing:
            print(f" - {name}")


def cmd_upsert(args: argparse.Namespace, settings: Settings) -> None:
    profile = load_profile(Path(args.input))
    session = get_session(_db_path(args, settings))
    try:
        scores = score_profile(profile.experience, profile.education)
        record = upsert_matching_record(
            session, args.candidate, args.job, scores, max_retries=settings.store_retries
        )
        print(json.dumps(record.to_dict(), indent=2))
    except (RetryError, MatchingStoreError) as e:
        raise SystemExit(f"Could not save matching record: {e}")
    finally:
        session.close()
    get_logger().log_metrics_summary()


def cmd_rescore(args: argparse.Namespace, settings: Settings) -> None:
    profile = load_profile(Path(args.input))
    job_ids = [j.strip() for j in args.jobs.split(",") if j.strip()]
    if not job_ids:
        raise SystemExit("No job postings specified. Use --jobs \"id1,id2\"")
    session = get_session(_db_path(args, settings))
    try:
        records = rescore_candidate(
            session, args.candidate, job_ids, profile, max_retries=settings.store_retries
        )
    except (RetryError, MatchingStoreError) as e:
        raise SystemExit(f"Rescore failed: {e}")
    finally:
        session.close()
    print(f"Done. rescored={len(records)} candidate={args.candidate}")
    get_logger().log_metrics_summary()


def cmd_show(args: argparse.Namespace, settings: Settings) -> None:
    session = get_session(_db_path(args, settings))
    try:
        record = get_matching_record(session, args.candidate, args.job)
        if record is None:
            print(f"No matching record for {args.candidate}/{args.job}")
            return
        print(json.dumps(record.to_dict(), indent=2))
    finally:
        session.close()


def cmd_list(args: argparse.Namespace, settings: Settings) -> None:
    session = get_session(_db_path(args, settings))
    try:
        records, total = list_matching_records(
            session,
            page=args.page,
            page_size=args.page_size,
            sort_by=args.sort_by,
            sort_order="desc" if args.desc else "asc",
            candidate_id=args.candidate,
            job_posting_id=args.job,
        )
    except ValueError as e:
        raise SystemExit(str(e))
    finally:
        session.close()

    if not records:
        print("No matching records.")
        return
    print(f"Showing {len(records)} of {total} records:\n")
    for r in records:
        print(f"{r.candidate_id} -> {r.job_posting_id}")
        print(f"  Skill: {r.skill_score}  Experience: {r.experience_score}  Qualification: {r.qualification_score}")
        print(f"  Total: {r.total_score}")
        print()


def main():
    load_env()
    settings = Settings.from_env()
    get_logger().configure(settings.log_level, settings.log_dir)

    parser = argparse.ArgumentParser(prog="jobmatch", description="Candidate/job matching scores")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    sc = subparsers.add_parser("score", help="Compute skill/experience/qualification/total scores for a profile JSON")
    sc.add_argument("--input", required=True, help="Path to profile JSON")
    sc.add_argument("--merge-overlaps", action="store_true", help="Count overlapping roles once")
    sc.set_defaults(func=cmd_score)

    cp = subparsers.add_parser("completion", help="Profile completion percentage and missing fields")
    cp.add_argument("--input", required=True, help="Path to profile JSON")
    cp.add_argument("--candidate", help="Candidate ID (needed with --fetch-media)")
    cp.add_argument("--fetch-media", action="store_true", help="Read primary CV/photo flags from the media store")
    cp.set_defaults(func=cmd_completion)

    up = subparsers.add_parser("upsert", help="Score a profile and save the matching record for a job")
    up.add_argument("--input", required=True, help="Path to profile JSON")
    up.add_argument("--candidate", required=True, help="Candidate ID")
    up.add_argument("--job", required=True, help="Job posting ID")
    up.add_argument("--db", help="SQLite database path (default: JOBMATCH_DB_PATH or data/matching.db)")
    up.set_defaults(func=cmd_upsert)

    rs = subparsers.add_parser("rescore", help="Refresh a candidate's records for several job postings")
    rs.add_argument("--input", required=True, help="Path to profile JSON")
    rs.add_argument("--candidate", required=True, help="Candidate ID")
    rs.add_argument("--jobs", required=True, help="Comma-separated job posting IDs")
    rs.add_argument("--db", help="SQLite database path")
    rs.set_defaults(func=cmd_rescore)

    sh = subparsers.add_parser("show", help="Show one matching record")
    sh.add_argument("--candidate", required=True, help="Candidate ID")
    sh.add_argument("--job", required=True, help="Job posting ID")
    sh.add_argument("--db", help="SQLite database path")
    sh.set_defaults(func=cmd_show)

    ls = subparsers.add_parser("list", help="List matching records")
    ls.add_argument("--candidate", help="Filter by candidate ID")
    ls.add_argument("--job", help="Filter by job posting ID")
    ls.add_argument("--page", type=int, default=1)
    ls.add_argument("--page-size", type=int, default=10)
    ls.add_argument("--sort-by", default="created_at", help="Column to sort by (default: created_at)")
    ls.add_argument("--desc", action="store_true", help="Sort descending")
    ls.add_argument("--db", help="SQLite database path")
    ls.set_defaults(func=cmd_list)

    args = parser.parse_args()

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args, settings)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
