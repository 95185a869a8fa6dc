import argparse
import json
from pathlib import Path
from typing import List

from . import __version__
from .config import DedupConfig, load_env
from .errors import ConfigurationError, LookupBatchError
from .grouping import DuplicateGrouper
from .logger import get_logger
from .models import JobListing
from .reconcile import DatabaseReconciler, reconcile_batch
from .schema import validate_listing
from .similarity import JobSimilarityScorer
from .storage import JobStore


def load_batch(input_path: Path) -> List[dict]:
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SystemExit(f"Invalid JSON in {input_path}: {e}")
    if isinstance(data, dict):
        data = data.get("jobs", [])
    if not isinstance(data, list):
        raise SystemExit("Input must be a JSON array of listings or an object with a 'jobs' array")
    return [item for item in data if isinstance(item, dict)]


def load_listings(input_path: Path) -> List[JobListing]:
    return [JobListing.from_dict(item) for item in load_batch(input_path)]


def write_output(payload: dict, output: str) -> None:
    if not output:
        return
    out_path = Path(output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    print(f"Wrote {out_path}")


def build_grouper(config: DedupConfig, threshold: float = None) -> DuplicateGrouper:
    scorer = JobSimilarityScorer(config.weights, config.description_tokens)
    return DuplicateGrouper(scorer, threshold if threshold is not None else config.fuzzy_threshold)


def cmd_dedupe(args: argparse.Namespace) -> None:
    config = args.config
    jobs = load_listings(Path(args.input))
    result = build_grouper(config, args.threshold).find_duplicates(jobs)
    for match in result.duplicates:
        print(f"[{match.reason.value}] {match.duplicate_id} -> {match.primary_id} ({match.score:.2f})")
    print(f"Done. total={len(jobs)} unique={len(result.unique)} duplicates={len(result.duplicates)}")
    write_output(result.to_dict(), args.output)


def cmd_group(args: argparse.Namespace) -> None:
    config = args.config
    threshold = args.threshold if args.threshold is not None else config.group_threshold
    jobs = load_listings(Path(args.input))
    groups = build_grouper(config).group_similar_jobs(jobs, threshold)
    for n, group in enumerate(groups, 1):
        rep = group.representative
        print(f"Group {n}: {rep.title} @ {rep.company} (representative {rep.id}, {len(group)} members)")
        for member in group.duplicates:
            print(f"  - {member.id}: {member.title} @ {member.company} [{member.source.site}]")
    print(f"Done. total={len(jobs)} groups={len(groups)}")


def cmd_merge(args: argparse.Namespace) -> None:
    config = args.config
    threshold = args.threshold if args.threshold is not None else config.group_threshold
    jobs = load_listings(Path(args.input))
    result = reconcile_batch(jobs, threshold, grouper=build_grouper(config))
    print(f"Done. total={len(jobs)} merged={len(result.unique)} folded={len(result.duplicates)}")
    write_output(result.to_dict(), args.output)


def cmd_reconcile(args: argparse.Namespace) -> None:
    config = args.config
    threshold = args.threshold if args.threshold is not None else config.database_threshold
    store = JobStore(Path(args.db) if args.db else config.db_path)
    jobs = load_listings(Path(args.input))
    scorer = JobSimilarityScorer(config.weights, config.description_tokens)
    reconciler = DatabaseReconciler(store.find_candidates, scorer=scorer, threshold=threshold)
    result = reconciler.reconcile(jobs, max_workers=args.workers or config.max_workers)

    for job, match in result.dropped:
        print(f"[known:{match.reason.value}] {job.id} -> {match.primary_id}")
    for failure in result.failures:
        print(f"[lookup_error] {failure.job_id} -> {failure.cause}")

    new = upd = same = 0
    if args.persist:
        for job in result.kept:
            status = store.upsert(job)
            if status == "new":
                new += 1
            elif status == "updated":
                upd += 1
            else:
                same += 1
    print(
        f"Done. total={len(jobs)} kept={len(result.kept)} dropped={len(result.dropped)} "
        f"failed={len(result.failures)} new={new} updated={upd} no-change={same}"
    )
    if result.failures:
        raise LookupBatchError(result.failures, result)


def cmd_validate(args: argparse.Namespace) -> None:
    invalid = 0
    for n, item in enumerate(load_batch(Path(args.input))):
        errors = validate_listing(item)
        if errors:
            invalid += 1
            print(f"Listing {n} ({item.get('id', '?')}) invalid:")
            for e in errors:
                print(f" - {e}")
    if invalid:
        raise SystemExit(2)
    print("Valid")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobdedup", description="Deduplicate and reconcile scraped job listings")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--log-dir", help="Directory for log files (default: logs/)")

    subparsers = parser.add_subparsers(dest="command")
    ded = subparsers.add_parser("dedupe", help="Find duplicates within a JSON batch of listings")
    ded.add_argument("--input", required=True, help="Path to JSON array of listings")
    ded.add_argument("--threshold", type=float, help="Fuzzy match threshold (default: JOBDEDUP_FUZZY_THRESHOLD or 0.75)")
    ded.add_argument("--output", help="Write {unique, duplicates} JSON here")
    ded.set_defaults(func=cmd_dedupe)

    grp = subparsers.add_parser("group", help="Print similarity groups for a JSON batch")
    grp.add_argument("--input", required=True, help="Path to JSON array of listings")
    grp.add_argument("--threshold", type=float, help="Grouping threshold (default: JOBDEDUP_GROUP_THRESHOLD or 0.7)")
    grp.set_defaults(func=cmd_group)

    mrg = subparsers.add_parser("merge", help="Group a batch and merge each group into one listing")
    mrg.add_argument("--input", required=True, help="Path to JSON array of listings")
    mrg.add_argument("--threshold", type=float, help="Grouping threshold")
    mrg.add_argument("--output", help="Write merged {unique, duplicates} JSON here")
    mrg.set_defaults(func=cmd_merge)

    rec = subparsers.add_parser("reconcile", help="Drop listings already present in the SQLite store")
    rec.add_argument("--input", required=True, help="Path to JSON array of listings")
    rec.add_argument("--db", help="SQLite database path (default: JOBDEDUP_DB_PATH or data/jobs.db)")
    rec.add_argument("--threshold", type=float, help="Match threshold against stored jobs")
    rec.add_argument("--workers", type=int, help="Concurrent lookups (default: JOBDEDUP_MAX_WORKERS or 1)")
    rec.add_argument("--persist", action="store_true", help="Upsert genuinely new listings into the store")
    rec.set_defaults(func=cmd_reconcile)

    val = subparsers.add_parser("validate", help="Validate a JSON batch of listings")
    val.add_argument("--input", required=True, help="Path to JSON array of listings")
    val.set_defaults(func=cmd_validate)
    return parser


def main(argv=None):
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    try:
        args.config = DedupConfig.from_env()
    except ConfigurationError as e:
        raise SystemExit(f"Configuration error: {e}")

    get_logger(
        level=args.config.log_level,
        enable_file=True,
        log_dir=Path(args.log_dir) if args.log_dir else None,
    )

    if hasattr(args, "func"):
        try:
            args.func(args)
        except LookupBatchError as e:
            raise SystemExit(f"Reconciliation incomplete: {e}")
        except ValueError as e:
            raise SystemExit(str(e))
        finally:
            get_logger().log_metrics_summary()
        return

    parser.print_help()


if __name__ == "__main__":
    main()
