"""Command-line interface for the shift planner."""

from __future__ import annotations

import argparse
import os
import sys

import uvicorn

from shiftplanner.config import load_config
from shiftplanner.domain.db import DEFAULT_DB_URL, get_session, init_database
from shiftplanner.domain.repositories import PlanningRunRepository, stored_planning
from shiftplanner.engine.orchestrator import build_week_planning
from shiftplanner.engine.ordering import ORDERINGS
from shiftplanner.errors import PlanningError, PlanningValidationError
from shiftplanner.io.export_csv import export_planning_csv
from shiftplanner.io.payload import read_json, write_json
from shiftplanner.services.timeplan import iso_week_dates
from shiftplanner.services.validation import check_payload, parse_planning_request
from shiftplanner.validator import planning_from_dict, summarize_planning

EXIT_INVALID_INPUT = 2


def _print_issues(exc: PlanningValidationError) -> None:
    print(f"[ERROR] {exc.message}")
    for issue in exc.issues:
        print(f"  - {issue.field}: {issue.message} [{issue.code}]")


def _cmd_init_db(args: argparse.Namespace) -> int:
    """Initialize the database."""
    db_url = args.db or DEFAULT_DB_URL
    init_database(db_url)
    print(f"[OK] Database initialized: {db_url}")
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    """Generate a planning from a request payload."""
    cfg = load_config(args.config)
    try:
        request = parse_planning_request(read_json(args.request), cfg)
    except PlanningValidationError as e:
        _print_issues(e)
        return EXIT_INVALID_INPUT

    try:
        result = build_week_planning(request, cfg, ordering=args.ordering)
    except PlanningError as e:
        print(f"[ERROR] Generation failed: {e}")
        return 1

    response = result.to_response()
    if args.out:
        write_json(args.out, response)
    else:
        print(summarize_planning(result.planning))

    if args.csv:
        export_planning_csv(result.planning, args.csv, iso_week_dates(request.year, request.week_number))

    if args.db:
        session = get_session(args.db)
        try:
            if args.replace:
                deleted = PlanningRunRepository.delete_by_week(session, request.week_id)
                if deleted > 0:
                    print(f"[INFO] Deleted {deleted} existing run(s) for {request.week_id}")
            PlanningRunRepository.save_result(session, result)
        except Exception as e:
            session.rollback()
            print(f"[ERROR] Persisting planning failed: {e}")
            raise
        finally:
            session.close()

    stats = result.stats
    print(
        f"[OK] Planned {stats.total_hours_planned}h for {len(result.planning)} employee(s) "
        f"in {request.week_id} ({len(result.warnings)} warning(s))"
    )
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    """Validate a request payload without generating."""
    cfg = load_config(args.config)
    request, issues = check_payload(read_json(args.request), cfg)
    if issues:
        _print_issues(PlanningValidationError(issues))
        return EXIT_INVALID_INPUT
    print(f"[OK] Request is valid: {request.week_id}, {len(request.employees)} employee(s)")
    return 0


def _cmd_summarize(args: argparse.Namespace) -> int:
    """Print a text summary of a generated planning (JSON file or stored run)."""
    if args.planning:
        data = read_json(args.planning)
        planning = planning_from_dict(data.get("planning", data) if isinstance(data, dict) else data)
    elif args.week:
        session = get_session(args.db or DEFAULT_DB_URL)
        try:
            run = PlanningRunRepository.get_latest_for_week(session, args.week)
            if run is None:
                print(f"[ERROR] No stored planning for {args.week}")
                return 1
            planning = stored_planning(run)
        finally:
            session.close()
    else:
        print("[ERROR] Pass --planning or --week")
        return EXIT_INVALID_INPUT

    print(summarize_planning(planning))
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP service."""
    if args.config:
        os.environ["SHIFTPLANNER_CONFIG"] = args.config
    print(f"[INFO] Serving on http://{args.host}:{args.port}")
    uvicorn.run("shiftplanner.api.app:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="shiftplanner",
        description="Weekly shift planning generator",
    )

    # Global options
    parser.add_argument("--db", help=f"Database URL (default for init-db/summarize: {DEFAULT_DB_URL})")

    sub = parser.add_subparsers(dest="command", required=True)

    # init-db command
    init = sub.add_parser("init-db", help="Initialize database")
    init.set_defaults(func=_cmd_init_db)

    # generate command
    gen = sub.add_parser("generate", help="Generate a weekly planning from a request JSON")
    gen.add_argument("--request", required=True, help="Path to request JSON")
    gen.add_argument("--config", help="Path to config JSON/YAML")
    gen.add_argument("--out", help="Optional: write the response JSON here")
    gen.add_argument("--csv", help="Optional: export slots to CSV")
    gen.add_argument("--ordering", choices=sorted(ORDERINGS), help="Employee ordering strategy")
    gen.add_argument("--replace", action="store_true", help="With --db: delete stored runs for the week first")
    gen.set_defaults(func=_cmd_generate)

    # validate command
    val = sub.add_parser("validate", help="Validate a request JSON")
    val.add_argument("--request", required=True, help="Path to request JSON")
    val.add_argument("--config", help="Path to config JSON/YAML")
    val.set_defaults(func=_cmd_validate)

    # summarize command
    summ = sub.add_parser("summarize", help="Summarize a generated planning")
    summ.add_argument("--planning", help="Path to a response or planning JSON")
    summ.add_argument("--week", help="ISO week of a stored run (e.g., 2025-W36)")
    summ.set_defaults(func=_cmd_summarize)

    # serve command
    srv = sub.add_parser("serve", help="Run the HTTP service")
    srv.add_argument("--host", default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.add_argument("--config", help="Path to config JSON/YAML")
    srv.add_argument("--reload", action="store_true")
    srv.set_defaults(func=_cmd_serve)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
