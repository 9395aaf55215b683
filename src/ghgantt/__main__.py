"""CLI entry point for ghgantt."""

import argparse
from pathlib import Path

from .config import Settings
from .logging import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="ghgantt",
        description="Sync a local Gantt task repository with a GitHub Project",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="Directory containing .gantt/ (default: current directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v for INFO, -vv for DEBUG)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Path to write logs to file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    init = commands.add_parser("init", help="Connect this directory to a GitHub project")
    init.add_argument("--owner", required=True, help="User or organization owning the project")
    init.add_argument("--repo", required=True, help="Repository issues are created in")
    init.add_argument("--project", type=int, required=True, help="Project number")
    init.add_argument("--org", action="store_true", help="The owner is an organization")
    init.add_argument("--start-date-field", default="Start Date", help="Start date field name")
    init.add_argument("--end-date-field", default="End Date", help="End date field name")
    init.add_argument("--status-field", default="Status", help="Status field name")
    init.add_argument("--type-field", default=None, help="Single-select field holding the task type")
    init.add_argument("--force", action="store_true", help="Overwrite an existing configuration")

    pull = commands.add_parser("pull", help="Pull changes from GitHub")
    pull.add_argument("--dry-run", action="store_true", help="Show changes without applying")
    pull.add_argument("--force", action="store_true", help="Accept remote values on conflict")
    pull.add_argument("--comments", action="store_true", help="Also fetch issue comments")

    push = commands.add_parser("push", help="Push local changes to GitHub")
    push.add_argument("--dry-run", action="store_true", help="Show changes without pushing")
    push.add_argument("-y", "--yes", action="store_true", help="Skip confirmation prompt")

    commands.add_parser("status", help="Show local changes since the last sync")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    settings_kwargs: dict = {}
    if args.project_root:
        settings_kwargs["project_root"] = args.project_root
    if args.verbose:
        settings_kwargs["verbose"] = args.verbose
    if args.log_file:
        settings_kwargs["log_file"] = args.log_file

    settings = Settings(**settings_kwargs)
    setup_logging(settings.verbose, settings.log_file, command=args.command)

    if args.command == "init":
        from .cli.init import run_init
        from .models import FieldMapping

        exit_code = run_init(
            settings.project_root,
            owner=args.owner,
            repo=args.repo,
            project_number=args.project,
            org=args.org,
            field_mapping=FieldMapping(
                start_date=args.start_date_field,
                end_date=args.end_date_field,
                status=args.status_field,
                type=args.type_field,
            ),
            force=args.force,
        )
    elif args.command == "pull":
        from .cli.pull import run_pull

        exit_code = run_pull(
            settings.project_root, dry_run=args.dry_run, force=args.force, comments=args.comments
        )
    elif args.command == "push":
        from .cli.push import run_push

        exit_code = run_push(
            settings.project_root, dry_run=args.dry_run, yes=args.yes or settings.assume_yes
        )
    else:
        from .cli.status import run_status

        exit_code = run_status(settings.project_root)

    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
