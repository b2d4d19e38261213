"""CLI entry point for flowboard."""

import argparse
from pathlib import Path

from . import __version__
from .cli import commands
from .cli.output import error
from .config import Settings
from .logging import setup_logging
from .models import PRIORITY_VALUES, STATUS_VALUES
from .repositories import DocumentStoreError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="flowboard",
        description="Kanban boards with automation rules over a local document store",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding the document store (default: .flowboard)",
    )
    parser.add_argument(
        "--business",
        default=None,
        help="Business id to operate on (default: FLOWBOARD_BUSINESS_ID)",
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
        version=f"%(prog)s {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    create_board = sub.add_parser("create-board", help="Create a board")
    create_board.add_argument("name")
    create_board.add_argument(
        "--column",
        action="append",
        dest="columns",
        help="Column title (repeatable; default: To Do, In Progress, Done)",
    )

    sub.add_parser("boards", help="List boards")

    show = sub.add_parser("show", help="Show a board's columns and tasks")
    show.add_argument("board_id")
    show.add_argument(
        "--filter",
        dest="expression",
        default=None,
        help="Filter expression, e.g. 'priority:high due:week login'",
    )

    add_task = sub.add_parser("add-task", help="Add a task to a column")
    add_task.add_argument("board_id")
    add_task.add_argument("column_id")
    add_task.add_argument("title")
    add_task.add_argument("--priority", choices=sorted(PRIORITY_VALUES), default="medium")
    add_task.add_argument("--due", default=None, help="Due date (ISO 8601)")

    move = sub.add_parser("move", help="Move a task to another column")
    move.add_argument("board_id")
    move.add_argument("task_id")
    move.add_argument("column_id")

    status = sub.add_parser("status", help="Change a task's status")
    status.add_argument("board_id")
    status.add_argument("task_id")
    status.add_argument("status", choices=sorted(STATUS_VALUES))

    analytics = sub.add_parser("analytics", help="Show board metrics")
    analytics.add_argument("board_id")

    due_soon = sub.add_parser("due-soon", help="Run due-date automations")
    due_soon.add_argument("board_id")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    # Build settings from CLI args
    settings_kwargs: dict = {}
    if args.data_dir:
        settings_kwargs["data_dir"] = args.data_dir
    if args.business:
        settings_kwargs["business_id"] = args.business
    if args.verbose:
        settings_kwargs["verbose"] = args.verbose
    if args.log_file:
        settings_kwargs["log_file"] = args.log_file

    settings = Settings(**settings_kwargs)
    setup_logging(settings.verbose, settings.log_file)

    try:
        ctx = commands.CliContext.from_settings(settings)
    except DocumentStoreError as e:
        error(str(e))
        raise SystemExit(1) from e

    if args.command == "create-board":
        exit_code = commands.run_create_board(ctx, args.name, args.columns)
    elif args.command == "boards":
        exit_code = commands.run_list_boards(ctx)
    elif args.command == "show":
        exit_code = commands.run_show_board(ctx, args.board_id, args.expression)
    elif args.command == "add-task":
        exit_code = commands.run_add_task(
            ctx, args.board_id, args.column_id, args.title, args.priority, args.due
        )
    elif args.command == "move":
        exit_code = commands.run_move_task(ctx, args.board_id, args.task_id, args.column_id)
    elif args.command == "status":
        exit_code = commands.run_set_status(ctx, args.board_id, args.task_id, args.status)
    elif args.command == "analytics":
        exit_code = commands.run_analytics(ctx, args.board_id)
    else:
        exit_code = commands.run_due_soon(ctx, args.board_id)

    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
