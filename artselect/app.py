import argparse
import shlex
from functools import partial
from typing import Callable, Optional

from . import __version__
from .config import Settings, load_settings
from .database import save_submission
from .env import load_env
from .logger import get_logger
from .models import DISPLAY_FIELDS
from .notify import Notification, Notifier
from .session import (
    BulkSelectRequested,
    PageChanged,
    SelectionEdited,
    SelectionSession,
    SubmitRequested,
)
from .source import PageSource

SHELL_HELP = """Commands:
  page N          show page N
  next / prev     move one page
  check ID [ID]   set the checked rows of the current page (no ids clears it)
  top N           select the first N records of the whole collection
  selected        list every selected record
  submit          report and log the current selection
  help            show this help
  quit            leave the shell"""


def _print_notification(notification: Notification) -> None:
    print(str(notification))


def _cell(value, width: int) -> str:
    text = "" if value is None else str(value).replace("\n", " ")
    if len(text) > width:
        text = text[: width - 1] + "…"
    return text.ljust(width)


def render_page(session: SelectionSession) -> None:
    view = session.view()
    if not view.rows:
        print("No rows loaded.")
        return
    checked = set(view.checked_ids)
    print(
        f"Page {view.page}/{view.total_pages} "
        f"(rows {view.first_row + 1}-{view.first_row + len(view.rows)} of {view.total_records})"
    )
    header = "    " + _cell("id", 8) + " " + " ".join(_cell(f, 20) for f in DISPLAY_FIELDS)
    print(header)
    for row in view.rows:
        mark = "[x]" if row.id in checked else "[ ]"
        cells = " ".join(_cell(row.get(f), 20) for f in DISPLAY_FIELDS)
        print(f"{mark} {_cell(row.id, 8)} {cells}")
    print(f"Total Selected: {view.total_selected}")


def build_session(settings: Settings, with_db: bool = True) -> SelectionSession:
    source = PageSource(
        endpoint=settings.api_url,
        page_size=settings.page_size,
        fields=settings.fields,
        timeout=settings.timeout,
    )
    sink = partial(save_submission, settings.db_path) if with_db else None
    return SelectionSession(
        source,
        notifier=Notifier(_print_notification),
        submit_sink=sink,
        page_size=settings.page_size,
    )


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = load_settings().with_overrides(
        api_url=args.api_url,
        page_size=args.page_size,
        timeout=args.timeout,
        db_path=args.db,
        log_level=args.log_level,
    )
    get_logger().set_level(settings.log_level)
    return settings


def cmd_page(args: argparse.Namespace) -> None:
    session = build_session(_settings_from_args(args), with_db=False)
    if session.dispatch(PageChanged(args.page)) is None:
        raise SystemExit(2)
    render_page(session)


def cmd_select_top(args: argparse.Namespace) -> None:
    session = build_session(_settings_from_args(args), with_db=False)
    result = session.dispatch(BulkSelectRequested(args.count))
    if result is None:
        raise SystemExit(2)
    session.dispatch(PageChanged(args.page))
    render_page(session)
    print(f"Requested: {result.requested}  Selected: {result.available}  Newly selected: {result.newly_selected}")


def run_shell(session: SelectionSession, read_line: Callable[[str], str] = input) -> None:
    """Interactive loop driving a session. Ends on ``quit`` or end of input."""
    session.dispatch(PageChanged(1))
    render_page(session)
    while True:
        try:
            line = read_line("artselect> ")
        except EOFError:
            print()
            return
        try:
            parts = shlex.split(line)
        except ValueError as e:
            print(f"[error] {e}")
            continue
        if not parts:
            continue
        command, rest = parts[0].lower(), parts[1:]

        if command in ("quit", "exit"):
            return
        if command == "help":
            print(SHELL_HELP)
        elif command == "page":
            if len(rest) != 1 or not rest[0].isdigit() or int(rest[0]) < 1:
                print("Usage: page N (N >= 1)")
                continue
            session.dispatch(PageChanged(int(rest[0])))
            render_page(session)
        elif command == "next":
            if session.total_pages and session.page >= session.total_pages:
                print("Already on the last page.")
                continue
            session.dispatch(PageChanged(session.page + 1))
            render_page(session)
        elif command == "prev":
            if session.page <= 1:
                print("Already on the first page.")
                continue
            session.dispatch(PageChanged(session.page - 1))
            render_page(session)
        elif command == "check":
            try:
                ids = [int(x) for x in rest]
            except ValueError:
                print("Usage: check ID [ID ...] (integer ids)")
                continue
            records = session.records_for_ids(ids)
            missing = sorted(set(ids) - {r.id for r in records})
            if missing:
                print(f"[warn] not on this page: {', '.join(str(i) for i in missing)}")
            session.dispatch(SelectionEdited(records))
            render_page(session)
        elif command == "top":
            if len(rest) != 1:
                print("Usage: top N")
                continue
            session.dispatch(BulkSelectRequested(rest[0]))
            render_page(session)
        elif command == "selected":
            records = session.selected_records()
            if not records:
                print("Nothing selected.")
            for record in records:
                print(f"{record.id}: {record.get('title', '')}")
        elif command == "submit":
            submission_id = session.dispatch(SubmitRequested())
            if submission_id:
                print(f"Submission logged: {submission_id}")
        else:
            print(f"Unknown command: {command}. Type 'help'.")


def cmd_shell(args: argparse.Namespace) -> None:
    settings = _settings_from_args(args)
    session = build_session(settings, with_db=not args.no_db)
    try:
        run_shell(session)
    finally:
        get_logger().log_metrics_summary()


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--api-url", help="Collection endpoint (or set ARTSELECT_API_URL)")
    p.add_argument("--page-size", type=int, help="Rows per page (or set ARTSELECT_PAGE_SIZE)")
    p.add_argument("--timeout", type=float, help="Request timeout in seconds (or set ARTSELECT_TIMEOUT)")
    p.add_argument("--db", help="Submission database path (or set ARTSELECT_DB)")
    p.add_argument("--log-level", help="Log level (or set ARTSELECT_LOG_LEVEL)")


def main(argv: Optional[list] = None):
    # Load .env if present (ARTSELECT_API_URL, ARTSELECT_PAGE_SIZE, etc.)
    load_env()
    parser = argparse.ArgumentParser(prog="artselect", description="Select rows across a paginated collection")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    pg = subparsers.add_parser("page", help="Fetch and show one page")
    pg.add_argument("--page", type=int, default=1, help="1-based page number (default: 1)")
    _add_common(pg)
    pg.set_defaults(func=cmd_page)

    top = subparsers.add_parser("select-top", help="Select the first N records of the collection")
    top.add_argument("--count", required=True, help="Number of records to select")
    top.add_argument("--page", type=int, default=1, help="Page to show afterwards (default: 1)")
    _add_common(top)
    top.set_defaults(func=cmd_select_top)

    sh = subparsers.add_parser("shell", help="Interactive table with persistent selection")
    sh.add_argument("--no-db", action="store_true", help="Do not log submissions to the database")
    _add_common(sh)
    sh.set_defaults(func=cmd_shell)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        try:
            args.func(args)
        except ValueError as e:
            raise SystemExit(str(e))
        return

    parser.print_help()


if __name__ == "__main__":
    main()
