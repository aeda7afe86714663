"""
Command-line interface for stash.

Usage:
    stash search rust ownership          # free text (fuzzy)
    stash search "#rust +book -#old"     # tags, projects, exclusions
    stash search -- -#old                # a lone "-" token needs "--" first
    stash search API --case-sensitive
    stash search --ask "rust notes that aren't archived"
    stash tags | stash projects          # list with note counts
    stash add "Learned #rust lifetimes for +book" --title Lifetimes
    stash delete 3f2b8c1e                # soft delete; "#deleted" finds it again
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from stash.config import load_config
from stash.engine import load_index, search
from stash.errors import ConfigError, QueryParseError, TranslatorError
from stash.matcher import SearchHit
from stash.store import new_note, save_note, soft_delete_note
from stash.translator import QueryTranslator
from stash.views import project_counts, tag_counts

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2


def format_hit(hit: SearchHit) -> str:
    note = hit.note
    title = note.title if len(note.title) <= 40 else note.title[:37] + "..."
    labels = " ".join([f"#{t}" for t in sorted(note.tags)] + [f"+{p}" for p in sorted(note.projects)])
    return f"{note.short_id}  {hit.score:6.2f}  {note.created:%Y-%m-%d}  {title:<40}  {labels}".rstrip()


def _translate(text: str, args: argparse.Namespace) -> str:
    with QueryTranslator.from_config(args.config_obj) as translator:
        try:
            query = translator.translate(text)
        except TranslatorError as exc:
            logger.warning("Query translation failed (%s); searching for the literal text", exc)
            return text
    print(f"query: {query}", file=sys.stderr)
    return query


def cmd_search(args: argparse.Namespace) -> int:
    raw = " ".join(args.query)
    if args.ask:
        raw = _translate(raw, args)
    outcome = search(
        args.notes_dir,
        raw,
        args.case_sensitive,
        tags=args.tags or (),
        projects=args.projects or (),
        workers=args.workers,
    )
    if not outcome.hits:
        print("no matches")
        return EXIT_OK
    for hit in outcome.hits[: args.limit] if args.limit else outcome.hits:
        print(format_hit(hit))
    return EXIT_OK


def cmd_tags(args: argparse.Namespace) -> int:
    index, _ = load_index(args.notes_dir, workers=args.workers)
    for name, count in tag_counts(index).iter_rows():
        print(f"#{name}  {count}")
    return EXIT_OK


def cmd_projects(args: argparse.Namespace) -> int:
    index, _ = load_index(args.notes_dir, workers=args.workers)
    for name, count in project_counts(index).iter_rows():
        print(f"+{name}  {count}")
    return EXIT_OK


def cmd_add(args: argparse.Namespace) -> int:
    try:
        note = save_note(new_note(args.content, title=args.title), args.notes_dir)
    except OSError as exc:
        print(f"stash: could not save note: {exc}", file=sys.stderr)
        return EXIT_USAGE
    print(f"saved {note.short_id} to {note.source_path}")
    return EXIT_OK


def cmd_delete(args: argparse.Namespace) -> int:
    index, _ = load_index(args.notes_dir, workers=args.workers)
    found = [note for note in index if note.id.startswith(args.id)] if args.id else []
    if len(found) != 1:
        reason = "no note" if not found else f"{len(found)} notes"
        print(f"stash: {reason} matching id {args.id!r}", file=sys.stderr)
        return EXIT_USAGE
    try:
        note = soft_delete_note(found[0])
    except OSError as exc:
        print(f"stash: could not update note: {exc}", file=sys.stderr)
        return EXIT_USAGE
    print(f"deleted {note.short_id} (search with #deleted to find it)")
    return EXIT_OK


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or more, got {value}")
    return number


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stash",
        description="Capture and search markdown notes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("-d", "--dir", type=Path, help="Notes directory (default: from config)")
    parser.add_argument("--config", type=Path, help="Path to config.toml")
    parser.add_argument("-w", "--workers", type=int, help="Parse note files on N threads")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    search_parser = subparsers.add_parser("search", help="Search notes")
    search_parser.add_argument("query", nargs="*", help="Search terms, #tags, +projects, -exclusions")
    search_parser.add_argument("-t", "--tags", action="append", help="Required tags (comma-separated)")
    search_parser.add_argument("-p", "--projects", action="append", help="Required projects (comma-separated)")
    search_parser.add_argument("--case-sensitive", action="store_true", help="Match free text case-sensitively")
    search_parser.add_argument("--ask", action="store_true", help="Treat the query as natural language")
    search_parser.add_argument("-l", "--limit", type=non_negative_int, default=0, help="Show at most N results (0: all)")
    search_parser.set_defaults(func=cmd_search)

    tags_parser = subparsers.add_parser("tags", help="List tags with note counts")
    tags_parser.set_defaults(func=cmd_tags)

    projects_parser = subparsers.add_parser("projects", help="List projects with note counts")
    projects_parser.set_defaults(func=cmd_projects)

    add_parser = subparsers.add_parser("add", help="Capture a new note")
    add_parser.add_argument("content", help="Note body (inline #tags and +projects are picked up)")
    add_parser.add_argument("--title", help="Note title")
    add_parser.set_defaults(func=cmd_add)

    delete_parser = subparsers.add_parser("delete", help="Soft-delete a note (tags it #deleted)")
    delete_parser.add_argument("id", help="Note id or unique id prefix")
    delete_parser.set_defaults(func=cmd_delete)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = create_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        args.config_obj = load_config(args.config)
        args.notes_dir = args.dir or args.config_obj.notes_dir
        return args.func(args)
    except (QueryParseError, ConfigError) as exc:
        print(f"stash: {exc}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
