import argparse
import asyncio
import json
import logging
import sys

from tqdm import tqdm

from .errors import FetchError, UnsupportedError, ValidationError
from .pagination import PagedResult, PaginationCursor
from .scraper import LetterboxdScraper

logger = logging.getLogger(__name__)

EXIT_INVALID = 1
EXIT_FETCH = 2


class _PageProgress:
    """tqdm bar advanced once per fetched page."""

    def __init__(self, desc: str):
        self.bar = tqdm(desc=desc, unit="page", leave=False)

    def __call__(self, cursor: PaginationCursor) -> None:
        self.bar.update(1)
        self.bar.set_postfix(records=cursor.seen)

    def close(self) -> None:
        self.bar.close()


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def _format_record(record) -> str:
    year = f" ({record.year})" if record.year else ""
    rating = f"  {record.rating:.1f}★" if record.rating is not None else ""
    position = f"{record.position:>4}. " if record.position is not None else "  - "
    return f"{position}{record.title}{year}{rating}  [{record.slug}]"


def _emit_collection(result: PagedResult, fmt: str) -> None:
    if fmt == "json":
        _print_json([record.to_dict() for record in result.records])
        return
    for record in result.records:
        print(_format_record(record))
    cursor = result.cursor
    print(f"\n{len(result)} records from {cursor.page} page(s) (stop: {cursor.stop_reason.value})")


def _emit_detail(detail, fmt: str) -> None:
    data = detail.to_dict()
    if fmt == "json":
        _print_json(data)
        return
    for key, value in data.items():
        if value in (None, (), []):
            continue
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value)
        print(f"{key:>16}: {value}")


def _emit_comments(comments, fmt: str) -> None:
    if fmt == "json":
        _print_json([comment.to_dict() for comment in comments])
        return
    for comment in comments:
        date = f" ({comment.date})" if comment.date else ""
        print(f"{comment.author}{date}: {comment.content}")


def _run(args, scrape) -> int:
    """Run one scrape coroutine with a progress bar and map errors onto exit codes."""
    progress = _PageProgress(args.command)

    async def runner():
        async with LetterboxdScraper(on_page=progress) as lb:
            return await scrape(lb)

    try:
        result = asyncio.run(runner())
    except ValidationError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return EXIT_INVALID
    except UnsupportedError as exc:
        print(f"Not supported: {exc}", file=sys.stderr)
        return EXIT_INVALID
    except FetchError as exc:
        print(f"Fetch failed: {exc}", file=sys.stderr)
        return EXIT_FETCH
    finally:
        progress.close()

    if isinstance(result, PagedResult):
        _emit_collection(result, args.format)
    elif isinstance(result, tuple):
        info, films = result
        if args.format == "json":
            _print_json({"list": info.to_dict(), "films": [r.to_dict() for r in films.records]})
        else:
            _emit_detail(info, args.format)
            print()
            _emit_collection(films, args.format)
    elif isinstance(result, list):
        _emit_comments(result, args.format)
    else:
        _emit_detail(result, args.format)
    return 0


def cmd_user(args) -> int:
    return _run(args, lambda lb: lb.get_user(args.username))


def cmd_movie(args) -> int:
    return _run(args, lambda lb: lb.get_movie(args.slug))


def cmd_films(args) -> int:
    return _run(args, lambda lb: lb.get_films(args.username, rating=args.rating, not_rated=args.not_rated))


def cmd_watchlist(args) -> int:
    return _run(args, lambda lb: lb.get_watchlist(args.username))


def cmd_likes(args) -> int:
    return _run(args, lambda lb: lb.get_liked_films(args.username))


def cmd_diary(args) -> int:
    return _run(args, lambda lb: lb.get_diary(args.username, args.year, args.month, args.day))


def cmd_list(args) -> int:
    return _run(args, lambda lb: lb.get_list(args.author, args.slug))


def cmd_comments(args) -> int:
    return _run(args, lambda lb: lb.get_list_comments(args.author, args.slug))


def cmd_search(args) -> int:
    return _run(args, lambda lb: lb.search(args.query, args.filter, max_pages=args.pages))


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Letterboxd scraper")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    format_parent = argparse.ArgumentParser(add_help=False)
    format_parent.add_argument("--format", choices=["text", "json"], default="text", help="Output format")

    user_parser = subparsers.add_parser("user", parents=[format_parent], help="Show a member's profile")
    user_parser.add_argument("username", help="Letterboxd username")
    user_parser.set_defaults(func=cmd_user)

    movie_parser = subparsers.add_parser("movie", parents=[format_parent], help="Show film details")
    movie_parser.add_argument("slug", help="Film slug (e.g., 'the-matrix')")
    movie_parser.set_defaults(func=cmd_movie)

    films_parser = subparsers.add_parser("films", parents=[format_parent], help="List a member's watched films")
    films_parser.add_argument("username", help="Letterboxd username")
    rating_group = films_parser.add_mutually_exclusive_group()
    rating_group.add_argument("--rating", type=float, help="Only films rated exactly this (0.5-5.0)")
    rating_group.add_argument("--not-rated", action="store_true", help="Only films without a rating")
    films_parser.set_defaults(func=cmd_films)

    watchlist_parser = subparsers.add_parser("watchlist", parents=[format_parent], help="List a member's watchlist")
    watchlist_parser.add_argument("username", help="Letterboxd username")
    watchlist_parser.set_defaults(func=cmd_watchlist)

    likes_parser = subparsers.add_parser("likes", parents=[format_parent], help="List a member's liked films")
    likes_parser.add_argument("username", help="Letterboxd username")
    likes_parser.set_defaults(func=cmd_likes)

    diary_parser = subparsers.add_parser("diary", parents=[format_parent], help="List a member's diary entries")
    diary_parser.add_argument("username", help="Letterboxd username")
    diary_parser.add_argument("--year", type=int, help="Only entries from this year")
    diary_parser.add_argument("--month", type=int, help="Only entries from this month (needs --year)")
    diary_parser.add_argument("--day", type=int, help="Only entries from this day (needs --month)")
    diary_parser.set_defaults(func=cmd_diary)

    list_parser = subparsers.add_parser("list", parents=[format_parent], help="Show a list and its films")
    list_parser.add_argument("author", help="Username of the list's author")
    list_parser.add_argument("slug", help="List slug")
    list_parser.set_defaults(func=cmd_list)

    comments_parser = subparsers.add_parser("comments", parents=[format_parent], help="Show the comments on a list")
    comments_parser.add_argument("author", help="Username of the list's author")
    comments_parser.add_argument("slug", help="List slug")
    comments_parser.set_defaults(func=cmd_comments)

    search_parser = subparsers.add_parser("search", parents=[format_parent], help="Search for films")
    search_parser.add_argument("query", help="Search text")
    search_parser.add_argument("--filter", default=None, help="Search filter (default: all; only 'films' is parsed)")
    search_parser.add_argument("--pages", type=int, default=1, help="Number of result pages to fetch (default: 1)")
    search_parser.set_defaults(func=cmd_search)

    args = parser.parse_args(argv)

    # Configure logging based on verbosity
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
