"""CLI entry point: python -m webfetch --url URL [options]"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from webfetch import settings
from webfetch.errors import WebFetchError
from webfetch.fetcher import WebFetcher
from webfetch.items import FetchResult
from webfetch.paginate import strip_marker

logger = logging.getLogger(__name__)


def _heading_selector(value: str) -> str | int:
    """Digits select by position; anything else matches heading text."""
    return int(value) if value.isdigit() else value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webfetch",
        description=(
            "Fetch a web page's main content as Markdown.\n"
            "Readability → content selectors → basic clean; chunked output."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--url", required=True, metavar="URL",
                        help="Page to fetch (GitHub blob URLs are fetched raw)")
    parser.add_argument("--max-chars", type=int, default=settings.DEFAULT_MAX_CHARS,
                        metavar="N",
                        help=f"Characters per chunk (default: {settings.DEFAULT_MAX_CHARS})")
    parser.add_argument("--heading", action="append", default=None, metavar="H",
                        type=_heading_selector, dest="headings",
                        help="Only return this section (1-based index or text); repeatable")
    parser.add_argument("--timeout-ms", type=int, default=settings.DEFAULT_TIMEOUT_MS,
                        metavar="MS",
                        help=f"Download timeout (default: {settings.DEFAULT_TIMEOUT_MS})")
    parser.add_argument("--user-agent", default=None, metavar="UA",
                        help="Override the User-Agent header")
    parser.add_argument("--all", action="store_true", default=False,
                        help="Follow continuation tokens until the whole page is printed")
    parser.add_argument("--toc", action="store_true", default=False,
                        help="Print only the table of contents")
    parser.add_argument("--json", action="store_true", default=False,
                        help="Print the raw result object(s) as JSON")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help=f"Logging level (default: {settings.LOG_LEVEL})")
    return parser


def _configure_logging(level: str) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    # Log to stderr so --json output on stdout stays parseable
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False, console=Console(stderr=True))],
    )


async def _collect(args: argparse.Namespace) -> list[FetchResult]:
    results: list[FetchResult] = []
    async with WebFetcher(
        max_chars=args.max_chars,
        timeout_ms=args.timeout_ms,
        user_agent=args.user_agent,
    ) as fetcher:
        result = await fetcher.fetch(args.url, headings=args.headings)
        results.append(result)
        while args.all and result.continuation_token:
            result = await fetcher.resume(result.continuation_token)
            results.append(result)
    return results


def _print_results(results: list[FetchResult], args: argparse.Namespace) -> None:
    from rich.console import Console
    from rich.markup import escape
    from rich.panel import Panel

    if args.json:
        payload = [r.model_dump(by_alias=True) for r in results]
        print(json.dumps(payload if len(payload) > 1 else payload[0], indent=2))
        return

    console = Console()
    first = results[0]
    if args.toc:
        console.print(first.toc or "(no headings)", markup=False, highlight=False)
        return

    console.print(
        Panel.fit(
            f"[bold cyan]{escape(first.title)}[/bold cyan]\n"
            f"URL:    [green]{escape(first.url)}[/green]\n"
            f"Method: {escape(first.method)}\n"
            f"Chunks: {len(results)}",
            border_style="cyan",
        ),
        highlight=False,
    )
    if args.all:
        body = "".join(strip_marker(r.markdown) for r in results)
    else:
        body = first.markdown
    console.print(body, markup=False, highlight=False)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        results = asyncio.run(_collect(args))
    except WebFetchError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    logger.debug("fetched %d chunk(s) from %s", len(results), args.url)
    _print_results(results, args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
