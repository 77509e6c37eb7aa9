"""yhist — CLI entrypoint.

Download full daily/weekly/monthly history for one or more symbols through a
single shared Yahoo session::

    python -m yhist.main AAPL MSFT --resolution week --out data/
    python -m yhist.main ^GSPC                      # CSV to stdout
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from yhist import __version__
from yhist.base import Resolution
from yhist.config import get_settings
from yhist.errors import HandshakeError
from yhist.utils import setup_logging
from yhist.yahoo import Fetcher, YahooSession

logger = logging.getLogger("yhist")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="yhist",
        description="Download historical prices from Yahoo Finance as CSV",
    )
    parser.add_argument("symbols", nargs="+", help="Ticker symbols, e.g. AAPL ^GSPC")
    parser.add_argument(
        "--resolution",
        choices=[r.value for r in Resolution],
        default=Resolution.DAY.value,
        help="Bar size (default: day)",
    )
    parser.add_argument("--out", type=Path, default=None, help="Directory for <SYMBOL>.csv files (default: stdout)")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL from settings")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


async def _download(fetcher: Fetcher, out: Path | None) -> bool:
    try:
        stream = await fetcher.get_stream_of_csv()
    except HandshakeError as exc:
        logger.error("[%s] download failed: %s", fetcher.symbol, exc)
        return False

    body = stream.read()
    if out is None:
        sys.stdout.write(body)
        return True

    target = out / f"{fetcher.symbol}.csv"
    try:
        target.write_text(body, encoding="utf-8")
    except OSError as exc:
        logger.error("[%s] could not write %s: %s", fetcher.symbol, target, exc)
        return False
    logger.info("[%s] wrote %d bytes to %s", fetcher.symbol, len(body), target)
    return True


async def _run(args: argparse.Namespace) -> int:
    resolution = Resolution(args.resolution)
    if args.out is not None:
        args.out.mkdir(parents=True, exist_ok=True)

    async with YahooSession() as yahoo:
        # One handshake up front; the concurrent downloads then reuse its tokens.
        try:
            await yahoo.warm_up(args.symbols[0])
        except HandshakeError as exc:
            logger.warning("Handshake failed, downloads may fail: %s", exc)

        fetchers = [yahoo.new_fetcher(symbol, resolution) for symbol in args.symbols]
        results = await asyncio.gather(*(_download(f, args.out) for f in fetchers))

    failed = [f.symbol for f, ok in zip(fetchers, results) if not ok]
    if failed:
        logger.error("Failed symbols: %s", ", ".join(failed))
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(args.log_level or get_settings().log_level)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
