from __future__ import annotations

import argparse
import logging

from wikifetch.settings import settings

logger = logging.getLogger(__name__)


def _configure_logging(level: str | None = None) -> None:
    level = (level or settings.log_level or "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def cmd_version() -> int:
    from wikifetch import __version__

    print(__version__)
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    _configure_logging(args.log_level)
    from wikifetch.errors import RemoteServiceError
    from wikifetch.fetcher import WikibaseDataFetcher
    from wikifetch.output import ReportSink
    from wikifetch.workflow import EntityReportWorkflow

    fetcher = WikibaseDataFetcher.wikidata()
    sink = ReportSink(args.results_dir or settings.results_dir)
    try:
        EntityReportWorkflow(fetcher, sink).run()
    except RemoteServiceError:
        logger.exception("Wikidata request failed; aborting")
        return 1
    finally:
        fetcher.close()
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="wikifetch",
        description="Fetch entities from Wikidata by id, page title and search term, and report them.",
    )
    p.add_argument("--results-dir", default=None, help="Write raw report files into this directory")
    p.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    p.add_argument("--version", action="store_true", help="Print the version and exit")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.version:
        return cmd_version()
    return cmd_run(args)


def app() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    app()
