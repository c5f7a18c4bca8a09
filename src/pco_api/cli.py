"""
Command line access to the Planning Center API.

Examples:
    pco-fetch people people --where email = x@y.com --include emails
    pco-fetch services plans --order=-sort_date --max-rows 25
    pco-fetch people people --id 2345 --association emails --url-only
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .client import PlanningCenterClient
from .config import PlanningCenterConfigError
from .modules import Module, UnknownModuleError
from .request_spec import MissingTableError, UnsupportedOperatorError

logger = logging.getLogger("pco_api.cli")

EXIT_OK = 0
EXIT_API_ERROR = 1
EXIT_USAGE = 2


def setup_logging(log_level: str) -> logging.Logger:
    package_logger = logging.getLogger("pco_api")
    package_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    package_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    handler.setLevel(package_logger.level)
    package_logger.addHandler(handler)
    return package_logger


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="pco-fetch",
        description="Fetch records from the Planning Center API (credentials from PCO_APPLICATION_ID / PCO_SECRET).",
    )
    p.add_argument("module", choices=[m.value for m in Module], help="API module")
    p.add_argument("table", help="Top-level resource collection, e.g. people or plans")
    p.add_argument("--id", dest="resource_id")
    p.add_argument("--association")
    p.add_argument("--id2")
    p.add_argument("--association2")
    p.add_argument("--include", action="append", default=[], help="Related records to side-load (repeatable)")
    p.add_argument("--where", nargs=3, metavar=("FIELD", "OP", "VALUE"))
    p.add_argument("--order")
    p.add_argument("--per-page", type=int)
    p.add_argument("--offset", type=int)
    p.add_argument("--max-rows", type=int, default=None)
    p.add_argument("--first", action="store_true", help="Return only the first record")
    p.add_argument("--url-only", action="store_true", help="Print the request URL and exit")
    p.add_argument("--log-level", default="WARNING", help="DEBUG, INFO, WARNING (default), ERROR")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.max_rows is not None and args.max_rows < 1:
        parser.error("--max-rows must be at least 1")
    setup_logging(args.log_level)

    try:
        client = PlanningCenterClient()
    except PlanningCenterConfigError as e:
        logger.error(str(e))
        return EXIT_USAGE

    try:
        return _run(client, args)
    finally:
        client.close()


def _run(client: PlanningCenterClient, args: argparse.Namespace) -> int:
    try:
        query = client.module(args.module).table(args.table)
        if args.resource_id:
            query = query.id(args.resource_id)
        if args.association:
            query = query.association(args.association)
        if args.id2:
            query = query.id2(args.id2)
        if args.association2:
            query = query.association2(args.association2)
        if args.include:
            query = query.includes(args.include)
        if args.where:
            query = query.where(*args.where)
        if args.order:
            query = query.order(args.order)
        if args.per_page is not None:
            query = query.per_page(args.per_page)
        if args.offset is not None:
            query = query.offset(args.offset)

        if args.url_only:
            print(query.build_url())
            return EXIT_OK

        if args.first:
            result = query.first()
            output = result.value
        else:
            result = query.get(max_rows=args.max_rows)
            output = result.value.model_dump(exclude={"pages"}) if result.ok else None
    except (UnknownModuleError, UnsupportedOperatorError, MissingTableError, ValueError) as e:
        logger.error(str(e))
        return EXIT_USAGE

    if not result.ok:
        logger.error(f"Request failed: {result.error}")
        print(json.dumps(result.error_body, indent=2, ensure_ascii=False), file=sys.stderr)
        return EXIT_API_ERROR

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
