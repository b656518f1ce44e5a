"""
xapi_client.__main__

Entrypoint for `python -m xapi_client`.

Responsibilities:
- Load the client context from the environment (XAPI_* variables).
- Configure structured logging.
- Run one read-only query against the record store and print the JSON result.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence

from xapi_client.client import XAPIClient
from xapi_client.errors import ProtocolError, XAPIError
from xapi_client.models import XAPIResponse
from xapi_client.observability.logging import configure_logging, get_logger
from xapi_client.settings import get_context

log = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xapi-client",
        description="Query an xAPI record store configured through XAPI_* environment variables",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("about", help="Show the server's supported protocol versions")

    p_statements = subparsers.add_parser("statements", help="Fetch statements, following continuation references")
    p_statements.add_argument("--limit", type=int, default=None, help="Page size (default: server default)")
    p_statements.add_argument("--hops", type=int, default=0, help="Additional pages to follow (default: 0)")

    p_activity = subparsers.add_parser("activity", help="Fetch an activity definition")
    p_activity.add_argument("activity_id", help="Activity IRI")

    return parser


async def run(args: argparse.Namespace, client: XAPIClient) -> XAPIResponse | None:
    if args.command == "about":
        return await client.get_about()
    if args.command == "statements":
        query = {"limit": args.limit} if args.limit is not None else None
        return await client.get_more_statements(args.hops, query)
    return await client.get_activities(args.activity_id)


async def _main(argv: Sequence[str] | None) -> int:
    args = build_parser().parse_args(argv)
    context = get_context()
    configure_logging(service_name=context.service_name, level=context.log_level)

    async with XAPIClient(context=context) as client:
        try:
            result = await run(args, client)
        except XAPIError as e:
            status = e.status if isinstance(e, ProtocolError) else None
            log.error("xapi.cli.failed", command=args.command, error=str(e), status=status)
            return 1

    print(json.dumps(result.data if result is not None else None, indent=2))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    return asyncio.run(_main(argv))


if __name__ == "__main__":
    sys.exit(main())


# --- Module Notes -----------------------------------------------------------
# Only read operations are exposed here; writes need structured input that
# belongs in application code.
