# puffer_sdk/cli.py
# SPDX-License-Identifier: Apache-2.0
"""
Puffer SDK CLI

Small command line front end for ad-hoc inspection of namespaces.
Every command prints JSON on stdout.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from typing import Any, Awaitable, Callable, Dict, List, Optional

from puffer_sdk.client import PufferClient
from puffer_sdk.config import REGIONS, ClientConfig
from puffer_sdk.errors import PufferError

Command = Callable[[PufferClient, argparse.Namespace], Awaitable[Any]]


# --------------------------------------------------------------------------- #
# Internal helpers
# --------------------------------------------------------------------------- #

def _to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {k: v for k, v in dataclasses.asdict(value).items() if v is not None}
    if isinstance(value, list):
        return [_to_jsonable(v) for v in value]
    return value


def _print_json(value: Any) -> None:
    print(json.dumps(_to_jsonable(value), indent=2, ensure_ascii=False, default=str))


def _parse_filter(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"--filter is not valid JSON: {exc}") from None
    if not isinstance(value, dict):
        raise argparse.ArgumentTypeError("--filter must be a JSON object")
    return value


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #

async def _cmd_namespaces(client: PufferClient, args: argparse.Namespace) -> Any:
    return await client.list_namespaces(prefix=args.prefix)


async def _cmd_stats(client: PufferClient, args: argparse.Namespace) -> Any:
    return await client.namespace(args.namespace).stats()


async def _cmd_query(client: PufferClient, args: argparse.Namespace) -> Any:
    return await client.namespace(args.namespace).query(
        vector=args.vector,
        top_k=args.top_k,
        include_vectors=args.include_vectors,
        filters=args.filter,
    )


async def _cmd_text(client: PufferClient, args: argparse.Namespace) -> Any:
    return await client.namespace(args.namespace).text_search(
        attribute=args.attribute,
        query=args.query,
        top_k=args.top_k,
        filters=args.filter,
    )


async def _cmd_delete_namespace(client: PufferClient, args: argparse.Namespace) -> Any:
    return await client.namespace(args.namespace).delete()


COMMANDS: Dict[str, Command] = {
    "namespaces": _cmd_namespaces,
    "stats": _cmd_stats,
    "query": _cmd_query,
    "text": _cmd_text,
    "delete-namespace": _cmd_delete_namespace,
}


async def _run(command: Command, config: ClientConfig, args: argparse.Namespace) -> Any:
    async with PufferClient(config) as client:
        return await command(client, args)


# --------------------------------------------------------------------------- #
# Entry point
# --------------------------------------------------------------------------- #

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="puffer",
        description="Puffer SDK CLI - inspect and query namespaces",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  puffer namespaces
  puffer stats docs
  puffer query docs --vector 0.1 0.2 0.3 --top-k 5
  puffer query docs --vector 0.1 0.2 --filter '{"lang": "en"}'
  puffer text docs --attribute body --query "hello world"

Configuration (environment variables):
  TURBOPUFFER_API_KEY    API key (required unless --api-key is given)
  TURBOPUFFER_REGION     Region name (default: gcp-us-central1)
  TURBOPUFFER_BASE_URL   Full base URL, overrides the region
        """.strip(),
    )

    # Global flags
    parser.add_argument("--api-key", help="API key (default: $TURBOPUFFER_API_KEY)")
    parser.add_argument("--region", choices=sorted(REGIONS), help="Service region")
    parser.add_argument("--base-url", help="Service base URL (overrides --region)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log requests to stderr"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        help="command to execute",
        metavar="COMMAND",
    )

    ns_parser = subparsers.add_parser("namespaces", help="List namespaces")
    ns_parser.add_argument("--prefix", help="Only names starting with this prefix")

    stats_parser = subparsers.add_parser("stats", help="Show namespace statistics")
    stats_parser.add_argument("namespace")

    query_parser = subparsers.add_parser("query", help="Vector similarity search")
    query_parser.add_argument("namespace")
    query_parser.add_argument("--vector", type=float, nargs="+", required=True)
    query_parser.add_argument("--top-k", type=int, default=10)
    query_parser.add_argument("--filter", type=_parse_filter, help="Filter as a JSON object")
    query_parser.add_argument("--include-vectors", action="store_true")

    text_parser = subparsers.add_parser("text", help="Full-text (BM25) search")
    text_parser.add_argument("namespace")
    text_parser.add_argument("--attribute", required=True)
    text_parser.add_argument("--query", required=True)
    text_parser.add_argument("--top-k", type=int, default=10)
    text_parser.add_argument("--filter", type=_parse_filter, help="Filter as a JSON object")

    delete_parser = subparsers.add_parser("delete-namespace", help="Delete a namespace")
    delete_parser.add_argument("namespace")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return e.code

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    try:
        config = ClientConfig.from_env(
            api_key=args.api_key,
            region=args.region,
            base_url=args.base_url,
            timeout_s=args.timeout,
        )
        result = asyncio.run(_run(COMMANDS[args.command], config, args))
    except PufferError as e:
        print(f"error: [{e.code}] {e}", file=sys.stderr)
        return 1

    _print_json(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
