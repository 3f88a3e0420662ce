#!/usr/bin/env python3
"""
Command-line interface
======================
Thin wrapper around ``connect()`` for scripting flow exports and deploys.

    python -m connect_flows <instance> list [--filter NAME]
    python -m connect_flows <instance> export <arn> [--status saved] [-o FILE]
    python -m connect_flows <instance> upload <arn> <file> [--publish] [--edit-token T]

Credentials come from flags or the environment (``CONNECT_USERNAME``,
``CONNECT_PASSWORD``, ``CONNECT_INSTANCE_ID``, ``CONNECT_CHROMIUM_PATH``,
``AWS_REGION``); a ``.env`` file in the working directory is loaded first.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .client import FlowClient, connect
from .config import ConnectConfig
from .errors import ConnectFlowsError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

async def _cmd_list(client: FlowClient, args) -> None:
    flows = await client.list_flows(filter=args.filter)
    print(json.dumps(flows, indent=2))


async def _cmd_export(client: FlowClient, args) -> None:
    flow = await client.get_flow(args.arn, status=args.status)
    text = json.dumps(flow, indent=2)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"  Exported: {args.output}")
    else:
        print(text)


async def _cmd_upload(client: FlowClient, args) -> None:
    content = Path(args.file).read_text(encoding="utf-8")
    await client.upload_flow(
        args.arn, content, edit_token=args.edit_token, publish=args.publish
    )
    print(f"  {'Published' if args.publish else 'Saved'}: {args.arn}")


_COMMANDS = {
    "list": _cmd_list,
    "export": _cmd_export,
    "upload": _cmd_upload,
}


async def _run(args) -> None:
    cfg = ConnectConfig.from_cli_args(args)
    cfg.log_summary(args.instance)

    async with await connect(args.instance, cfg) as client:
        await _COMMANDS[args.command](client, args)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="connect_flows",
        description="List, export and upload Amazon Connect contact flows",
    )
    parser.add_argument('instance', help='Instance alias (<alias>.awsapps.com)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    auth_group = parser.add_argument_group('Authentication')
    auth_group.add_argument('--username', help='Form login username (or CONNECT_USERNAME)')
    auth_group.add_argument('--password', help='Form login password (or CONNECT_PASSWORD)')
    auth_group.add_argument('--instance-id', help='Instance id for federation (or CONNECT_INSTANCE_ID)')
    auth_group.add_argument('--region', help='AWS region for federation (or AWS_REGION)')
    auth_group.add_argument('--chromium-path', help='Chromium executable override')
    auth_group.add_argument('--headed', action='store_true', help='Show the login browser')
    auth_group.add_argument(
        '--login-timeout-ms', type=int, default=None,
        help='Deadline for the form login waits (default: none)',
    )

    sub = parser.add_subparsers(dest='command', required=True)

    p_list = sub.add_parser('list', help='List contact flows (first 100)')
    p_list.add_argument('--filter', help='Name filter')

    p_export = sub.add_parser('export', help='Export one contact flow as JSON')
    p_export.add_argument('arn', help='Contact-flow ARN')
    p_export.add_argument('--status', default='published', choices=['published', 'saved'])
    p_export.add_argument('-o', '--output', help='Write to file instead of stdout')

    p_upload = sub.add_parser('upload', help='Save or publish a contact flow')
    p_upload.add_argument('arn', help='Contact-flow ARN')
    p_upload.add_argument('file', help='Flow JSON file')
    p_upload.add_argument('--publish', action='store_true', help='Publish instead of save')
    p_upload.add_argument('--edit-token', help='Reuse an edit token instead of scraping one')

    return parser


def main(argv=None) -> int:
    load_dotenv()

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S',
        stream=sys.stderr,
    )

    try:
        asyncio.run(_run(args))
    except ConnectFlowsError as e:
        logger.error(str(e))
        return 1
    except json.JSONDecodeError as e:
        logger.error(f"Invalid flow JSON: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid argument: {e}")
        return 2
    return 0


if __name__ == '__main__':
    sys.exit(main())
