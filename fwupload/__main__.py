"""
Command line entry point.

Usage:
    python -m fwupload login --token <token>
    python -m fwupload logout
    python -m fwupload upload firmware.bin --version 1.2.0 --model modelX \
        --checksum sha256:... --signed-by ci-signing-key
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from fwupload.config import get_settings
from fwupload.logging_context import configure_logging
from fwupload.schemas import ReleaseInfo, WorkflowSnapshot, WorkflowState
from fwupload.services import build_orchestrator
from fwupload.services.credentials import open_credential_store
from fwupload.sources.local import LocalFileSelector


log = logging.getLogger("fwupload.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fwupload", description="Upload firmware images via presigned URLs")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Store a session token")
    login.add_argument("--token", required=True)

    sub.add_parser("logout", help="Forget the stored session token")

    upload = sub.add_parser("upload", help="Upload a firmware image and register it")
    upload.add_argument("path", nargs="?", help="File to upload; prompts when omitted")
    upload.add_argument("--version", dest="fw_version", required=True)
    upload.add_argument("--model", required=True)
    upload.add_argument("--checksum", required=True)
    upload.add_argument("--signed-by", required=True)
    return parser


def _print_progress(snap: WorkflowSnapshot) -> None:
    if snap.state is WorkflowState.TRANSFERRING:
        print(f"\rProgress: {snap.progress * 100:.1f}%", end="", flush=True)
    elif snap.state is WorkflowState.REGISTERING_METADATA:
        print()


def _ask_path() -> str | None:
    try:
        return input("Firmware file (empty to cancel): ")
    except EOFError:
        return None


async def _upload(args: argparse.Namespace) -> int:
    settings = get_settings()
    store = open_credential_store(settings)
    selector = LocalFileSelector(args.path, ask=_ask_path)
    orchestrator = build_orchestrator(settings, selector, store)
    orchestrator.subscribe(_print_progress)

    release = ReleaseInfo(
        version=args.fw_version,
        model=args.model,
        checksum=args.checksum,
        signed_by=args.signed_by,
    )
    snap = await orchestrator.start(release)
    orchestrator.acknowledge()

    if snap.state is WorkflowState.SUCCEEDED:
        print("Upload complete")
        return 0
    if snap.state is WorkflowState.FAILED:
        print(f"Error: {snap.reason}", file=sys.stderr)
        return 1
    print("Cancelled")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    if args.command == "login":
        open_credential_store(settings).save(args.token)
        print("Logged in")
        return 0
    if args.command == "logout":
        open_credential_store(settings).clear()
        print("Logged out")
        return 0
    return asyncio.run(_upload(args))


if __name__ == "__main__":
    sys.exit(main())
