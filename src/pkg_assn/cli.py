# src/pkg_assn/cli.py

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Sequence

from .application.normalizer import normalize
from .env import settings_from_env
from .integrations.common.relay_factory import create_verify_use_case
from .logging import configure_logging


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pkg-assn",
        description="Verify, normalize and relay App Store server notifications",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    decode = commands.add_parser(
        "decode",
        help="Verify a signedPayload and print the normalized event "
             "(key source settings are read from env).",
    )
    decode.add_argument(
        "source",
        nargs="?",
        default="-",
        help="File holding the signedPayload, or a JSON body with a "
             "'signedPayload' field ('-' reads stdin).",
    )

    serve = commands.add_parser("serve", help="Run the webhook server.")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)

    return parser.parse_args(args=argv)


def _read_signed_payload(source: str) -> str:
    raw = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    raw = raw.strip()
    if raw.startswith("{"):
        return str(json.loads(raw).get("signedPayload") or "")
    return raw


async def _decode(args: argparse.Namespace) -> dict[str, Any]:
    settings = settings_from_env(require_forward_url=False)
    configure_logging(settings.log_level, stream=sys.stderr)

    signed_payload = _read_signed_payload(args.source)
    if not signed_payload:
        raise ValueError("No signedPayload found in input")

    decoded = await create_verify_use_case(settings).execute(signed_payload)
    event = normalize(decoded.notification, decoded.transaction_info, decoded.renewal_info)
    return {"event": event.to_dict()}


def _serve(args: argparse.Namespace) -> None:
    import uvicorn

    from .integrations.fastapi import create_fastapi_app

    uvicorn.run(create_fastapi_app(), host=args.host, port=args.port)


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)

    if args.command == "serve":
        _serve(args)
        return

    try:
        summary = asyncio.run(_decode(args))
        json.dump({"ok": True, **summary}, sys.stdout, indent=2)
        sys.stdout.write("\n")
    except Exception as exc:  # noqa: BLE001
        json.dump({"ok": False, "error": str(exc)}, sys.stdout, indent=2)
        sys.stdout.write("\n")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
