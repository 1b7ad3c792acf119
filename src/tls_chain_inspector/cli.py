from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .config import Settings, settings
from .errors import InspectorError
from .verify import TRUST_STORES

logger = logging.getLogger(__name__)


def _write_output(out_path: str | None, payload: Any) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if out_path:
        Path(out_path).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="tls-chain-inspector",
        description="Capture the TLS chain a server presents and re-validate it.",
    )
    p.add_argument("--version", action="store_true", help="Print version and exit")
    sub = p.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=settings.HOST, help=f"Listen address (default: {settings.HOST})")
    serve.add_argument("--port", type=int, default=settings.PORT, help=f"Listen port (default: {settings.PORT})")

    check = sub.add_parser("check", help="Inspect one target and print the report")
    check.add_argument("ip", help="Address to connect to (e.g., 93.184.216.34)")
    check.add_argument("url", help="Hostname or URL to present as SNI (e.g., https://example.com)")
    check.add_argument(
        "--tls-port",
        type=int,
        default=settings.TLS_PORT,
        help=f"TLS port on the target (default: {settings.TLS_PORT})",
    )
    check.add_argument(
        "--timeout",
        type=float,
        default=settings.CONNECT_TIMEOUT,
        help=f"Connect timeout seconds (default: {settings.CONNECT_TIMEOUT:g})",
    )
    check.add_argument(
        "--store",
        choices=list(TRUST_STORES),
        default=settings.TRUST_STORE,
        help=f"Trust store to validate against (default: {settings.TRUST_STORE})",
    )
    check.add_argument("--out", "-o", help="Write JSON output to file (default: stdout)")
    return p.parse_args(argv)


def _check(args: argparse.Namespace) -> int:
    from .service import inspect_target

    run_settings = Settings()
    run_settings.TLS_PORT = args.tls_port
    run_settings.CONNECT_TIMEOUT = args.timeout
    run_settings.TRUST_STORE = args.store

    try:
        report = inspect_target(args.ip, args.url, settings=run_settings)
    except InspectorError as e:
        print(f"Error: {e}", file=sys.stderr)
        _write_output(args.out, {"target": {"ip": args.ip, "url": args.url}, "error": str(e)})
        return 3

    payload = report.to_dict()
    payload["tls"] = report.tls
    payload["valid"] = report.verdict.valid
    _write_output(args.out, payload)
    return 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "tls_chain_inspector.api:app",
        host=args.host,
        port=args.port,
        log_level=settings.LOG_LEVEL.lower()
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)

    if args.version:
        print(__version__)
        return 0

    from .api import configure_logging
    configure_logging()

    if args.command == "check":
        return _check(args)
    if args.command == "serve":
        logger.info(f"Starting server on {args.host}:{args.port}")
        return _serve(args)

    print("Error: a command is required (serve or check)", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
