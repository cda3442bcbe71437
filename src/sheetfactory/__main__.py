"""CLI entry point for sheetfactory.

Usage:
    python -m sheetfactory build <config.json> [-o OUTPUT_DIR] [--scan-data]
    python -m sheetfactory validate <config.json> [--scan-data]
    python -m sheetfactory serve [--host HOST] [--port PORT]
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from sheetfactory.config import Settings, get_settings
from sheetfactory.exceptions import SchemaValidationError, SpreadsheetError
from sheetfactory.logging import configure_logging
from sheetfactory.service import SpreadsheetService
from sheetfactory.storage import WorkbookStore


def load_request(path: str) -> Any:
    """Read and parse a JSON request file."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _settings_for(args: argparse.Namespace) -> Settings:
    settings = get_settings()
    if args.scan_data:
        settings = settings.model_copy(update={"scan_business_data": True})
    return settings


def cmd_build(args: argparse.Namespace) -> int:
    """Build a workbook from a JSON file and write it to the output directory."""
    try:
        request = load_request(args.config)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: cannot read {args.config}: {e}", file=sys.stderr)
        return 1

    service = SpreadsheetService(_settings_for(args))
    output_dir = Path(args.output) if args.output else Path()

    try:
        result = service.generate(request, persist=False)
        path = WorkbookStore(output_dir).save(result.content, result.filename)
    except SchemaValidationError as e:
        print("Invalid request:", file=sys.stderr)
        for error in e.errors:
            print(f"  - {error}", file=sys.stderr)
        return 1
    except SpreadsheetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Wrote {path} ({result.sheet_count} sheet(s), {result.size} bytes)")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a JSON request file without building it."""
    try:
        request = load_request(args.config)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: cannot read {args.config}: {e}", file=sys.stderr)
        return 1

    result = SpreadsheetService(_settings_for(args)).check(request)
    if result.is_valid:
        print("Request is valid.")
        return 0

    print(f"Request has {len(result.errors)} error(s):", file=sys.stderr)
    for error in result.errors:
        print(f"  - {error}", file=sys.stderr)
    return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "sheetfactory.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sheetfactory",
        description="Compile JSON workbook descriptions into .xlsx files",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_p = subparsers.add_parser("build", help="Build an .xlsx file from a JSON request")
    build_p.add_argument("config", help="Path to the JSON request file")
    build_p.add_argument("-o", "--output", help="Output directory (default: current directory)")
    build_p.add_argument(
        "--scan-data",
        action="store_true",
        help="Also reject path-like values inside header and rows",
    )
    build_p.set_defaults(func=cmd_build)

    validate_p = subparsers.add_parser("validate", help="Validate a JSON request file")
    validate_p.add_argument("config", help="Path to the JSON request file")
    validate_p.add_argument(
        "--scan-data",
        action="store_true",
        help="Also reject path-like values inside header and rows",
    )
    validate_p.set_defaults(func=cmd_validate)

    serve_p = subparsers.add_parser("serve", help="Run the HTTP server")
    serve_p.add_argument("--host", help="Bind address")
    serve_p.add_argument("--port", type=int, help="Port to listen on")
    serve_p.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    # stdout carries command output; logs go to stderr
    configure_logging(
        is_production=settings.is_production, log_level=settings.log_level, stream=sys.stderr
    )

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
