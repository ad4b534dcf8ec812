"""
Command-line client for a running bulk upload API.
"""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path

import requests

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT_SECONDS = 30.0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Talk to the bulk upload API.")
    parser.add_argument(
        "--url",
        dest="base_url",
        default=os.getenv("BULK_UPLOAD_URL", DEFAULT_BASE_URL),
        help="API base URL (env BULK_UPLOAD_URL).",
    )
    parser.add_argument(
        "--api-key",
        dest="api_key",
        default=os.getenv("API_KEY", "default-dev-key"),
        help="Value sent in the API key header (env API_KEY).",
    )
    parser.add_argument(
        "--api-key-header",
        dest="api_key_header",
        default=os.getenv("API_KEY_HEADER", "x-api-key"),
    )

    commands = parser.add_subparsers(dest="command", required=True)

    upload = commands.add_parser("upload", help="Upload one CSV file.")
    upload.add_argument("csv_path", type=Path)
    upload.add_argument("--batch-size", dest="batch_size", type=int, default=None)

    commands.add_parser("stats", help="Show store statistics.")

    records = commands.add_parser("records", help="List stored records.")
    records.add_argument("--limit", type=int, default=None)
    records.add_argument("--offset", type=int, default=None)

    commands.add_parser("clear", help="Delete every stored record.")
    commands.add_parser("health", help="Check that the API is up.")
    return parser


def _send(args: argparse.Namespace, session: requests.Session) -> requests.Response:
    base_url = args.base_url.rstrip("/")
    headers = {args.api_key_header: args.api_key}

    if args.command == "upload":
        params = {"batchSize": args.batch_size} if args.batch_size is not None else None
        with args.csv_path.open("rb") as handle:
            return session.post(
                f"{base_url}/bulk-upload/upload",
                params=params,
                headers=headers,
                files={"file": (args.csv_path.name, handle, "text/csv")},
                timeout=DEFAULT_TIMEOUT_SECONDS,
            )
    if args.command == "stats":
        return session.get(f"{base_url}/bulk-upload/stats", timeout=DEFAULT_TIMEOUT_SECONDS)
    if args.command == "health":
        return session.get(f"{base_url}/health", timeout=DEFAULT_TIMEOUT_SECONDS)
    if args.command == "records":
        params = {
            key: value
            for key, value in (("limit", args.limit), ("offset", args.offset))
            if value is not None
        }
        return session.get(
            f"{base_url}/bulk-upload/records",
            params=params,
            headers=headers,
            timeout=DEFAULT_TIMEOUT_SECONDS,
        )
    return session.delete(
        f"{base_url}/bulk-upload/records",
        headers=headers,
        timeout=DEFAULT_TIMEOUT_SECONDS,
    )


def main(argv: list[str] | None = None, session: requests.Session | None = None) -> int:
    args = _build_parser().parse_args(argv)

    owned_session = session is None
    active_session = session or requests.Session()
    try:
        response = _send(args, active_session)
    except requests.RequestException as exc:
        print(f"Request failed: {exc}")
        return 1
    finally:
        if owned_session:
            active_session.close()

    try:
        payload = response.json()
    except ValueError:
        payload = {"status_code": response.status_code, "body": response.text}
    print(json.dumps(payload, indent=2))
    return 0 if response.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
