"""Operator checks for the Xero integration deployment.

Commands:

``check``
    Instantiate ``AppSettings`` from the given ``.env`` file so missing or
    malformed Xero credentials are reported before the service starts.
``record`` / ``verify``
    Store, then later compare, a checksum of the ``.env`` file to detect
    unexpected edits.
``token``
    Report whether a Xero token file is stored, which tenant it belongs to and
    whether it has expired (expired tokens require re-running the OAuth flow).

Example usages::

    python -m scripts.check_env record --env-file /srv/xero/.env \
        --hash-file /srv/xero/.env.sha256
    python -m scripts.check_env verify --env-file /srv/xero/.env \
        --hash-file /srv/xero/.env.sha256
    python -m scripts.check_env token --env-file /srv/xero/.env
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from app.clients.blob_storage import LocalBlobStorage
from app.core.config import AppSettings, _load_env_file
from app.services.token_cipher import build_token_cipher
from app.services.xero_tokens import XeroTokenService

EXIT_OK = 0
EXIT_NO_TOKEN = 1
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_TOKEN_EXPIRED = 4
EXIT_RUNTIME_ERROR = 5


def _compute_hash(env_file: Path) -> str:
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _load_settings(env_file: Path) -> AppSettings:
    """Ensure required settings can be loaded from the supplied env file."""
    _load_env_file(str(env_file))
    return AppSettings()  # type: ignore[call-arg]


def _record_checksum(env_file: Path, hash_file: Path) -> int:
    checksum = _compute_hash(env_file)
    hash_file.write_text(f"{checksum}\n", encoding="utf-8")
    print(f"Recorded checksum to {hash_file} ({checksum})")
    return EXIT_OK


def _verify_checksum(env_file: Path, hash_file: Path) -> int:
    if not hash_file.exists():
        print(
            f"Expected checksum file {hash_file} is missing. "
            "Re-run with the 'record' command to establish a baseline.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _compute_hash(env_file)
    if expected == actual:
        print("Environment checksum OK.")
        return EXIT_OK

    print(
        "Environment checksum mismatch!\n"
        f"  expected: {expected}\n"
        f"  actual:   {actual}\n"
        "Review the Xero credentials before restarting the service.",
        file=sys.stderr,
    )
    return EXIT_CHECKSUM_ERROR


def _report_token(settings: AppSettings) -> int:
    """Print the stored token status without contacting Xero."""
    token_service = XeroTokenService(
        blob_storage=LocalBlobStorage(settings.storage.root),
        token_cipher=build_token_cipher(settings.security.token_encryption_secret),
    )
    bundle = token_service.load()
    if bundle is None:
        print("No Xero token stored. Run the authorization flow to connect.")
        return EXIT_NO_TOKEN

    expires_at = datetime.fromtimestamp(bundle.expires, tz=timezone.utc)
    print(f"Tenant:  {bundle.tenant_id}")
    print(f"Expires: {expires_at.isoformat()}")
    if bundle.is_expired():
        print("Token has expired; re-authenticate with Xero.", file=sys.stderr)
        return EXIT_TOKEN_EXPIRED
    print("Token is active.")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate Xero integration settings and stored credentials."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common_arguments(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Path to the environment file (default: .env in the repo root).",
        )

    for name, help_text in (
        ("record", "Validate settings and store the checksum baseline."),
        ("verify", "Validate settings and compare the checksum with the baseline."),
    ):
        checksum_parser = subparsers.add_parser(name, help=help_text)
        add_common_arguments(checksum_parser)
        checksum_parser.add_argument(
            "--hash-file",
            required=True,
            type=Path,
            help="Location of the checksum baseline.",
        )

    add_common_arguments(
        subparsers.add_parser("check", help="Validate settings only.")
    )
    add_common_arguments(
        subparsers.add_parser("token", help="Show the stored Xero token status.")
    )
    return parser


def _ensure_env_file(env_file: Path) -> None:
    if not env_file.exists():
        raise FileNotFoundError(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool."
        )


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    env_file: Path = args.env_file

    try:
        _ensure_env_file(env_file)
        settings = _load_settings(env_file)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Unexpected error during validation: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    command: str = args.command
    handlers: dict[str, Callable[[], int]] = {
        "record": lambda: _record_checksum(env_file, args.hash_file),
        "verify": lambda: _verify_checksum(env_file, args.hash_file),
        "check": lambda: EXIT_OK,
        "token": lambda: _report_token(settings),
    }
    return handlers[command]()


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
