#!/usr/bin/env python3
"""
EmpRecords -- employee records service with JWT sessions.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080 --reload
  python main.py create-user alice
  python main.py create-user alice --password-stdin < pw.txt

Environment variables (see core/config.py for the full list):
  ACCESS_TOKEN_SECRET   Signing key for access tokens (>= 32 chars).
  REFRESH_TOKEN_SECRET  Signing key for refresh tokens (>= 32 chars, different).
  DATABASE_URL          SQLAlchemy URL of the employee database.
  DEBUG                 Set to true to auto-generate secrets for local runs.
"""

import argparse
import getpass
import sys
from typing import Optional

from auth.errors import AuthError
from auth.registry import InMemoryRefreshTokenRegistry
from auth.session import SessionService
from auth.tokens import TokenIssuer
from core.config import get_settings
from employees.store import EmployeeStore


def _read_password(from_stdin: bool) -> Optional[str]:
    """Read the new account's password without echoing it.

    --password-stdin reads one line from stdin so the command can be
    scripted; otherwise the user is prompted twice and both entries must match.
    """
    if from_stdin:
        return sys.stdin.readline().rstrip("\n")
    first = getpass.getpass("Password: ")
    second = getpass.getpass("Repeat password: ")
    if first != second:
        print("  [!] Passwords do not match.")
        return None
    return first


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def cmd_create_user(args: argparse.Namespace) -> int:
    password = _read_password(args.password_stdin)
    if password is None:
        return 1

    settings = get_settings()
    store = EmployeeStore(args.database_url or settings.database_url)
    sessions = SessionService(
        credentials=store,
        issuer=TokenIssuer.from_settings(settings),
        registry=InMemoryRefreshTokenRegistry(),
    )
    try:
        credential = sessions.register(args.username, password)
    except AuthError as exc:
        print(f"  [!] {exc.message}")
        return 1
    finally:
        store.close()

    print(f"  [+] Created user '{credential.username}' with id {credential.id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="emprecords",
        description="Employee records service with JWT sessions.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API under uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development)")
    serve.set_defaults(func=cmd_serve)

    create = sub.add_parser("create-user", help="Register an account from the terminal")
    create.add_argument("username")
    create.add_argument("--password-stdin", action="store_true", help="Read the password from stdin")
    create.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    create.set_defaults(func=cmd_create_user)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
