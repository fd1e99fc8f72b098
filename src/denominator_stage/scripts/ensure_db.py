# src/denominator_stage/scripts/ensure_db.py
"""Make sure the configured database exists before migrations run.

SQLite needs only its parent directory. Postgres databases are created
through the ``postgres`` maintenance database when missing.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

import psycopg
from psycopg import sql

from denominator_stage.core.settings import settings


def to_psycopg_url(uri: str) -> str:
    """Strip quotes and any SQLAlchemy driver suffix from a Postgres URL."""
    uri = (uri or "").strip().strip("'\"")
    if not uri:
        raise ValueError("DATABASE_URL is empty")
    parts = urlsplit(uri)
    scheme = parts.scheme.split("+", 1)[0]
    if scheme not in ("postgresql", "postgres"):
        raise ValueError(f"Not a Postgres URL: {uri!r}")
    return urlunsplit(("postgresql", parts.netloc, parts.path, parts.query, parts.fragment))


def maintenance_url(uri: str) -> tuple[str, str]:
    """Return ``(admin_url, database_name)`` for a Postgres URL."""
    parts = urlsplit(to_psycopg_url(uri))
    target = parts.path.lstrip("/") or "postgres"
    if not parts.netloc:
        return "postgresql:///postgres", target
    return urlunsplit(("postgresql", parts.netloc, "/postgres", parts.query, "")), target


def ensure_sqlite_directory(uri: str) -> Path | None:
    """Create the directory holding a file-backed SQLite database."""
    path = uri.split(":///", 1)[1] if ":///" in uri else ""
    if not path or path.startswith(":memory:"):
        return None
    parent = Path(path).expanduser().resolve().parent
    parent.mkdir(parents=True, exist_ok=True)
    return parent


def ensure_postgres_database(uri: str) -> bool:
    """Create the Postgres database if missing; return True if it was created."""
    admin_url, target = maintenance_url(uri)
    with psycopg.connect(admin_url, autocommit=True) as conn, conn.cursor() as cur:
        cur.execute("SELECT 1 FROM pg_database WHERE datname = %s", (target,))
        if cur.fetchone() is not None:
            return False
        cur.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(target)))
    return True


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Ensure the configured database exists")
    parser.add_argument(
        "--url",
        default=None,
        help="Override database URL (defaults to the effective settings URL)",
    )
    args = parser.parse_args(argv)

    url = args.url or settings.effective_database_url
    try:
        if url.startswith("sqlite"):
            directory = ensure_sqlite_directory(url)
            print(f"[ensure_db] sqlite directory ready: {directory or 'in-memory'}")
            return
        created = ensure_postgres_database(url)
    except (ValueError, OSError, psycopg.Error) as exc:
        print(f"[ensure_db] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    _, target = maintenance_url(url)
    print(f"[ensure_db] {'created' if created else 'found'} database {target}")


if __name__ == "__main__":
    main()
