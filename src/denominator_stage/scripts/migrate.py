# src/denominator_stage/scripts/migrate.py
"""Apply Alembic migrations up to head."""
from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config

from denominator_stage.core.settings import settings

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def run_upgrade_head() -> None:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", settings.database_url_sync)
    command.upgrade(cfg, "head")


def main() -> None:
    run_upgrade_head()


if __name__ == "__main__":
    main()
