# src/denominator_stage/scripts/publish_due.py
"""Publish scheduled posts whose time has come.

Intended for an external scheduler such as cron when the in-process sweep
worker is disabled (``PUBLISH_SWEEP_ENABLED=false``)::

    */5 * * * * denominator-publish-due
"""

from __future__ import annotations

import argparse
import logging
import sys

from denominator_stage.core.errors import StorageFailure
from denominator_stage.core.settings import settings
from denominator_stage.services.publish_scheduler import run_publish_sweep


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Publish scheduled posts that are due")
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only print errors.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        published = run_publish_sweep()
    except StorageFailure as exc:
        print(f"[publish-due] ERROR: {exc}", file=sys.stderr)
        return 1

    if not args.quiet:
        print(f"[publish-due] published {len(published)} post(s)")
        for post_id in published:
            print(f"[publish-due]   {post_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
