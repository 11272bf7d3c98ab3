"""
Repair resource file URLs whose category folder no longer matches the disk.

Usage: python reconcile_resource_urls.py
"""

import logging

from dotenv import load_dotenv

load_dotenv()

from app.core.db import SessionLocal  # noqa: E402
from app.core.logging import setup_logging  # noqa: E402
from app.services.resource_reconciler import reconcile_resource_urls  # noqa: E402
from app.services.resource_storage import storage  # noqa: E402

logger = logging.getLogger("reconcile_resource_urls")


def main() -> int:
    setup_logging()
    db = SessionLocal()
    try:
        report = reconcile_resource_urls(db, storage)
    finally:
        db.close()

    for fix in report["fixed"]:
        logger.info("Fixed resource %s: %s -> %s", fix["id"], fix["old_url"], fix["new_url"])
    for miss in report["missing"]:
        logger.warning("Missing file for resource %s: %s", miss["id"], miss["file_url"])
    logger.info(
        "Checked %s, fixed %s, missing %s",
        report["checked"], len(report["fixed"]), len(report["missing"]),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
