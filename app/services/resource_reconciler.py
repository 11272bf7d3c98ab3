import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.models.resource import Resource
from app.services.resource_storage import ResourceStorage

logger = logging.getLogger(__name__)


def reconcile_resource_urls(db: Session, storage: ResourceStorage) -> Dict[str, Any]:
    """
    Point every resource's ``file_url`` and ``category`` at the bucket its file actually sits in.

    Files that cannot be found anywhere are reported and left untouched.
    Running it again after a successful pass changes nothing.
    """
    report = {"checked": 0, "fixed": [], "missing": []}

    for resource in db.query(Resource).order_by(Resource.id).all():
        report["checked"] += 1
        relative = storage.relative_path_from_url(resource.file_url)
        if not relative or "/" not in relative:
            report["missing"].append({"id": resource.id, "file_url": resource.file_url})
            continue

        url_category, filename = relative.split("/", 1)
        found = storage.locate(url_category, filename)
        if not found:
            report["missing"].append({"id": resource.id, "file_url": resource.file_url})
            continue

        actual_category, _ = found
        if actual_category == url_category and actual_category == resource.category:
            continue

        new_url = storage.build_file_url(
            storage.base_from_url(resource.file_url), f"{actual_category}/{filename}"
        )
        report["fixed"].append({
            "id": resource.id,
            "old_category": resource.category,
            "new_category": actual_category,
            "old_url": resource.file_url,
            "new_url": new_url,
        })
        logger.info("Resource %s moved from %s to %s", resource.id, resource.file_url, new_url)
        resource.category = actual_category
        resource.file_url = new_url

    if report["fixed"]:
        db.commit()
    logger.info(
        "Reconciled %s resources: %s fixed, %s missing",
        report["checked"], len(report["fixed"]), len(report["missing"]),
    )
    return report
