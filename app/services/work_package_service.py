"""
Work Package — Service Layer (collateral management).

Business logic for:
    - Attaching a collateral reference to an item
    - Detaching a collateral reference from an item
    - Re-deriving the item's stored workflow status after either change

The stored ``status`` column is the internal workflow flag; hydration never
trusts it for progress, which is always recomputed from resolved artifacts.
"""

import logging

from sqlalchemy import func, select

from app.core.exceptions import ValidationError
from app.models import db
from app.models.work_package import (
    ITEM_STATUS_COMPLETED,
    ITEM_STATUS_IN_PROGRESS,
    ITEM_STATUS_TODO,
    Collateral,
    WorkPackageItem,
)
from app.services.artifact_resolver import registered_types
from app.services.helpers.scoped_queries import get_scoped

logger = logging.getLogger(__name__)


def _collateral_count(item_id: int) -> int:
    return db.session.execute(
        select(func.count(Collateral.id)).where(Collateral.work_package_item_id == item_id)
    ).scalar() or 0


def status_after_add(current: str, count: int, quantity: int) -> str:
    """Item status once ``count`` references are attached."""
    if count >= quantity:
        return ITEM_STATUS_COMPLETED
    if count > 0 and current == ITEM_STATUS_TODO:
        return ITEM_STATUS_IN_PROGRESS
    return current


def status_after_remove(current: str, count: int, quantity: int) -> str:
    """Item status once a reference is detached, leaving ``count``.

    Any status drops to in_progress while references remain below quantity.
    """
    if count == 0:
        return ITEM_STATUS_TODO
    if count < quantity:
        return ITEM_STATUS_IN_PROGRESS
    return current


def add_collateral(tenant_id: int, item_id: int, data: dict) -> tuple[Collateral, WorkPackageItem]:
    """Attach a typed artifact reference to an item.

    Body keys: collateral_type (registered reference type), collateral_ref_id (int).

    Raises:
        NotFoundError: item not found within tenant.
        ValidationError: missing fields or unknown collateral_type.
    """
    item = get_scoped(WorkPackageItem, item_id, tenant_id=tenant_id)

    errors: dict[str, str] = {}
    collateral_type = (data.get("collateral_type") or "").strip()
    ref_id = data.get("collateral_ref_id")
    if not collateral_type:
        errors["collateral_type"] = "collateral_type is required."
    elif collateral_type not in registered_types():
        errors["collateral_type"] = f"Must be one of: {', '.join(registered_types())}."
    try:
        ref_id = int(ref_id)
    except (TypeError, ValueError):
        errors["collateral_ref_id"] = "collateral_ref_id must be an integer."
    if errors:
        raise ValidationError("Invalid collateral reference", details=errors)

    ref = Collateral(
        tenant_id=tenant_id,
        work_package_item_id=item.id,
        collateral_type=collateral_type,
        collateral_ref_id=ref_id,
    )
    db.session.add(ref)
    db.session.flush()

    new_status = status_after_add(item.status, _collateral_count(item.id), item.quantity or 0)
    if new_status != item.status:
        logger.info("WorkPackageItem id=%s status %s → %s", item.id, item.status, new_status)
        item.status = new_status

    db.session.commit()
    logger.info(
        "Collateral created id=%s item_id=%s type=%s ref=%s",
        ref.id, item.id, collateral_type, ref_id,
        extra={"tenant_id": tenant_id},
    )
    return ref, item


def remove_collateral(tenant_id: int, item_id: int, collateral_id: int) -> WorkPackageItem:
    """Detach a reference from its item and downgrade the item status.

    Raises:
        NotFoundError: item or collateral not found within scope.
    """
    item = get_scoped(WorkPackageItem, item_id, tenant_id=tenant_id)
    ref = get_scoped(
        Collateral, collateral_id, tenant_id=tenant_id, work_package_item_id=item.id,
    )
    db.session.delete(ref)
    db.session.flush()

    new_status = status_after_remove(item.status, _collateral_count(item.id), item.quantity or 0)
    if new_status != item.status:
        logger.info("WorkPackageItem id=%s status %s → %s", item.id, item.status, new_status)
        item.status = new_status

    db.session.commit()
    logger.info("Collateral deleted id=%s item_id=%s", collateral_id, item.id)
    return item
