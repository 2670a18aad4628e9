"""
Work Package Hydration — Service Layer.

Turns a stored WorkPackage into the read-ready tree served to owners and
clients:

    hydrate_work_package
      └─ aggregate_item         (per item: resolve collateral, progress triple)
      └─ schedule_phase         (per phase: effort, dates, statuses)
      └─ package progress       (items with completed ≥ total)

Every derived value is recomputed on each call from the source rows plus
``today``; nothing is written back. Calling it twice on unchanged data gives
the same tree.
"""

import logging
from datetime import date

from sqlalchemy import select

from app.core.exceptions import ValidationError
from app.models import db
from app.models.work_package import WorkPackage
from app.services.artifact_resolver import VIEW_INTERNAL, VIEW_MODES, resolve_artifact
from app.services.helpers.scoped_queries import get_scoped
from app.services.work_package_timeline import (
    compute_effective_dates,
    is_item_complete,
    schedule_phase,
)

logger = logging.getLogger(__name__)


def _validate_view_mode(view_mode: str) -> None:
    if view_mode not in VIEW_MODES:
        raise ValidationError(
            f"Invalid view mode {view_mode!r}",
            details={"view": f"Must be one of: {', '.join(sorted(VIEW_MODES))}."},
        )


# ── Item Progress Aggregator ────────────────────────────────────────────────


def aggregate_item(item, view_mode: str = VIEW_INTERNAL, *, tenant_id: int | None = None) -> dict:
    """Resolve an item's collateral and compute its progress.

    ``total`` is the item's target quantity, independent of how many
    references exist. ``percentage`` is not clamped, so over-delivery shows
    above 100.

    Returns:
        {"artifacts": [artifact dict + reference_type/collateral_id],
         "progress": {"completed", "total", "percentage"}}
    """
    tenant_id = tenant_id if tenant_id is not None else item.tenant_id
    artifacts = []
    for ref in item.collateral:
        artifact = resolve_artifact(
            ref.collateral_type, ref.collateral_ref_id, view_mode, tenant_id=tenant_id,
        )
        if artifact is None:
            continue
        artifacts.append({
            **artifact,
            "reference_type": ref.collateral_type,
            "collateral_id": ref.id,
        })

    completed = len(artifacts)
    total = item.quantity or 0
    return {
        "artifacts": artifacts,
        "progress": {
            "completed": completed,
            "total": total,
            "percentage": round(100 * completed / total) if total > 0 else 0,
        },
    }


# ── Work Package Hydrator ───────────────────────────────────────────────────


def hydrate_work_package(
    work_package: WorkPackage,
    view_mode: str = VIEW_INTERNAL,
    today: date | None = None,
) -> dict:
    """Hydrate a work package: items, scheduled phases, package progress.

    Args:
        work_package: Loaded WorkPackage (phases, items, collateral reachable).
        view_mode: "internal" counts every existing artifact; "client" only
                   published ones.
        today: Reference day for timeline status; defaults to date.today().

    Returns:
        Serializable dict. Phases are ordered by position; items with no
        phase are listed under "items".
    """
    _validate_view_mode(view_mode)
    today = today or date.today()
    tenant_id = work_package.tenant_id

    all_items = list(work_package.items)
    item_results = {
        item.id: aggregate_item(item, view_mode, tenant_id=tenant_id)
        for item in all_items
    }

    phases = sorted(work_package.phases, key=lambda p: p.position)
    effective_dates = compute_effective_dates(phases, work_package.effective_start_date)
    hydrated_phases = [
        schedule_phase(
            phase,
            phases,
            work_package.effective_start_date,
            item_results,
            today=today,
            effective_dates=effective_dates,
        )
        for phase in phases
    ]

    orphan_items = [
        {**item.to_dict(), **item_results[item.id]}
        for item in all_items
        if item.phase_id is None
    ]

    completed_items = sum(
        1 for item in all_items if is_item_complete(item_results[item.id]["progress"])
    )
    total_items = len(all_items)

    logger.debug(
        "Hydrated work package id=%s view=%s phases=%d items=%d",
        work_package.id, view_mode, len(phases), total_items,
        extra={"tenant_id": tenant_id, "work_package_id": work_package.id},
    )

    return {
        **work_package.to_dict(),
        "view_mode": view_mode,
        "as_of": today.isoformat(),
        "phases": hydrated_phases,
        "items": orphan_items,
        "progress": {
            "completed_items": completed_items,
            "total_items": total_items,
            "percentage": round(100 * completed_items / total_items) if total_items else 0,
        },
    }


# ── Read operations ─────────────────────────────────────────────────────────


def get_hydrated_work_package(
    tenant_id: int,
    work_package_id: int,
    view_mode: str = VIEW_INTERNAL,
    today: date | None = None,
) -> dict:
    """Load a tenant's work package and hydrate it.

    Raises:
        NotFoundError: The work package does not exist within the tenant.
        ValidationError: Unknown view mode.
    """
    _validate_view_mode(view_mode)
    work_package = get_scoped(WorkPackage, work_package_id, tenant_id=tenant_id)
    return hydrate_work_package(work_package, view_mode, today=today)


def list_hydrated_work_packages(
    tenant_id: int,
    view_mode: str = VIEW_INTERNAL,
    today: date | None = None,
) -> list[dict]:
    """Hydrate every work package of a tenant, newest first."""
    _validate_view_mode(view_mode)
    stmt = (
        select(WorkPackage)
        .where(WorkPackage.tenant_id == tenant_id)
        .order_by(WorkPackage.created_at.desc(), WorkPackage.id.desc())
    )
    packages = db.session.execute(stmt).scalars().all()
    return [hydrate_work_package(wp, view_mode, today=today) for wp in packages]

