"""
Work Package Blueprint — hydration read endpoints + collateral links.

Endpoints:
    GET    /api/v1/work-packages                         — hydrate all packages of the tenant
    GET    /api/v1/work-packages/<wp_id>/hydrate         — hydrated tree (?view=internal|client)
    GET    /api/v1/work-packages/<wp_id>/client          — hydrated tree, client view
    GET    /api/v1/work-packages/artifact-types          — registered collateral types
    POST   /api/v1/work-packages/items/<item_id>/collateral                  — attach artifact
    DELETE /api/v1/work-packages/items/<item_id>/collateral/<collateral_id>  — detach artifact

Query params (read endpoints):
    view  (str, optional): internal (default) | client
    as_of (date, optional): reference day for timeline status, YYYY-MM-DD

Layer contract:
    - No ORM calls here beyond the tenant lookup — work is delegated to services.
    - No db.session.commit() here.
    - Tenant comes from the X-Tenant-ID header or the tenant_id query param.
"""

import logging

from flask import Blueprint, g, jsonify, request

from app.core.exceptions import NotFoundError, ValidationError
from app.models import db
from app.models.auth import Tenant
from app.services import work_package_hydration, work_package_service
from app.services.artifact_resolver import VIEW_CLIENT, VIEW_INTERNAL, VIEW_MODES, registered_types
from app.utils.errors import E, api_error
from app.utils.helpers import parse_date

logger = logging.getLogger(__name__)

work_package_bp = Blueprint("work_packages", __name__, url_prefix="/api/v1/work-packages")


# ── Error handlers ────────────────────────────────────────────────────────────


@work_package_bp.errorhandler(NotFoundError)
def _handle_not_found(exc: NotFoundError):
    logger.info("Not found: %s", exc, extra={"tenant_id": getattr(g, "tenant_id", None)})
    return api_error(E.NOT_FOUND, f"{exc.resource} not found")


@work_package_bp.errorhandler(ValidationError)
def _handle_validation(exc: ValidationError):
    return api_error(E.VALIDATION_INVALID, str(exc), details=exc.details)


# ── Private helpers ───────────────────────────────────────────────────────────


def _resolve_tenant():
    """Return (tenant_id, err_response) for the current request."""
    raw = request.headers.get("X-Tenant-ID") or request.args.get("tenant_id")
    if not raw:
        return None, api_error(E.TENANT_REQUIRED, "X-Tenant-ID header is required")
    try:
        tenant_id = int(raw)
    except (TypeError, ValueError):
        return None, api_error(E.TENANT_REQUIRED, "X-Tenant-ID must be an integer")
    tenant = db.session.get(Tenant, tenant_id)
    if tenant is None or not tenant.is_active:
        return None, api_error(E.TENANT_REQUIRED, "Unknown or inactive tenant")
    g.tenant_id = tenant_id
    return tenant_id, None


def _read_params(default_view=VIEW_INTERNAL):
    """Parse ?view and ?as_of. Returns (view, as_of, err_response)."""
    view = request.args.get("view", default_view)
    if view not in VIEW_MODES:
        return None, None, api_error(
            E.VALIDATION_INVALID,
            f"Invalid view '{view}'.",
            details={"valid_values": sorted(VIEW_MODES)},
        )
    raw_as_of = request.args.get("as_of")
    as_of = parse_date(raw_as_of)
    if raw_as_of and as_of is None:
        return None, None, api_error(E.VALIDATION_INVALID, "as_of must be a date (YYYY-MM-DD)")
    return view, as_of, None


# ── Routes ────────────────────────────────────────────────────────────────────


@work_package_bp.route("", methods=["GET"])
def list_work_packages():
    """Hydrate every work package of the tenant, newest first."""
    tenant_id, err = _resolve_tenant()
    if err:
        return err
    view, as_of, err = _read_params()
    if err:
        return err
    items = work_package_hydration.list_hydrated_work_packages(tenant_id, view, today=as_of)
    return jsonify({"items": items, "total": len(items)}), 200


@work_package_bp.route("/artifact-types", methods=["GET"])
def list_artifact_types():
    return jsonify({"items": registered_types()}), 200


@work_package_bp.route("/<int:work_package_id>/hydrate", methods=["GET"])
def hydrate_work_package(work_package_id: int):
    """Return the fully hydrated work package (owner view by default)."""
    tenant_id, err = _resolve_tenant()
    if err:
        return err
    view, as_of, err = _read_params()
    if err:
        return err
    result = work_package_hydration.get_hydrated_work_package(
        tenant_id, work_package_id, view, today=as_of,
    )
    return jsonify(result), 200


@work_package_bp.route("/<int:work_package_id>/client", methods=["GET"])
def hydrate_work_package_client(work_package_id: int):
    """Client-portal view: only published artifacts count towards progress."""
    tenant_id, err = _resolve_tenant()
    if err:
        return err
    _view, as_of, err = _read_params(default_view=VIEW_CLIENT)
    if err:
        return err
    result = work_package_hydration.get_hydrated_work_package(
        tenant_id, work_package_id, VIEW_CLIENT, today=as_of,
    )
    return jsonify(result), 200


@work_package_bp.route("/items/<int:item_id>/collateral", methods=["POST"])
def add_collateral(item_id: int):
    """Attach an artifact to an item.

    Body (JSON):
        collateral_type (str, required): registered reference type.
        collateral_ref_id (int, required): artifact PK.
    """
    tenant_id, err = _resolve_tenant()
    if err:
        return err
    data = request.get_json(silent=True) or {}
    ref, item = work_package_service.add_collateral(tenant_id, item_id, data)
    return jsonify({"collateral": ref.to_dict(), "item": item.to_dict()}), 201


@work_package_bp.route("/items/<int:item_id>/collateral/<int:collateral_id>", methods=["DELETE"])
def remove_collateral(item_id: int, collateral_id: int):
    tenant_id, err = _resolve_tenant()
    if err:
        return err
    item = work_package_service.remove_collateral(tenant_id, item_id, collateral_id)
    return jsonify({"item": item.to_dict()}), 200
