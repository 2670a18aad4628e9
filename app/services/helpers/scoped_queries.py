"""
Tenant-scoped query helpers.

Every get-by-id in the platform MUST use these helpers instead of
Model.query.get(pk) or db.session.get(Model, pk). Direct .get() calls
bypass tenant isolation.

Usage:
    # Scope by tenant_id (all TenantModel subclasses)
    wp = get_scoped(WorkPackage, wp_id, tenant_id=tenant_id)

    # Scope by parent item (collateral rows)
    ref = get_scoped(Collateral, ref_id, tenant_id=tenant_id, work_package_item_id=item_id)

    # When None is an acceptable outcome (artifact lookups)
    blog = get_scoped_or_none(Blog, blog_id, tenant_id=tenant_id)

Scope field resolution:
    Each keyword argument maps directly to a column name on the model.
    If the model does not have that column, a ValueError is raised at
    call time so the bug surfaces immediately during development/testing
    rather than silently allowing unscoped access in production.
"""

import logging

from sqlalchemy import select

from app.core.exceptions import NotFoundError
from app.models import db

logger = logging.getLogger(__name__)


def get_scoped(
    model,
    pk: int,
    *,
    tenant_id: int | None = None,
    work_package_item_id: int | None = None,
):
    """Fetch a single entity by PK with mandatory scope filter.

    At least one scope parameter MUST be provided and MUST correspond to a
    column that actually exists on the model.

    Cross-tenant access is indistinguishable from a missing record: both
    raise NotFoundError → HTTP 404.

    Args:
        model: SQLAlchemy model class with an `id` PK column.
        pk: Primary key value to look up.
        tenant_id: Scope by tenant_id column.
        work_package_item_id: Scope by work_package_item_id column.

    Returns:
        The model instance if found within the given scope.

    Raises:
        ValueError: If no scope parameter is provided, OR if a provided
                    scope kwarg references a column that does not exist on
                    the model.
        NotFoundError: If the entity does not exist OR belongs to a different
                       scope.
    """
    provided_scopes: dict[str, int] = {
        "tenant_id": tenant_id,
        "work_package_item_id": work_package_item_id,
    }
    provided_scopes = {k: v for k, v in provided_scopes.items() if v is not None}

    if not provided_scopes:
        raise ValueError(
            f"{model.__name__} id={pk} requires at least one scope filter "
            "(tenant_id or work_package_item_id). "
            "Unscoped lookups are forbidden."
        )

    missing_fields = sorted(f for f in provided_scopes if not hasattr(model, f))
    if missing_fields:
        raise ValueError(
            f"{model.__name__} id={pk}: scope field(s) {missing_fields} "
            f"do not exist as columns on {model.__name__}."
        )

    stmt = select(model).where(model.id == pk)
    for field, value in provided_scopes.items():
        stmt = stmt.where(getattr(model, field) == value)

    result = db.session.execute(stmt).scalar_one_or_none()

    if result is None:
        logger.debug(
            "get_scoped: %s id=%s not found in scope %s",
            model.__name__,
            pk,
            provided_scopes,
        )
        raise NotFoundError(resource=model.__name__, resource_id=pk)

    return result


def get_scoped_or_none(
    model,
    pk: int,
    *,
    tenant_id: int | None = None,
    work_package_item_id: int | None = None,
):
    """Same as get_scoped but returns None instead of raising NotFoundError.

    Still enforces the scope parameter requirement, because silent unscoped
    lookups are never acceptable regardless of return style.
    """
    try:
        return get_scoped(
            model,
            pk,
            tenant_id=tenant_id,
            work_package_item_id=work_package_item_id,
        )
    except NotFoundError:
        return None
