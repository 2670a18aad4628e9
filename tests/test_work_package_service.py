"""
Tests: Work Package collateral service.

Adding collateral moves an item todo → in_progress → completed as references
reach the target quantity; removing collateral walks the status back down.
"""

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.models import db as _db
from app.models.artifact import Persona
from app.models.auth import Tenant
from app.models.work_package import Collateral, WorkPackage, WorkPackageItem
from app.services.work_package_service import (
    add_collateral,
    remove_collateral,
    status_after_add,
    status_after_remove,
)


def _make_item(tenant_id, quantity=2, status="todo") -> WorkPackageItem:
    wp = WorkPackage(tenant_id=tenant_id, title="Service WP")
    _db.session.add(wp)
    _db.session.flush()
    item = WorkPackageItem(
        tenant_id=tenant_id, work_package_id=wp.id, item_type="persona",
        quantity=quantity, estimated_hours_each=4, status=status,
    )
    _db.session.add(item)
    _db.session.commit()
    return item


def _make_persona(tenant_id) -> Persona:
    p = Persona(tenant_id=tenant_id, title="Persona", published=True)
    _db.session.add(p)
    _db.session.commit()
    return p


# ── Pure status rules ────────────────────────────────────────────────────────


@pytest.mark.parametrize("current,count,quantity,expected", [
    ("todo", 1, 3, "in_progress"),
    ("todo", 3, 3, "completed"),
    ("in_progress", 2, 3, "in_progress"),
    ("in_progress", 4, 3, "completed"),
    ("todo", 0, 0, "completed"),
])
def test_status_after_add(current, count, quantity, expected):
    assert status_after_add(current, count, quantity) == expected


@pytest.mark.parametrize("current,count,quantity,expected", [
    ("completed", 2, 3, "in_progress"),
    ("completed", 3, 3, "completed"),
    ("in_progress", 0, 3, "todo"),
    ("completed", 0, 1, "todo"),
    ("in_progress", 1, 3, "in_progress"),
    ("todo", 1, 3, "in_progress"),
])
def test_status_after_remove(current, count, quantity, expected):
    assert status_after_remove(current, count, quantity) == expected


# ── add_collateral ───────────────────────────────────────────────────────────


def test_add_collateral_progresses_item_status(default_tenant):
    item = _make_item(default_tenant.id, quantity=2)
    p1, p2 = _make_persona(default_tenant.id), _make_persona(default_tenant.id)

    ref, item = add_collateral(default_tenant.id, item.id,
                               {"collateral_type": "persona", "collateral_ref_id": p1.id})
    assert ref.id is not None
    assert item.status == "in_progress"

    _ref, item = add_collateral(default_tenant.id, item.id,
                                {"collateral_type": "persona", "collateral_ref_id": str(p2.id)})
    assert item.status == "completed"
    assert Collateral.query.filter_by(work_package_item_id=item.id).count() == 2


def test_add_collateral_rejects_unknown_type(default_tenant):
    item = _make_item(default_tenant.id)
    with pytest.raises(ValidationError) as exc:
        add_collateral(default_tenant.id, item.id, {"collateral_type": "fax", "collateral_ref_id": 1})
    assert "collateral_type" in exc.value.details


def test_add_collateral_requires_integer_ref(default_tenant):
    item = _make_item(default_tenant.id)
    with pytest.raises(ValidationError) as exc:
        add_collateral(default_tenant.id, item.id, {"collateral_type": "persona", "collateral_ref_id": "abc"})
    assert "collateral_ref_id" in exc.value.details


def test_add_collateral_is_tenant_scoped(default_tenant):
    other = Tenant(name="Other", slug="other-service")
    _db.session.add(other)
    _db.session.commit()
    item = _make_item(other.id)
    with pytest.raises(NotFoundError):
        add_collateral(default_tenant.id, item.id, {"collateral_type": "persona", "collateral_ref_id": 1})


# ── remove_collateral ────────────────────────────────────────────────────────


def test_remove_collateral_walks_status_back(default_tenant):
    item = _make_item(default_tenant.id, quantity=2)
    refs = []
    for _ in range(2):
        p = _make_persona(default_tenant.id)
        ref, item = add_collateral(default_tenant.id, item.id,
                                   {"collateral_type": "persona", "collateral_ref_id": p.id})
        refs.append(ref.id)
    assert item.status == "completed"

    item = remove_collateral(default_tenant.id, item.id, refs[0])
    assert item.status == "in_progress"

    item = remove_collateral(default_tenant.id, item.id, refs[1])
    assert item.status == "todo"


def test_remove_collateral_must_belong_to_item(default_tenant):
    a = _make_item(default_tenant.id)
    b = _make_item(default_tenant.id)
    p = _make_persona(default_tenant.id)
    ref, _ = add_collateral(default_tenant.id, a.id, {"collateral_type": "persona", "collateral_ref_id": p.id})

    with pytest.raises(NotFoundError):
        remove_collateral(default_tenant.id, b.id, ref.id)
