"""
Tests: Work Package API — /api/v1/work-packages.

Covers:
  1. hydrate endpoint returns the scheduled tree (internal view by default)
  2. client endpoint / ?view=client gate progress on published artifacts
  3. ?as_of drives timeline status deterministically
  4. unknown package → 404 ERR_NOT_FOUND; bad view / as_of → 400
  5. tenant header is required and scopes every lookup
  6. collateral attach / detach round trip through the API
"""

from datetime import date

from app.models import db as _db
from app.models.artifact import Blog, Deck
from app.models.auth import Tenant
from app.models.work_package import Collateral, WorkPackage, WorkPackageItem, WorkPackagePhase

BASE = "/api/v1/work-packages"
START = date(2026, 4, 6)


def _seed(tenant_id):
    """Two phases (16h, 8h), one published and one draft artifact, one orphan item."""
    wp = WorkPackage(tenant_id=tenant_id, title="API WP", effective_start_date=START)
    _db.session.add(wp)
    _db.session.flush()
    a = WorkPackagePhase(tenant_id=tenant_id, work_package_id=wp.id, position=1, name="Research")
    b = WorkPackagePhase(tenant_id=tenant_id, work_package_id=wp.id, position=2, name="Launch")
    _db.session.add_all([a, b])
    _db.session.flush()

    blog_item = WorkPackageItem(tenant_id=tenant_id, work_package_id=wp.id, phase_id=a.id,
                                item_type="blog", quantity=2, estimated_hours_each=8)
    deck_item = WorkPackageItem(tenant_id=tenant_id, work_package_id=wp.id, phase_id=b.id,
                                item_type="deck", quantity=1, estimated_hours_each=8)
    orphan = WorkPackageItem(tenant_id=tenant_id, work_package_id=wp.id,
                             item_type="lead_form", quantity=1, estimated_hours_each=2)
    _db.session.add_all([blog_item, deck_item, orphan])
    _db.session.flush()

    published = Blog(tenant_id=tenant_id, title="Live post", published=True)
    draft = Deck(tenant_id=tenant_id, title="Draft deck", published=False)
    _db.session.add_all([published, draft])
    _db.session.flush()
    _db.session.add_all([
        Collateral(tenant_id=tenant_id, work_package_item_id=blog_item.id,
                   collateral_type="blog", collateral_ref_id=published.id),
        Collateral(tenant_id=tenant_id, work_package_item_id=deck_item.id,
                   collateral_type="deck", collateral_ref_id=draft.id),
    ])
    _db.session.commit()
    return {"wp": wp.id, "blog_item": blog_item.id, "deck_item": deck_item.id,
            "orphan": orphan.id, "blog": published.id, "deck": draft.id}


# ── 1. Hydrate ───────────────────────────────────────────────────────────────


def test_hydrate_returns_scheduled_tree(client, default_tenant, tenant_headers):
    ids = _seed(default_tenant.id)
    res = client.get(f"{BASE}/{ids['wp']}/hydrate?as_of=2026-04-06", headers=tenant_headers)
    assert res.status_code == 200
    data = res.get_json()

    assert data["view_mode"] == "internal"
    assert data["as_of"] == "2026-04-06"
    research, launch = data["phases"]
    assert research["name"] == "Research"
    assert research["effective_date"] == "2026-04-06"
    assert research["expected_end_date"] == "2026-04-08"
    assert launch["effective_date"] == "2026-04-08"
    assert launch["expected_end_date"] == "2026-04-09"
    assert research["items"][0]["progress"] == {"completed": 1, "total": 2, "percentage": 50}
    assert launch["items"][0]["progress"]["completed"] == 1
    assert launch["status"] == "completed"
    assert launch["timeline_status"] == "complete"
    assert [i["id"] for i in data["items"]] == [ids["orphan"]]
    assert data["progress"] == {"completed_items": 1, "total_items": 3, "percentage": 33}
    assert res.headers.get("X-Request-ID")


# ── 2. Client view ───────────────────────────────────────────────────────────


def test_client_endpoint_hides_unpublished_artifacts(client, default_tenant, tenant_headers):
    ids = _seed(default_tenant.id)
    res = client.get(f"{BASE}/{ids['wp']}/client?as_of=2026-04-06", headers=tenant_headers)
    assert res.status_code == 200
    data = res.get_json()

    assert data["view_mode"] == "client"
    launch = data["phases"][1]
    assert launch["items"][0]["artifacts"] == []
    assert launch["items"][0]["progress"]["completed"] == 0
    assert launch["status"] == "active"
    assert launch["timeline_status"] == "warning"
    assert data["progress"]["completed_items"] == 0


def test_view_query_param_selects_client_mode(client, default_tenant, tenant_headers):
    ids = _seed(default_tenant.id)
    res = client.get(f"{BASE}/{ids['wp']}/hydrate?view=client", headers=tenant_headers)
    assert res.status_code == 200
    assert res.get_json()["view_mode"] == "client"


# ── 3. as_of ─────────────────────────────────────────────────────────────────


def test_as_of_after_end_date_marks_phase_overdue(client, default_tenant, tenant_headers):
    ids = _seed(default_tenant.id)
    res = client.get(f"{BASE}/{ids['wp']}/hydrate?as_of=2026-05-01", headers=tenant_headers)
    research = res.get_json()["phases"][0]
    assert research["timeline_status"] == "overdue"


# ── 4. Errors ────────────────────────────────────────────────────────────────


def test_unknown_work_package_returns_404(client, tenant_headers):
    res = client.get(f"{BASE}/99999/hydrate", headers=tenant_headers)
    assert res.status_code == 404
    assert res.get_json()["code"] == "ERR_NOT_FOUND"


def test_invalid_view_returns_400(client, default_tenant, tenant_headers):
    ids = _seed(default_tenant.id)
    res = client.get(f"{BASE}/{ids['wp']}/hydrate?view=partner", headers=tenant_headers)
    assert res.status_code == 400
    assert res.get_json()["code"] == "ERR_VALIDATION_INVALID"


def test_invalid_as_of_returns_400(client, default_tenant, tenant_headers):
    ids = _seed(default_tenant.id)
    res = client.get(f"{BASE}/{ids['wp']}/hydrate?as_of=yesterday", headers=tenant_headers)
    assert res.status_code == 400


# ── 5. Tenant scope ──────────────────────────────────────────────────────────


def test_missing_tenant_header_returns_400(client, default_tenant):
    ids = _seed(default_tenant.id)
    res = client.get(f"{BASE}/{ids['wp']}/hydrate")
    assert res.status_code == 400
    assert res.get_json()["code"] == "ERR_TENANT_REQUIRED"


def test_other_tenant_cannot_read_package(client, default_tenant):
    ids = _seed(default_tenant.id)
    other = Tenant(name="Other", slug="other-api")
    _db.session.add(other)
    _db.session.commit()
    res = client.get(f"{BASE}/{ids['wp']}/hydrate", headers={"X-Tenant-ID": str(other.id)})
    assert res.status_code == 404


def test_list_work_packages(client, default_tenant, tenant_headers):
    _seed(default_tenant.id)
    _seed(default_tenant.id)
    res = client.get(f"{BASE}?view=client", headers=tenant_headers)
    assert res.status_code == 200
    data = res.get_json()
    assert data["total"] == 2
    assert all(wp["view_mode"] == "client" for wp in data["items"])


def test_artifact_types_endpoint(client):
    res = client.get(f"{BASE}/artifact-types")
    assert res.status_code == 200
    assert "landing_page" in res.get_json()["items"]


# ── 6. Collateral ────────────────────────────────────────────────────────────


def test_attach_and_detach_collateral(client, default_tenant, tenant_headers):
    ids = _seed(default_tenant.id)
    blog = Blog(tenant_id=default_tenant.id, title="Second post", published=True)
    _db.session.add(blog)
    _db.session.commit()
    blog_id = blog.id

    res = client.post(
        f"{BASE}/items/{ids['blog_item']}/collateral",
        json={"collateral_type": "blog", "collateral_ref_id": blog_id},
        headers=tenant_headers,
    )
    assert res.status_code == 201
    body = res.get_json()
    assert body["item"]["status"] == "completed"
    collateral_id = body["collateral"]["id"]

    hydrated = client.get(f"{BASE}/{ids['wp']}/hydrate", headers=tenant_headers).get_json()
    assert hydrated["phases"][0]["items"][0]["progress"]["completed"] == 2

    res = client.delete(f"{BASE}/items/{ids['blog_item']}/collateral/{collateral_id}",
                        headers=tenant_headers)
    assert res.status_code == 200
    assert res.get_json()["item"]["status"] == "in_progress"


def test_attach_collateral_validates_type(client, default_tenant, tenant_headers):
    ids = _seed(default_tenant.id)
    res = client.post(
        f"{BASE}/items/{ids['blog_item']}/collateral",
        json={"collateral_type": "fax", "collateral_ref_id": 1},
        headers=tenant_headers,
    )
    assert res.status_code == 400
    assert "collateral_type" in res.get_json()["details"]
