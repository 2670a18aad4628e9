"""
Shared pytest fixtures for the Work Package Platform test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - default_tenant: Pre-created Tenant entity
    - tenant_headers: X-Tenant-ID header dict for the default tenant
"""

import pytest

from app import create_app
from app.models import db as _db
from app.services.artifact_resolver import reset_resolution_failures


def _ensure_default_tenant():
    """Create the default test tenant if it doesn't exist. Returns its ID."""
    from app.models.auth import Tenant
    t = Tenant.query.filter_by(slug="test-default").first()
    if not t:
        t = Tenant(name="Test Default", slug="test-default")
        _db.session.add(t)
        _db.session.commit()
    return t.id


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        reset_resolution_failures()
        _ensure_default_tenant()
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def default_tenant():
    """Return the auto-created default test tenant."""
    from app.models.auth import Tenant
    return Tenant.query.filter_by(slug="test-default").first()


@pytest.fixture()
def tenant_headers(default_tenant):
    return {"X-Tenant-ID": str(default_tenant.id)}
