#!/usr/bin/env python3
"""
Work Package Platform — Demo Seed.

Creates one tenant with a small artifact library and a three-phase work
package whose hydration shows every timeline status at once.

Usage:
    python scripts/seed_demo_data.py                  # seed into APP_ENV database
    python scripts/seed_demo_data.py --start 2026-01-05
    python scripts/seed_demo_data.py --reset          # drop + recreate tables first
"""

import argparse
import logging
import sys
from datetime import date, timedelta

sys.path.insert(0, ".")

from app import create_app
from app.models import db
from app.models.artifact import Blog, Deck, Persona, Template
from app.models.auth import Tenant
from app.models.work_package import (
    Collateral,
    WorkPackage,
    WorkPackageItem,
    WorkPackagePhase,
    default_quantity,
    item_type_label,
)
from app.utils.helpers import parse_date

logger = logging.getLogger("seed_demo_data")


# ═══════════════════════════════════════════════════════════════════════════
# 1. TENANT & ARTIFACTS
# ═══════════════════════════════════════════════════════════════════════════

def seed_tenant():
    t = Tenant.query.filter_by(slug="demo-agency").first()
    if t:
        return t
    t = Tenant(name="Demo Agency", slug="demo-agency")
    db.session.add(t)
    db.session.flush()
    return t


def seed_artifacts(tenant):
    """Three personas (two published), two templates, one deck, one draft blog."""
    rows = [
        Persona(tenant_id=tenant.id, title="Plant Operations Director", published=True),
        Persona(tenant_id=tenant.id, title="Regional CFO", published=True),
        Persona(tenant_id=tenant.id, title="IT Procurement Lead", published=False),
        Template(tenant_id=tenant.id, title="Cold intro — operations", published=True),
        Template(tenant_id=tenant.id, title="Follow-up — ROI recap", published=False),
        Deck(tenant_id=tenant.id, title="Capabilities overview", published=True, slide_count=14),
        Blog(tenant_id=tenant.id, title="Five signs your supply chain is ready", published=False),
    ]
    db.session.add_all(rows)
    db.session.flush()
    return rows


# ═══════════════════════════════════════════════════════════════════════════
# 2. WORK PACKAGE
# ═══════════════════════════════════════════════════════════════════════════

def _item(tenant, wp, phase, item_type, hours_each, status="todo", quantity=None):
    item = WorkPackageItem(
        tenant_id=tenant.id,
        work_package_id=wp.id,
        phase_id=phase.id if phase else None,
        item_type=item_type,
        deliverable_label=item_type_label(item_type),
        quantity=quantity if quantity is not None else default_quantity(item_type),
        estimated_hours_each=hours_each,
        status=status,
    )
    db.session.add(item)
    db.session.flush()
    return item


def _link(tenant, item, artifact):
    db.session.add(Collateral(
        tenant_id=tenant.id,
        work_package_item_id=item.id,
        collateral_type=artifact.artifact_type,
        collateral_ref_id=artifact.id,
    ))


def seed_work_package(tenant, artifacts, start):
    personas = [a for a in artifacts if a.artifact_type == "persona"]
    templates = [a for a in artifacts if a.artifact_type == "template"]
    deck = next(a for a in artifacts if a.artifact_type == "deck")
    blog = next(a for a in artifacts if a.artifact_type == "blog")

    wp = WorkPackage(
        tenant_id=tenant.id,
        title="Q1 Manufacturing Outreach",
        description="Persona research, outreach assets and launch collateral.",
        effective_start_date=start,
    )
    db.session.add(wp)
    db.session.flush()

    phases = []
    for pos, name in enumerate(("Research", "Asset Build", "Launch"), start=1):
        ph = WorkPackagePhase(tenant_id=tenant.id, work_package_id=wp.id, position=pos, name=name)
        db.session.add(ph)
        phases.append(ph)
    db.session.flush()

    research = _item(tenant, wp, phases[0], "persona", 4, status="completed")
    for p in personas:
        _link(tenant, research, p)

    outreach = _item(tenant, wp, phases[1], "template", 2, status="in_progress", quantity=4)
    for t in templates:
        _link(tenant, outreach, t)
    content = _item(tenant, wp, phases[1], "blog", 6, quantity=2)
    _link(tenant, content, blog)

    launch_deck = _item(tenant, wp, phases[2], "deck", 12)
    _link(tenant, launch_deck, deck)

    _item(tenant, wp, None, "lead_form", 8)
    return wp


def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed a demo work package.")
    parser.add_argument("--start", help="Work package start date (YYYY-MM-DD)")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables")
    args = parser.parse_args(argv)

    start = parse_date(args.start) or (date.today() - timedelta(days=5))

    app = create_app()
    with app.app_context():
        if args.reset:
            db.drop_all()
            db.create_all()
        tenant = seed_tenant()
        artifacts = seed_artifacts(tenant)
        wp = seed_work_package(tenant, artifacts, start)
        db.session.commit()
        logger.info("Seeded work package id=%s for tenant id=%s (start=%s)", wp.id, tenant.id, start)
    return 0


if __name__ == "__main__":
    sys.exit(main())
