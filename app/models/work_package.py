"""
Work Package Platform
Work package domain models.

Models:
    - WorkPackage: a client engagement's top-level plan of work
    - WorkPackagePhase: an ordered stage within a work package
    - WorkPackageItem: a unit of deliverable work with a target quantity
    - Collateral: typed reference from an item to a concrete artifact

Only source-of-truth columns live here. Progress, phase status, schedule
dates and timeline status are derived on every read by
app.services.work_package_hydration and are never stored.
"""

from app.models import db
from app.models.base import TenantModel, iso

ITEM_STATUS_TODO = "todo"
ITEM_STATUS_IN_PROGRESS = "in_progress"
ITEM_STATUS_COMPLETED = "completed"
ITEM_STATUSES = frozenset({ITEM_STATUS_TODO, ITEM_STATUS_IN_PROGRESS, ITEM_STATUS_COMPLETED})

# Deliverable item types shown in the "Add Item" flow: type -> (label, default quantity)
ITEM_TYPES = {
    "persona": ("Target Persona", 3),
    "template": ("Outreach Template", 10),
    "event_targets": ("Industry Event / Conference Targets", 2),
    "blog": ("Blog Content", 5),
    "deck": ("Presentation Deck", 1),
    "page": ("Ecosystem Landing Page", 1),
    "lead_form": ("Lead Form + CRM Tie-In", 1),
}


def item_type_label(item_type):
    """Human label for an item type; unknown types are echoed back."""
    if not item_type:
        return "Unknown"
    entry = ITEM_TYPES.get(item_type.lower())
    return entry[0] if entry else item_type


def default_quantity(item_type):
    entry = ITEM_TYPES.get((item_type or "").lower())
    return entry[1] if entry else 1


# ── WorkPackage ──────────────────────────────────────────────────────────────


class WorkPackage(TenantModel):
    """Top-level container of phases and items for one engagement."""

    __tablename__ = "work_packages"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text, default="")
    status = db.Column(
        db.String(30),
        default="active",
        comment="draft | active | completed | archived",
    )
    effective_start_date = db.Column(
        db.Date, nullable=True, comment="Schedule anchor for the phase cascade",
    )

    # ── Relationships ────────────────────────────────────────────────────
    phases = db.relationship(
        "WorkPackagePhase", backref="work_package",
        cascade="all, delete-orphan", order_by="WorkPackagePhase.position",
    )
    items = db.relationship(
        "WorkPackageItem", backref="work_package",
        cascade="all, delete-orphan", order_by="WorkPackageItem.id",
    )

    @property
    def orphan_items(self):
        """Items not assigned to any phase."""
        return [i for i in self.items if i.phase_id is None]

    def to_dict(self):
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "effective_start_date": iso(self.effective_start_date),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }

    def __repr__(self):
        return f"<WorkPackage {self.id}: {self.title}>"


# ── Phase ────────────────────────────────────────────────────────────────────


class WorkPackagePhase(TenantModel):
    """Ordered stage of work; ``position`` is 1-based and unique per package."""

    __tablename__ = "work_package_phases"
    __table_args__ = (
        db.UniqueConstraint("work_package_id", "position", name="uq_wp_phase_position"),
    )

    id = db.Column(db.Integer, primary_key=True)
    work_package_id = db.Column(
        db.Integer, db.ForeignKey("work_packages.id", ondelete="CASCADE"), nullable=False,
    )
    position = db.Column(db.Integer, nullable=False, comment="1-based sort order within package")
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, default="")
    total_estimated_hours = db.Column(
        db.Float, nullable=True,
        comment="Phase-level effort estimate, used when items carry no hours",
    )

    items = db.relationship(
        "WorkPackageItem", backref="phase", order_by="WorkPackageItem.id",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "work_package_id": self.work_package_id,
            "position": self.position,
            "name": self.name,
            "description": self.description,
        }

    def __repr__(self):
        return f"<WorkPackagePhase {self.id}: {self.position}. {self.name}>"


# ── Item ─────────────────────────────────────────────────────────────────────


class WorkPackageItem(TenantModel):
    """A deliverable with a target quantity and linked collateral."""

    __tablename__ = "work_package_items"

    id = db.Column(db.Integer, primary_key=True)
    work_package_id = db.Column(
        db.Integer, db.ForeignKey("work_packages.id", ondelete="CASCADE"), nullable=False,
    )
    phase_id = db.Column(
        db.Integer, db.ForeignKey("work_package_phases.id", ondelete="SET NULL"), nullable=True,
    )
    deliverable_label = db.Column(db.String(300), default="")
    item_type = db.Column(db.String(50), nullable=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    estimated_hours_each = db.Column(db.Float, nullable=False, default=0)
    status = db.Column(
        db.String(30),
        nullable=False,
        default=ITEM_STATUS_TODO,
        comment="todo | in_progress | completed",
    )

    collateral = db.relationship(
        "Collateral", backref="item",
        cascade="all, delete-orphan", order_by="Collateral.id",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "work_package_id": self.work_package_id,
            "phase_id": self.phase_id,
            "deliverable_label": self.deliverable_label,
            "item_type": self.item_type,
            "label": item_type_label(self.item_type),
            "quantity": self.quantity,
            "estimated_hours_each": self.estimated_hours_each,
            "status": self.status,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }

    def __repr__(self):
        return f"<WorkPackageItem {self.id}: {self.deliverable_label}>"


# ── Collateral ───────────────────────────────────────────────────────────────


class Collateral(TenantModel):
    """Typed pointer ``(collateral_type, collateral_ref_id)`` to an artifact."""

    __tablename__ = "collateral"

    id = db.Column(db.Integer, primary_key=True)
    work_package_item_id = db.Column(
        db.Integer, db.ForeignKey("work_package_items.id", ondelete="CASCADE"), nullable=False,
    )
    collateral_type = db.Column(db.String(50), nullable=False)
    collateral_ref_id = db.Column(db.Integer, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "work_package_item_id": self.work_package_item_id,
            "collateral_type": self.collateral_type,
            "collateral_ref_id": self.collateral_ref_id,
            "created_at": iso(self.created_at),
        }

    def __repr__(self):
        return f"<Collateral {self.id}: {self.collateral_type}#{self.collateral_ref_id}>"
