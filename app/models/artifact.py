"""
Work Package Platform
Artifact domain models — the concrete content objects a work package item
links to as collateral.

Models:
    - Blog: long-form blog content
    - Persona: target persona profile
    - Template: outreach (email) template
    - EventPlan: industry event / conference target plan
    - Deck: presentation deck
    - LandingPage: ecosystem landing page

Every artifact kind lives in its own table but shares the same minimal
surface: a title and a ``published`` flag that gates client-facing views.
The hydration engine only ever reads these rows.
"""

from app.models import db
from app.models.base import TenantModel, iso


class ArtifactModel(TenantModel):
    """Abstract base for artifact tables."""
    __abstract__ = True

    # Reference type tag used in Collateral.collateral_type
    artifact_type = None

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(300), nullable=False, default="")
    published = db.Column(db.Boolean, nullable=False, default=False)
    published_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "artifact_type": self.artifact_type,
            "title": self.title,
            "published": bool(self.published),
            "published_at": iso(self.published_at),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }

    def __repr__(self):
        return f"<{type(self).__name__} {self.id}: {self.title}>"


class Blog(ArtifactModel):
    __tablename__ = "blogs"
    artifact_type = "blog"

    subtitle = db.Column(db.String(300), default="")


class Persona(ArtifactModel):
    __tablename__ = "personas"
    artifact_type = "persona"

    role = db.Column(db.String(200), default="")
    industry = db.Column(db.String(200), default="")


class Template(ArtifactModel):
    __tablename__ = "templates"
    artifact_type = "template"

    subject = db.Column(db.String(300), default="")


class EventPlan(ArtifactModel):
    __tablename__ = "event_plans"
    artifact_type = "event_plan"

    event_date = db.Column(db.Date, nullable=True)

    def to_dict(self):
        result = super().to_dict()
        result["event_date"] = iso(self.event_date)
        return result


class Deck(ArtifactModel):
    __tablename__ = "decks"
    artifact_type = "deck"

    slide_count = db.Column(db.Integer, default=0)


class LandingPage(ArtifactModel):
    __tablename__ = "landing_pages"
    artifact_type = "landing_page"

    url = db.Column(db.String(500), default="")


ARTIFACT_MODELS = (Blog, Persona, Template, EventPlan, Deck, LandingPage)
