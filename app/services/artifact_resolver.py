"""
Artifact Resolver — polymorphic collateral lookup.

A Collateral row is a typed pointer ``(collateral_type, collateral_ref_id)``.
Each artifact kind is served by one ArtifactSource registered under its
reference type; resolution is a dictionary dispatch, so adding a kind is a
single ``register_artifact_source(...)`` call.

View modes:
    internal — any existing artifact counts.
    client   — only artifacts with ``published=True`` count; unpublished rows
               resolve as absent even though they exist.

Failure semantics:
    A lookup that raises (missing table, transient DB error, ...) is logged,
    counted and treated as absent for that one reference. Each lookup runs in
    its own SAVEPOINT, so a failed statement is rolled back alone and never
    aborts the hydration of the rest of the work package.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass

from app.models import db
from app.models.artifact import ARTIFACT_MODELS
from app.services.helpers.scoped_queries import get_scoped_or_none

logger = logging.getLogger(__name__)

VIEW_INTERNAL = "internal"
VIEW_CLIENT = "client"
VIEW_MODES = frozenset({VIEW_INTERNAL, VIEW_CLIENT})


@dataclass(frozen=True)
class ArtifactLookup:
    """Result of a single artifact-store read."""

    exists: bool
    published: bool = False
    payload: dict | None = None


MISSING = ArtifactLookup(exists=False)


class ArtifactSource(ABC):
    """One artifact kind's read capability."""

    reference_type: str = ""

    @abstractmethod
    def lookup(self, tenant_id: int, artifact_id: int) -> ArtifactLookup:
        """Read the artifact; return MISSING when it does not exist."""


class ModelArtifactSource(ArtifactSource):
    """ArtifactSource backed by one tenant-scoped SQLAlchemy model."""

    def __init__(self, model, reference_type: str | None = None):
        self.model = model
        self.reference_type = reference_type or model.artifact_type

    def lookup(self, tenant_id: int, artifact_id: int) -> ArtifactLookup:
        row = get_scoped_or_none(self.model, artifact_id, tenant_id=tenant_id)
        if row is None:
            return MISSING
        return ArtifactLookup(exists=True, published=bool(row.published), payload=row.to_dict())

    def __repr__(self):
        return f"<ModelArtifactSource {self.reference_type} -> {self.model.__name__}>"


# ── Registry ─────────────────────────────────────────────────────────────────

_SOURCES: dict[str, ArtifactSource] = {}


def register_artifact_source(source: ArtifactSource) -> ArtifactSource:
    """Register (or replace) the source serving ``source.reference_type``."""
    if not source.reference_type:
        raise ValueError(f"{source!r} has no reference_type")
    _SOURCES[source.reference_type] = source
    return source


def unregister_artifact_source(reference_type: str) -> None:
    _SOURCES.pop(reference_type, None)


def get_artifact_source(reference_type: str) -> ArtifactSource | None:
    return _SOURCES.get(reference_type)


def registered_types() -> list[str]:
    """Sorted list of reference types the resolver can dispatch."""
    return sorted(_SOURCES)


for _model in ARTIFACT_MODELS:
    register_artifact_source(ModelArtifactSource(_model))


# ── Failure counter ──────────────────────────────────────────────────────────

_failure_lock = threading.Lock()
_failure_counts: dict[str, int] = {}


def _record_failure(reference_type: str) -> None:
    with _failure_lock:
        _failure_counts[reference_type] = _failure_counts.get(reference_type, 0) + 1


def get_resolution_failures() -> dict[str, int]:
    """Snapshot of failed lookups per reference type since start (or reset)."""
    with _failure_lock:
        return dict(_failure_counts)


def reset_resolution_failures() -> None:
    """Clear failure counters (for testing)."""
    with _failure_lock:
        _failure_counts.clear()


# ── Resolution ───────────────────────────────────────────────────────────────


def resolve_artifact(
    reference_type: str,
    referenced_id: int,
    view_mode: str = VIEW_INTERNAL,
    *,
    tenant_id: int,
) -> dict | None:
    """Resolve one typed reference to an artifact dict, or None when absent.

    Args:
        reference_type: Collateral type tag (e.g. "blog", "persona").
        referenced_id: PK of the artifact in its kind's table.
        view_mode: "internal" or "client". Client view drops unpublished rows.
        tenant_id: Scope for the artifact lookup.

    Returns:
        The artifact's serialized dict, or None for unknown types, missing
        rows, unpublished rows in client view, and failed lookups.
    """
    source = _SOURCES.get(reference_type)
    if source is None:
        logger.debug("resolve_artifact: no source registered for type=%r", reference_type)
        return None

    try:
        # A failed lookup rolls back its own savepoint only.
        with db.session.begin_nested():
            found = source.lookup(tenant_id, referenced_id)
    except Exception:
        _record_failure(reference_type)
        logger.warning(
            "Artifact lookup failed type=%s id=%s — treating as absent",
            reference_type, referenced_id,
            exc_info=True,
            extra={"tenant_id": tenant_id},
        )
        return None

    if not found.exists:
        logger.debug("resolve_artifact: %s id=%s not found", reference_type, referenced_id)
        return None
    if view_mode == VIEW_CLIENT and not found.published:
        return None
    return found.payload or {}
