"""
Work Package Timeline — Phase Scheduler.

Pure functions deriving a phase's schedule from its items:

    - Effort aggregation:  Σ estimated_hours_each × quantity (phase estimate fallback)
    - Date cascade:        each phase starts where its predecessors' effort ends
    - Expected end date:   effective_date + ceil(effort / WORKDAY_HOURS) days
    - Phase status:        completed | in_progress | active, from item states
    - Timeline status:     complete | on_track | warning | overdue

Nothing here touches the database or stores a result. Dates are plain
calendar-day arithmetic (no weekend or holiday awareness) and ``today`` is
always passed in so the one time-varying input is explicit.
"""

import logging
import math
from datetime import date, timedelta

from flask import current_app, has_app_context

from app.models.work_package import ITEM_STATUS_COMPLETED, ITEM_STATUS_IN_PROGRESS

logger = logging.getLogger(__name__)

DEFAULT_WORKDAY_HOURS = 8
DEFAULT_WARNING_DAYS = 3

PHASE_STATUS_ACTIVE = "active"
PHASE_STATUS_IN_PROGRESS = "in_progress"
PHASE_STATUS_COMPLETED = "completed"

TIMELINE_COMPLETE = "complete"
TIMELINE_ON_TRACK = "on_track"
TIMELINE_WARNING = "warning"
TIMELINE_OVERDUE = "overdue"
TIMELINE_STATUSES = (TIMELINE_COMPLETE, TIMELINE_OVERDUE, TIMELINE_WARNING, TIMELINE_ON_TRACK)


def _setting(key, default):
    if has_app_context():
        return current_app.config.get(key, default)
    return default


def workday_hours() -> float:
    return _setting("WORKDAY_HOURS", DEFAULT_WORKDAY_HOURS)


def warning_days() -> int:
    return _setting("TIMELINE_WARNING_DAYS", DEFAULT_WARNING_DAYS)


# ── Effort ───────────────────────────────────────────────────────────────────


def convert_hours_to_days(hours, hours_per_day=None):
    """Whole calendar days needed for ``hours`` of effort (rounded up).

    Negative effort is taken at face value and yields a non-positive day count.
    """
    if hours is None:
        return None
    hours_per_day = hours_per_day or workday_hours()
    return math.ceil(hours / hours_per_day)


def compute_total_effort(items, fallback_hours=None) -> float:
    """Total phase effort in hours.

    Sum of ``estimated_hours_each * quantity`` over the phase's items. When
    that sum is zero the phase-level estimate is used, else 0.
    """
    total = sum(
        (item.estimated_hours_each or 0) * (item.quantity or 0)
        for item in items
    )
    if total == 0:
        return fallback_hours or 0
    return total


def phase_effort(phase) -> float:
    return compute_total_effort(phase.items, phase.total_estimated_hours)


# ── Dates ────────────────────────────────────────────────────────────────────


def compute_effective_dates(phases, start_date):
    """Effective start date per phase id via a sequential cascade.

    Phases are walked in ascending ``position``; a running cursor starts at
    ``start_date`` and advances by each phase's effort in days. A phase's
    effective date is the cursor value before its own effort is added.

    Returns:
        {phase.id: date | None}. All values are None without a start date.
    """
    ordered = sorted(phases, key=lambda p: p.position)
    if start_date is None:
        return {p.id: None for p in ordered}

    dates = {}
    cursor = start_date
    for phase in ordered:
        dates[phase.id] = cursor
        cursor = cursor + timedelta(days=convert_hours_to_days(phase_effort(phase)))
    return dates


def compute_expected_end_date(effective_date, total_effort):
    """``effective_date + ceil(total_effort / WORKDAY_HOURS)`` days, or None.

    Zero effort gives a zero-length phase (end date == effective date).
    """
    if effective_date is None or total_effort is None:
        return None
    return effective_date + timedelta(days=convert_hours_to_days(total_effort))


# ── Status ───────────────────────────────────────────────────────────────────


def is_item_complete(progress) -> bool:
    return progress["completed"] >= progress["total"]


def derive_phase_status(items, item_results) -> str:
    """Phase status as a pure function of its items.

    completed   — at least one item, and every item is completed by status
                  or by progress (completed ≥ total)
    in_progress — otherwise, when any item is in_progress
    active      — default
    """
    if not items:
        return PHASE_STATUS_ACTIVE

    def _done(item):
        if item.status == ITEM_STATUS_COMPLETED:
            return True
        result = item_results.get(item.id)
        return result is not None and is_item_complete(result["progress"])

    if all(_done(item) for item in items):
        return PHASE_STATUS_COMPLETED
    if any(item.status == ITEM_STATUS_IN_PROGRESS for item in items):
        return PHASE_STATUS_IN_PROGRESS
    return PHASE_STATUS_ACTIVE


def compute_timeline_status(phase_status, expected_end_date, today=None) -> str:
    """Traffic-light classification, evaluated in precedence order.

    complete — phase is completed, regardless of dates
    on_track — no expected end date, or more than WARNING_DAYS remain
    warning  — 0..WARNING_DAYS days remain (inclusive)
    overdue  — expected end date is before today
    """
    if phase_status == PHASE_STATUS_COMPLETED:
        return TIMELINE_COMPLETE
    if expected_end_date is None:
        return TIMELINE_ON_TRACK

    today = today or date.today()
    days_left = (expected_end_date - today).days
    if days_left < 0:
        return TIMELINE_OVERDUE
    if days_left <= warning_days():
        return TIMELINE_WARNING
    return TIMELINE_ON_TRACK


# ── Scheduler ────────────────────────────────────────────────────────────────


def _progress(completed, total) -> dict:
    return {
        "completed": completed,
        "total": total,
        "percentage": round(100 * completed / total) if total > 0 else 0,
    }


def schedule_phase(
    phase,
    all_phases,
    package_start_date,
    item_results: dict,
    today: date | None = None,
    effective_dates: dict | None = None,
) -> dict:
    """Hydrate one phase: effort, cascaded dates, derived statuses.

    Args:
        phase: WorkPackagePhase being scheduled.
        all_phases: Every phase of the package (the cascade needs predecessors).
        package_start_date: WorkPackage.effective_start_date, may be None.
        item_results: {item_id: {"artifacts", "progress"}} from the aggregator.
        today: Reference day for timeline status; defaults to date.today().
        effective_dates: Precomputed cascade (see compute_effective_dates);
                         computed here when omitted.

    Returns:
        Plain dict of the phase with derived fields and its hydrated items.
    """
    if effective_dates is None:
        effective_dates = compute_effective_dates(all_phases, package_start_date)

    items = list(phase.items)
    total_effort = phase_effort(phase)
    effective_date = effective_dates.get(phase.id)
    expected_end_date = compute_expected_end_date(effective_date, total_effort)
    status = derive_phase_status(items, item_results)
    timeline_status = compute_timeline_status(status, expected_end_date, today)

    hydrated_items = []
    completed_items = 0
    for item in items:
        result = item_results.get(item.id) or {"artifacts": [], "progress": _progress(0, item.quantity or 0)}
        if is_item_complete(result["progress"]):
            completed_items += 1
        hydrated_items.append({**item.to_dict(), **result})

    return {
        **phase.to_dict(),
        "status": status,
        "total_estimated_hours": total_effort,
        "effective_date": effective_date.isoformat() if effective_date else None,
        "expected_end_date": expected_end_date.isoformat() if expected_end_date else None,
        "timeline_status": timeline_status,
        "progress": _progress(completed_items, len(items)),
        "items": hydrated_items,
    }
