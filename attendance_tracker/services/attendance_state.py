"""
Attendance page state and its pure transitions.

Every transition takes an AttendanceState and returns a new one; nothing here
touches the network. The controller owns the current state and swaps it after
each action.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from attendance_tracker.exceptions.base import ValidationError
from attendance_tracker.schemas.models import (
    AttendanceStatus,
    FilterOptions,
    FilterSelection,
    StudentStatus,
    SubmissionPayload,
)


@dataclass(frozen=True)
class AttendanceState:
    roster: Tuple[str, ...] = ()
    attendance: Dict[str, AttendanceStatus] = field(default_factory=dict)
    filters: FilterSelection = field(default_factory=FilterSelection)
    roster_filters: FilterSelection = field(default_factory=FilterSelection)
    options: FilterOptions = field(default_factory=lambda: FilterOptions(teachers=[], levels=[]))
    session_label: str = ""
    search_term: str = ""
    loading: bool = False
    submitting: bool = False
    last_error: Optional[str] = None
    last_submission: Optional[str] = None
    generation: int = 0


def apply_roster(state: AttendanceState, names: List[str], selection: FilterSelection = None) -> AttendanceState:
    """
    Replace the roster wholesale; every student starts Present.

    selection is the filter pair the names were fetched with and defaults to
    the current filters. Submissions are filed under it.
    """
    roster = tuple(names)
    return replace(
        state,
        roster=roster,
        roster_filters=selection or state.filters,
        attendance={name: AttendanceStatus.PRESENT for name in roster},
        last_submission=None,
    )


def select_filters(state: AttendanceState, selection: FilterSelection) -> AttendanceState:
    # A new selection supersedes any roster fetch still in flight.
    return replace(state, filters=selection, generation=state.generation + 1)


def cycle_status(state: AttendanceState, name: str) -> AttendanceState:
    if name not in state.attendance:
        raise ValidationError(f"Unknown student: {name}")
    attendance = dict(state.attendance)
    attendance[name] = attendance[name].next()
    return replace(state, attendance=attendance)


def visible_students(state: AttendanceState) -> List[str]:
    """Roster students whose name contains the search term, ignoring case."""
    term = state.search_term.strip().lower()
    if not term:
        return list(state.roster)
    return [name for name in state.roster if term in name.lower()]


def clear_all(state: AttendanceState) -> AttendanceState:
    """Reset visible students to Present; hidden students keep their status."""
    attendance = dict(state.attendance)
    for name in visible_students(state):
        attendance[name] = AttendanceStatus.PRESENT
    return replace(state, attendance=attendance)


def count_statuses(state: AttendanceState, names: List[str]) -> Dict[AttendanceStatus, int]:
    counts = {status: 0 for status in AttendanceStatus}
    for name in names:
        counts[state.attendance[name]] += 1
    return counts


def build_payload(state: AttendanceState, now: datetime = None) -> SubmissionPayload:
    """
    Build the submission body for the visible students.

    Raises:
        ValidationError: session label is blank or no student is visible
    """
    session = state.session_label.strip()
    if not session:
        raise ValidationError("Session name is required")

    names = visible_students(state)
    if not names:
        raise ValidationError("No students to submit")

    now = now or datetime.now(timezone.utc)
    counts = count_statuses(state, names)
    return SubmissionPayload(
        teacher=state.roster_filters.teacher,
        level=state.roster_filters.level,
        session=session,
        timestamp=now.isoformat(),
        students=[StudentStatus(name=name, status=state.attendance[name]) for name in names],
        total_students=len(names),
        present_count=counts[AttendanceStatus.PRESENT],
        absent_count=counts[AttendanceStatus.ABSENT],
        late_count=counts[AttendanceStatus.LATE],
    )
