"""
Attendance View Controller
Owns one page's attendance state and mediates the webhook calls.
"""
import logging
import threading
from dataclasses import replace
from typing import Any, Dict

from attendance_tracker.config.settings import Config
from attendance_tracker.exceptions.base import AppError, ValidationError
from attendance_tracker.schemas.models import FilterSelection, OperationResult
from attendance_tracker.services import attendance_state as transitions
from attendance_tracker.services.attendance_state import AttendanceState
from attendance_tracker.utils.string_utils import clean_label

logger = logging.getLogger(__name__)


class AttendanceController:
    """
    State machine behind the attendance page.

    Every operation catches the error taxonomy at its boundary, records the
    message as last_error and returns an OperationResult; nothing raises to
    the caller. The loading and submitting flags reject overlapping fetches
    and submits without touching the state.
    """

    def __init__(self, webhook, require_concrete_filters: bool = None):
        self.webhook = webhook
        if require_concrete_filters is None:
            require_concrete_filters = Config.REQUIRE_CONCRETE_FILTERS
        self.require_concrete_filters = require_concrete_filters
        self.state = AttendanceState()
        self._lock = threading.Lock()

    def _fail(self, error: AppError, operation: str) -> OperationResult:
        logger.warning(f"{operation} failed [{error.code}]: {error.message}")
        self.state = replace(self.state, last_error=error.message)
        return OperationResult(ok=False, message=error.message, error_code=error.code)

    def _reject(self, error: ValidationError, operation: str) -> OperationResult:
        logger.info(f"{operation} rejected: {error.message}")
        return OperationResult(ok=False, message=error.message, error_code=error.code)

    def _unexpected(self, error: Exception, operation: str) -> OperationResult:
        logger.error(f"Unexpected error in {operation}: {error}", exc_info=True)
        return self._fail(AppError("An unexpected error occurred"), operation)

    async def fetch_filter_options(self) -> OperationResult:
        """Load teacher and level options; prior options survive a failure."""
        try:
            options = await self.webhook.get_filters_async()
        except AppError as e:
            return self._fail(e, "fetch_filter_options")
        except Exception as e:
            return self._unexpected(e, "fetch_filter_options")

        self.state = replace(self.state, options=options, last_error=None)
        return OperationResult(ok=True, message="Filters loaded")

    def select_filters(self, teacher: str = None, level: str = None) -> FilterSelection:
        selection = FilterSelection(teacher=teacher, level=level)
        self.state = transitions.select_filters(self.state, selection)
        return selection

    async def fetch_roster(self, selection: FilterSelection = None) -> OperationResult:
        """
        Fetch the roster for selection, or for the current filters when None.

        The selection only becomes the page's filters once the request is
        accepted. A call rejected because another fetch is running changes
        nothing.
        """
        with self._lock:
            state = self.state
            if state.loading:
                return self._reject(ValidationError("Students are already loading"), "fetch_roster")
            selection = selection or state.filters
            if self.require_concrete_filters and not selection.is_concrete:
                return self._fail(ValidationError("Please select a teacher and a level"), "fetch_roster")

            generation = state.generation + 1
            self.state = replace(
                state,
                filters=selection,
                loading=True,
                last_error=None,
                last_submission=None,
                generation=generation,
            )

        try:
            names = await self.webhook.get_students_async(selection)
        except AppError as e:
            if generation != self.state.generation:
                return self._stale(generation)
            return self._fail(e, "fetch_roster")
        except Exception as e:
            if generation != self.state.generation:
                return self._stale(generation)
            return self._unexpected(e, "fetch_roster")
        finally:
            self.state = replace(self.state, loading=False)

        if generation != self.state.generation:
            return self._stale(generation)

        self.state = transitions.apply_roster(self.state, names, selection)
        message = f"Loaded {len(names)} students" if names else "No students found"
        return OperationResult(ok=True, message=message)

    def _stale(self, generation: int) -> OperationResult:
        logger.info(f"Discarding roster response for generation {generation} (current {self.state.generation})")
        return OperationResult(ok=False, message="Selection changed while loading", error_code="STALE_RESPONSE")

    def cycle(self, name: str) -> OperationResult:
        try:
            self.state = transitions.cycle_status(self.state, name)
        except ValidationError as e:
            return self._fail(e, "cycle")
        return OperationResult(ok=True, message=f"{name}: {self.state.attendance[name].value}")

    def clear_all(self) -> OperationResult:
        self.state = transitions.clear_all(self.state)
        return OperationResult(ok=True, message="Visible students reset to Present")

    def set_search_term(self, term: str) -> None:
        self.state = replace(self.state, search_term=term or "")

    def set_session_label(self, label: str) -> None:
        self.state = replace(self.state, session_label=clean_label(label))

    async def submit(self) -> OperationResult:
        with self._lock:
            if self.state.submitting:
                return self._reject(ValidationError("Attendance is already being submitted"), "submit")
            try:
                payload = transitions.build_payload(self.state)
            except ValidationError as e:
                return self._fail(e, "submit")
            self.state = replace(self.state, submitting=True, last_submission=None, last_error=None)

        try:
            message = await self.webhook.submit_attendance_async(payload)
        except AppError as e:
            return self._fail(e, "submit")
        except Exception as e:
            return self._unexpected(e, "submit")
        finally:
            self.state = replace(self.state, submitting=False)

        self.state = replace(self.state, session_label="", last_submission=message)
        return OperationResult(ok=True, message=message)

    def snapshot(self) -> Dict[str, Any]:
        state = self.state
        visible = transitions.visible_students(state)
        counts = transitions.count_statuses(state, visible)
        return {
            "filters": state.filters.model_dump(),
            "roster_filters": state.roster_filters.model_dump(),
            "options": state.options.model_dump(),
            "search": state.search_term,
            "session": state.session_label,
            "students": [
                {"name": name, "status": state.attendance[name].value} for name in visible
            ],
            "counts": {status.value: n for status, n in counts.items()},
            "visible": len(visible),
            "total": len(state.roster),
            "loading": state.loading,
            "submitting": state.submitting,
            "error": state.last_error,
            "submission": state.last_submission,
        }
