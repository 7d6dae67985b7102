from __future__ import annotations

import asyncio

import pytest

from attendance_tracker.exceptions.base import NetworkError, ParseError, RemoteError, SubmissionError
from attendance_tracker.schemas.models import AttendanceStatus, FilterSelection
from attendance_tracker.services.attendance_controller import AttendanceController

from tests.fakes import FakeWebhook


def _controller(students=None, require_concrete=True, **kwargs) -> AttendanceController:
    controller = AttendanceController(FakeWebhook(students, **kwargs), require_concrete_filters=require_concrete)
    controller.select_filters("T1", "L1")
    return controller


def _loaded(*names: str) -> AttendanceController:
    controller = _controller(list(names))
    assert asyncio.run(controller.fetch_roster()).ok
    return controller


def test_fetch_roster_builds_present_map():
    controller = _controller(["Ali", "Sara"])

    result = asyncio.run(controller.fetch_roster())

    assert result.ok
    assert controller.state.attendance == {"Ali": AttendanceStatus.PRESENT, "Sara": AttendanceStatus.PRESENT}
    assert controller.state.loading is False
    assert controller.state.last_error is None


def test_fetch_roster_requires_concrete_filters():
    controller = AttendanceController(FakeWebhook(["Ali"]), require_concrete_filters=True)
    controller.select_filters("T1", "all")

    result = asyncio.run(controller.fetch_roster())

    assert not result.ok
    assert result.error_code == "VALIDATION_ERROR"
    assert controller.webhook.selections == []
    assert controller.state.last_error


def test_fetch_roster_allows_all_when_not_enforced():
    controller = AttendanceController(FakeWebhook(["Ali"]), require_concrete_filters=False)

    result = asyncio.run(controller.fetch_roster())

    assert result.ok
    assert controller.webhook.selections[0].teacher == "all"


def test_fetch_roster_empty_is_not_an_error():
    controller = _controller([])

    result = asyncio.run(controller.fetch_roster())

    assert result.ok
    assert controller.state.roster == ()
    assert controller.state.attendance == {}
    assert controller.state.last_error is None


def test_fetch_roster_remote_error_surfaces_message():
    controller = _controller(error=RemoteError("no data"))

    result = asyncio.run(controller.fetch_roster())

    assert not result.ok
    assert result.message == "no data"
    assert controller.state.last_error == "no data"
    assert controller.state.roster == ()
    assert controller.state.loading is False


def test_fetch_roster_network_error_keeps_previous_roster():
    controller = _loaded("Ali")
    controller.webhook.error = NetworkError("Failed to fetch students: 500")

    result = asyncio.run(controller.fetch_roster())

    assert result.error_code == "NETWORK_ERROR"
    assert controller.state.roster == ("Ali",)
    assert controller.state.loading is False


def test_fetch_roster_unexpected_exception_does_not_escape():
    controller = _controller(error=RuntimeError("boom"))

    result = asyncio.run(controller.fetch_roster())

    assert result.error_code == "INTERNAL_ERROR"
    assert controller.state.loading is False


def test_fetch_roster_sets_loading_while_in_flight():
    controller = _controller(["Ali"])
    seen = []

    async def observe():
        seen.append(controller.state.loading)

    controller.webhook.on_fetch = observe
    asyncio.run(controller.fetch_roster())

    assert seen == [True]
    assert controller.state.loading is False


def test_overlapping_fetch_is_rejected():
    controller = _controller(["Ali"])
    inner = []

    async def fetch_again():
        inner.append(await controller.fetch_roster())

    controller.webhook.on_fetch = fetch_again
    result = asyncio.run(controller.fetch_roster())

    assert result.ok
    assert inner[0].error_code == "VALIDATION_ERROR"
    assert len(controller.webhook.selections) == 1


def test_roster_response_discarded_after_selection_change():
    controller = _loaded("Ali")
    controller.webhook.students = ["Stale"]

    async def change_selection():
        controller.select_filters("T2", "L2")

    controller.webhook.on_fetch = change_selection
    result = asyncio.run(controller.fetch_roster())

    assert result.error_code == "STALE_RESPONSE"
    assert controller.state.roster == ("Ali",)
    assert controller.state.roster_filters == FilterSelection(teacher="T1", level="L1")
    assert controller.state.loading is False


def test_submit_after_discarded_response_uses_roster_selection():
    controller = _loaded("Ali")
    controller.webhook.students = ["Stale"]

    async def change_selection():
        controller.select_filters("T2", "L2")

    controller.webhook.on_fetch = change_selection
    asyncio.run(controller.fetch_roster())
    controller.webhook.on_fetch = None
    controller.set_session_label("Morning")

    assert asyncio.run(controller.submit()).ok

    payload = controller.webhook.payloads[0]
    assert (payload.teacher, payload.level) == ("T1", "L1")
    assert [s.name for s in payload.students] == ["Ali"]


def test_rejected_fetch_keeps_selection_and_in_flight_response():
    controller = _loaded("Ali")
    controller.webhook.students = ["Sara", "Omar"]
    inner = []

    async def load_other_class():
        inner.append(await controller.fetch_roster(FilterSelection(teacher="T2", level="L2")))

    controller.webhook.on_fetch = load_other_class
    result = asyncio.run(controller.fetch_roster())

    assert inner[0].error_code == "VALIDATION_ERROR"
    assert result.ok
    assert controller.state.filters == FilterSelection(teacher="T1", level="L1")
    assert controller.state.roster == ("Sara", "Omar")
    assert controller.state.last_error is None

    controller.webhook.on_fetch = None
    controller.set_session_label("Morning")
    asyncio.run(controller.submit())

    payload = controller.webhook.payloads[0]
    assert (payload.teacher, payload.level) == ("T1", "L1")
    assert [s.name for s in payload.students] == ["Sara", "Omar"]


def test_fetch_roster_applies_given_selection():
    controller = _loaded("Ali")
    controller.webhook.students = ["Sara"]

    result = asyncio.run(controller.fetch_roster(FilterSelection(teacher="T2", level="L2")))

    assert result.ok
    assert controller.webhook.selections[-1] == FilterSelection(teacher="T2", level="L2")
    assert controller.state.filters == FilterSelection(teacher="T2", level="L2")
    assert controller.state.roster_filters == FilterSelection(teacher="T2", level="L2")


def test_fetch_roster_rejected_selection_is_not_applied():
    controller = _loaded("Ali")

    result = asyncio.run(controller.fetch_roster(FilterSelection(teacher="T2")))

    assert result.error_code == "VALIDATION_ERROR"
    assert controller.state.filters == FilterSelection(teacher="T1", level="L1")
    assert len(controller.webhook.selections) == 1


def test_unexpected_error_after_selection_change_is_discarded():
    controller = _loaded("Ali")
    controller.webhook.error = RuntimeError("boom")

    async def change_selection():
        controller.select_filters("T2", "L2")

    controller.webhook.on_fetch = change_selection
    result = asyncio.run(controller.fetch_roster())

    assert result.error_code == "STALE_RESPONSE"
    assert controller.state.last_error is None
    assert controller.state.roster == ("Ali",)


def test_fetch_clears_previous_submission_message():
    controller = _loaded("Ali")
    controller.set_session_label("Morning")
    asyncio.run(controller.submit())
    assert controller.state.last_submission == "Saved"

    asyncio.run(controller.fetch_roster())

    assert controller.state.last_submission is None


def test_fetch_filter_options():
    controller = _controller()

    result = asyncio.run(controller.fetch_filter_options())

    assert result.ok
    assert controller.state.options.teachers == ["T1", "T2"]


def test_fetch_filter_options_failure_keeps_previous_options():
    controller = _controller()
    asyncio.run(controller.fetch_filter_options())
    controller.webhook.filters_error = ParseError("Unexpected response while loading filters")

    result = asyncio.run(controller.fetch_filter_options())

    assert result.error_code == "PARSE_ERROR"
    assert controller.state.options.levels == ["L1", "L2"]
    assert controller.state.last_error == "Unexpected response while loading filters"


def test_cycle_and_unknown_student():
    controller = _loaded("Ali")

    assert controller.cycle("Ali").ok
    assert controller.state.attendance["Ali"] == AttendanceStatus.ABSENT

    result = controller.cycle("Nobody")
    assert result.error_code == "VALIDATION_ERROR"


def test_search_term_filters_snapshot():
    controller = _loaded("Alice", "Sara", "Khalid")
    controller.set_search_term("AL")

    snap = controller.snapshot()

    assert [s["name"] for s in snap["students"]] == ["Alice", "Khalid"]
    assert snap["visible"] == 2
    assert snap["total"] == 3
    assert controller.state.roster == ("Alice", "Sara", "Khalid")


def test_clear_all_resets_visible_only():
    controller = _loaded("Alice", "Sara")
    controller.cycle("Alice")
    controller.cycle("Sara")
    controller.set_search_term("sara")

    controller.clear_all()

    assert controller.state.attendance["Sara"] == AttendanceStatus.PRESENT
    assert controller.state.attendance["Alice"] == AttendanceStatus.ABSENT


def test_submit_sends_counts_and_clears_session():
    controller = _loaded("Ali", "Sara", "Omar")
    controller.cycle("Sara")
    controller.set_session_label("  Morning  ")

    result = asyncio.run(controller.submit())

    assert result.ok
    assert result.message == "Saved"
    payload = controller.webhook.payloads[0]
    assert payload.session == "Morning"
    assert payload.total_students == 3
    assert (payload.present_count, payload.absent_count, payload.late_count) == (2, 1, 0)
    assert controller.state.session_label == ""
    assert controller.state.last_submission == "Saved"
    assert controller.state.submitting is False


@pytest.mark.parametrize("label", ["", "   "])
def test_submit_requires_session_label(label):
    controller = _loaded("Ali")
    controller.set_session_label(label)

    result = asyncio.run(controller.submit())

    assert result.error_code == "VALIDATION_ERROR"
    assert controller.webhook.payloads == []


def test_submit_requires_visible_students():
    controller = _loaded("Ali")
    controller.set_session_label("Morning")
    controller.set_search_term("zzz")

    result = asyncio.run(controller.submit())

    assert result.error_code == "VALIDATION_ERROR"
    assert controller.webhook.payloads == []


def test_submit_failure_keeps_session_label():
    controller = _loaded("Ali")
    controller.set_session_label("Morning")
    controller.webhook.submit_error = SubmissionError("Session already recorded", status=400)

    result = asyncio.run(controller.submit())

    assert not result.ok
    assert result.message == "Session already recorded"
    assert controller.state.session_label == "Morning"
    assert controller.state.last_error == "Session already recorded"
    assert controller.state.submitting is False


def test_overlapping_submit_is_rejected():
    controller = _loaded("Ali")
    controller.set_session_label("Morning")
    inner = []

    async def submit_again():
        inner.append(await controller.submit())

    controller.webhook.on_submit = submit_again
    asyncio.run(controller.submit())

    assert inner[0].error_code == "VALIDATION_ERROR"
    assert len(controller.webhook.payloads) == 1
