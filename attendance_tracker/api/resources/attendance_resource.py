"""
Attendance API Resources.
"""
from flask import request
from attendance_tracker.api.resources.base import PageResource, run_async
from attendance_tracker.schemas.models import FilterSelection
from attendance_tracker.utils.response_utils import success_response, error_response, result_response
import logging

logger = logging.getLogger(__name__)


class FiltersResource(PageResource):
    def get(self):
        """Load teacher and level options from the webhook."""
        controller = self.page.attendance
        result = run_async(controller.fetch_filter_options())
        return result_response(result, controller.snapshot())


class RosterResource(PageResource):
    def post(self):
        """
        Select filters and fetch the roster.
        """
        data = request.get_json(silent=True) or {}
        controller = self.page.attendance

        selection = None
        if 'teacher' in data or 'level' in data:
            selection = FilterSelection(teacher=data.get('teacher'), level=data.get('level'))

        requested = selection or controller.state.filters
        logger.info(f"Roster requested for {requested.teacher}/{requested.level}")
        result = run_async(controller.fetch_roster(selection))
        return result_response(result, controller.snapshot())


class AttendanceResource(PageResource):
    def get(self):
        """Current page state; ?search= narrows the visible students."""
        controller = self.page.attendance
        if 'search' in request.args:
            controller.set_search_term(request.args.get('search', ''))
        return success_response("Attendance state", controller.snapshot())


class CycleResource(PageResource):
    def post(self):
        data = request.get_json(silent=True) or {}
        name = data.get('name')
        if not isinstance(name, str) or not name:
            return error_response("Student name is required", 400, code="VALIDATION_ERROR")

        controller = self.page.attendance
        return result_response(controller.cycle(name), controller.snapshot())


class ClearResource(PageResource):
    def post(self):
        controller = self.page.attendance
        return result_response(controller.clear_all(), controller.snapshot())


class SubmitResource(PageResource):
    def post(self):
        """Submit attendance for the visible students."""
        data = request.get_json(silent=True) or {}
        controller = self.page.attendance

        if 'session' in data:
            controller.set_session_label(data.get('session') or '')

        result = run_async(controller.submit())
        return result_response(result, controller.snapshot())
