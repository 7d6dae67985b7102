"""
AI Search API Resources.
"""
from flask import request
from attendance_tracker.api.resources.base import PageResource, run_async
from attendance_tracker.utils.response_utils import success_response, result_response


class SearchResource(PageResource):
    def get(self):
        return success_response("Search state", self.page.search.snapshot())

    def post(self):
        data = request.get_json(silent=True) or {}
        controller = self.page.search
        result = run_async(controller.search(str(data.get('query') or '')))
        return result_response(result, controller.snapshot())


class SearchRefreshResource(PageResource):
    def post(self):
        controller = self.page.search
        result = run_async(controller.refresh())
        return result_response(result, controller.snapshot())


class SearchClearResource(PageResource):
    def post(self):
        controller = self.page.search
        controller.clear()
        return success_response("Search cleared", controller.snapshot())
