"""
Shared helpers for page-scoped resources.
"""
import asyncio
import uuid
from flask import session
from flask_restful import Resource
from attendance_tracker.utils.page_registry import PageControllers, PageRegistry

PAGE_KEY = 'page_id'


def current_page_id() -> str:
    """Page id stored in the session cookie, created on first use."""
    page_id = session.get(PAGE_KEY)
    if not page_id:
        page_id = uuid.uuid4().hex
        session[PAGE_KEY] = page_id
    return page_id


def run_async(coro):
    return asyncio.run(coro)


class PageResource(Resource):
    """Resource bound to the controllers of the calling page."""

    def __init__(self, registry: PageRegistry):
        self.registry = registry

    @property
    def page(self) -> PageControllers:
        return self.registry.get(current_page_id())
