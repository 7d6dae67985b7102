from __future__ import annotations

from types import SimpleNamespace
from typing import Callable, List, Optional

from attendance_tracker.schemas.models import FilterOptions, FilterSelection, SubmissionPayload


class FakeWebhook:
    """In-memory stand-in for WebhookService's async surface."""

    def __init__(self, students: Optional[List[str]] = None, error: Exception = None):
        self.students = students or []
        self.error = error
        self.filters = FilterOptions(teachers=["T1", "T2"], levels=["L1", "L2"])
        self.filters_error: Optional[Exception] = None
        self.submit_error: Optional[Exception] = None
        self.ack = "Saved"
        self.on_fetch: Optional[Callable] = None
        self.on_submit: Optional[Callable] = None
        self.selections: List[FilterSelection] = []
        self.payloads: List[SubmissionPayload] = []

    async def get_filters_async(self) -> FilterOptions:
        if self.filters_error:
            raise self.filters_error
        return self.filters

    async def get_students_async(self, selection: FilterSelection) -> List[str]:
        self.selections.append(selection)
        if self.on_fetch:
            await self.on_fetch()
        if self.error:
            raise self.error
        return list(self.students)

    async def submit_attendance_async(self, payload: SubmissionPayload) -> str:
        self.payloads.append(payload)
        if self.on_submit:
            await self.on_submit()
        if self.submit_error:
            raise self.submit_error
        return self.ack


def search_response(text="Answer", chunks=None):
    metadata = SimpleNamespace(grounding_chunks=chunks)
    return SimpleNamespace(text=text, candidates=[SimpleNamespace(grounding_metadata=metadata)])


def web_chunk(uri, title=None):
    return SimpleNamespace(web=SimpleNamespace(uri=uri, title=title))


class FakeModels:
    """Stands in for genai.Client().models."""

    def __init__(self, response=None, error=None):
        self.response = response or search_response()
        self.error = error
        self.on_call: Optional[Callable] = None
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.on_call:
            self.on_call()
        if self.error:
            raise self.error
        return self.response
