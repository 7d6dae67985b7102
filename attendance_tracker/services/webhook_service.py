"""
Webhook Service for fetching rosters and submitting attendance
"""
import logging
import requests
import asyncio
import time
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import List, Optional
from pydantic import ValidationError as PydanticValidationError

from attendance_tracker.config.settings import Config
from attendance_tracker.exceptions.base import NetworkError, ParseError, RemoteError, SubmissionError
from attendance_tracker.schemas.models import FilterOptions, FilterSelection, SubmissionPayload
from attendance_tracker.utils.error_handling import log_errors
from attendance_tracker.utils.string_utils import truncate_string

logger = logging.getLogger(__name__)


class WebhookService:
    """Service to interact with the external attendance webhook."""

    def __init__(self, base_url: str = None, timeout: float = None, session: requests.Session = None, max_workers: int = 4):
        self.base_url = base_url or Config.WEBHOOK_URL
        self.timeout = timeout or Config.REQUEST_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update({'Accept': 'application/json'})

        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="WebhookService")
        logger.info(f"Webhook service initialized for {self.base_url} with {max_workers} workers")

    def _get(self, params: dict) -> requests.Response:
        api_start = time.time()
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Error calling webhook (action={params.get('action')}): {e}")
            raise NetworkError(f"Network error: {e}")

        logger.info(f"Webhook Response Time: {time.time() - api_start:.2f}s, Status: {response.status_code}")
        return response

    @staticmethod
    def _status_text(response: requests.Response) -> str:
        return f"{response.status_code} {response.reason or ''}".strip()

    @staticmethod
    def _failure_text(response: requests.Response) -> str:
        """Extract a readable failure message from a rejected response."""
        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict):
            for key in ("message", "error"):
                if data.get(key):
                    return str(data[key])
        text = (response.text or "").strip()
        return text or WebhookService._status_text(response)

    @log_errors
    def get_filters(self) -> FilterOptions:
        """Fetch the teacher and level option lists."""
        response = self._get({"action": "get_filters"})

        if not response.ok:
            body = truncate_string(response.text or "", 200)
            raise NetworkError(f"Failed to fetch filters: {self._status_text(response)} {body}".strip(), status=response.status_code)

        try:
            options = FilterOptions.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            logger.error(f"Unexpected filter options body: {e}")
            raise ParseError("Unexpected response while loading filters")

        logger.info(f"Fetched {len(options.teachers)} teachers and {len(options.levels)} levels")
        return options

    @log_errors
    def get_students(self, selection: FilterSelection) -> List[str]:
        """
        Fetch the roster for a filter selection.

        A body that is not an array, or whose first element has no students
        list, yields an empty roster rather than an error.
        """
        params = {"action": "get_students", **selection.as_query()}
        response = self._get(params)

        if not response.ok:
            body = truncate_string(response.text or "", 200)
            raise NetworkError(f"Failed to fetch students: {self._status_text(response)} {body}".strip(), status=response.status_code)

        try:
            data = response.json()
        except ValueError:
            logger.warning("Roster response is not JSON, treating as zero students")
            return []

        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            logger.warning(f"Roster response has unexpected shape: {truncate_string(str(data), 200)}")
            return []

        first = data[0]
        if "error" in first:
            raise RemoteError(str(first["error"] or "") or "The webhook reported an error")

        students = first.get("students")
        if not isinstance(students, list):
            logger.warning("Roster response has no students list, treating as zero students")
            return []

        names = [s for s in students if isinstance(s, str)]
        if len(names) != len(students):
            logger.warning(f"Skipped {len(students) - len(names)} roster entries that are not names")
        logger.info(f"SUCCESS: Fetched {len(names)} students for {selection.teacher}/{selection.level}")
        return names

    @log_errors
    def submit_attendance(self, payload: SubmissionPayload) -> str:
        """POST the attendance payload; returns the confirmation text."""
        try:
            response = self.session.post(self.base_url, json=payload.to_body(), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Error sending attendance to webhook: {e}")
            raise NetworkError(f"Network error: {e}")

        if not response.ok:
            message = self._failure_text(response)
            logger.error(f"Failed to send attendance data. Status: {response.status_code}, Response: {truncate_string(response.text or '', 200)}")
            raise SubmissionError(message, status=response.status_code)

        confirmation: Optional[str] = None
        try:
            data = response.json()
            if isinstance(data, dict) and data.get("message"):
                confirmation = str(data["message"])
        except ValueError:
            # Acknowledgement body is optional
            logger.debug("Submission acknowledged without a JSON body")

        logger.info(f"Successfully sent attendance for session '{payload.session}' ({payload.total_students} students)")
        return confirmation or f"Attendance for '{payload.session}' submitted successfully"

    async def get_filters_async(self) -> FilterOptions:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, self.get_filters)

    async def get_students_async(self, selection: FilterSelection) -> List[str]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, partial(self.get_students, selection))

    async def submit_attendance_async(self, payload: SubmissionPayload) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, partial(self.submit_attendance, payload))

    def cleanup(self):
        """Cleanup thread pool and HTTP session."""
        if hasattr(self, 'executor'):
            self.executor.shutdown(wait=True)
        self.session.close()
        logger.info("Webhook service shut down")
