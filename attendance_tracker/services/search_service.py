"""
AI Search Service
Answers free-text questions with a grounded generative model.
"""
import asyncio
import logging
import threading
from functools import partial
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types

from attendance_tracker.config.settings import Config
from attendance_tracker.exceptions.base import AppError, ExternalServiceError, ValidationError
from attendance_tracker.schemas.models import GroundingSource, OperationResult, SearchResult
from attendance_tracker.utils.error_handling import log_errors

logger = logging.getLogger(__name__)

SERVICE_NAME = "Gemini"


def extract_sources(response) -> List[GroundingSource]:
    """Web sources from the first candidate's grounding chunks."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []

    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is None or not getattr(web, "uri", None):
            continue
        sources.append(GroundingSource(uri=web.uri, title=getattr(web, "title", None) or web.uri))
    return sources


class SearchService:
    """Thin client over the google-genai models API with Google Search grounding."""

    def __init__(self, api_key: str = None, model: str = None, client=None):
        self.api_key = api_key or Config.GEMINI_API_KEY
        self.model = model or Config.SEARCH_MODEL
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise ExternalServiceError("API key is not configured", SERVICE_NAME)
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    @log_errors
    def search(self, query: str) -> SearchResult:
        query = (query or "").strip()
        if not query:
            raise ValidationError("Query is required")

        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=query,
                config=types.GenerateContentConfig(
                    tools=[types.Tool(google_search=types.GoogleSearch())],
                ),
            )
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Search request failed: {e}")
            raise ExternalServiceError(str(e), SERVICE_NAME)

        sources = extract_sources(response)
        logger.info(f"Search answered with {len(sources)} sources")
        return SearchResult(text=response.text or "", sources=sources)


class SearchController:
    """Page state for the AI search view."""

    def __init__(self, service: SearchService):
        self.service = service
        self.query = ""
        self.loading = False
        self.result: Optional[SearchResult] = None
        self.error: Optional[str] = None
        self._lock = threading.Lock()

    async def search(self, query: str = None) -> OperationResult:
        """Run query, or the current one when None; a rejected call keeps the shown query."""
        with self._lock:
            if self.loading:
                return OperationResult(ok=False, message="A search is already running", error_code="VALIDATION_ERROR")
            query = self.query if query is None else query
            if not query.strip():
                return OperationResult(ok=False, message="Query is required", error_code="VALIDATION_ERROR")

            self.query = query
            self.loading = True
            self.result = None
            self.error = None

        try:
            loop = asyncio.get_running_loop()
            self.result = await loop.run_in_executor(None, partial(self.service.search, query))
        except AppError as e:
            self.error = e.message
            return OperationResult(ok=False, message=e.message, error_code=e.code)
        except Exception as e:
            logger.error(f"Unexpected search error: {e}", exc_info=True)
            self.error = "An unknown error occurred."
            return OperationResult(ok=False, message=self.error, error_code="INTERNAL_ERROR")
        finally:
            self.loading = False

        return OperationResult(ok=True, message="Search complete")

    async def refresh(self) -> OperationResult:
        """Re-run the current query unless one is in flight."""
        return await self.search()

    def clear(self) -> None:
        self.query = ""
        self.result = None
        self.error = None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "loading": self.loading,
            "result": self.result.model_dump() if self.result else None,
            "error": self.error,
        }
