from __future__ import annotations

from typing import List, Optional

import httpx

from ..config import settings
from ..logging_config import get_logger

logger = get_logger(__name__)


class AiSearchError(RuntimeError):
    pass


class AiSearchClient:
    """Thin client for the external AI search backend.

    The backend takes a free-text query and answers with the ids of matching
    job listings, best match first: `{"jobIds": ["...", ...]}`.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url or settings.AI_SEARCH_URL
        self.timeout = timeout if timeout is not None else settings.AI_SEARCH_TIMEOUT_SECONDS
        # retries cover connection errors only; HTTP error statuses are not retried
        self.transport = transport or httpx.HTTPTransport(retries=2)

    def search(self, query: str) -> List[str]:
        headers = {"User-Agent": "AIJobsBoard/0.1 httpx", "Accept": "application/json"}
        try:
            with httpx.Client(transport=self.transport, timeout=self.timeout, headers=headers) as client:
                resp = client.post(self.url, json={"query": query})
                resp.raise_for_status()
                payload = resp.json()
        except httpx.HTTPError as e:
            raise AiSearchError(f"AI search request failed: {e!s}") from e
        except ValueError as e:
            raise AiSearchError(f"AI search returned invalid JSON: {e!s}") from e

        ids = payload.get("jobIds") if isinstance(payload, dict) else None
        if not isinstance(ids, list):
            raise AiSearchError("AI search response is missing 'jobIds'")
        job_ids = [str(i) for i in ids if i]
        logger.info("ai search matched %d listings", len(job_ids))
        return job_ids
