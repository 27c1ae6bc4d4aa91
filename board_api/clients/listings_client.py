from __future__ import annotations

from typing import Mapping, Optional, Sequence, Union

import httpx

from ..schemas import PageResult

QuerySpec = Mapping[str, Union[str, Sequence[str]]]


class ListingsClient:
    """Fetches listing pages from a running board API over HTTP.

    An instance is a valid page provider for `IncrementalListingLoader`:
    `await client(query_spec, page, page_size)`.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _params(self, query_spec: QuerySpec, page: int, page_size: int) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        for key, value in query_spec.items():
            if isinstance(value, str):
                params.append((key, value))
            else:
                params.extend((key, v) for v in value)
        params.append(("page", str(page)))
        params.append(("limit", str(page_size)))
        return params

    async def fetch_page(self, query_spec: QuerySpec, page: int, page_size: int) -> PageResult:
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as c:
            r = await c.get("/job-listings", params=self._params(query_spec, page, page_size))
            r.raise_for_status()
            return PageResult.model_validate(r.json())

    async def __call__(self, query_spec: QuerySpec, page: int, page_size: int) -> PageResult:
        return await self.fetch_page(query_spec, page, page_size)
