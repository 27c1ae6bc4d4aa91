"""Incremental ("infinite scroll") listing loader.

The loader starts from a seed page rendered by the server, then pulls further
pages from a provider each time its sentinel comes into view. At most one
request is outstanding per loader; a failed request leaves everything already
loaded untouched and waits for a manual retry.

Every request is tagged with the generation it was issued under. Re-seeding the
loader (a new query specification) starts a new generation, and responses that
belong to an older one are dropped instead of being appended to the new view.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Mapping, Optional, Sequence, Tuple, Union

from .logging_config import get_logger
from .schemas import ListingSummary, PageResult, PaginationDescriptor
from .sentinel import VisibilitySentinel

logger = get_logger(__name__)

QuerySpec = Mapping[str, Union[str, Sequence[str]]]
PageProvider = Callable[[QuerySpec, int, int], Awaitable[PageResult]]

EMPTY_MESSAGE = "No job listings found"
LOAD_MORE_ERROR = "Failed to load more job listings"
END_MESSAGE = "You've reached the end of the job listings"


class LoaderStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERRORED = "errored"


class ViewStatus(str, Enum):
    EMPTY = "empty"
    HAS_MORE = "has_more"
    LOADING = "loading"
    ERRORED = "errored"
    EXHAUSTED = "exhausted"


@dataclass
class LoaderState:
    items: List[ListingSummary]
    pagination: PaginationDescriptor
    in_flight: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class LoaderView:
    status: ViewStatus
    items: Tuple[ListingSummary, ...]
    message: Optional[str] = None
    show_retry: bool = False
    footer: Optional[str] = None
    observing: bool = field(default=False, compare=False)


def _freeze(query_spec: QuerySpec) -> dict:
    return {k: v if isinstance(v, str) else tuple(v) for k, v in query_spec.items()}


class IncrementalListingLoader:
    def __init__(
        self,
        provider: PageProvider,
        query_spec: QuerySpec,
        seed_items: Sequence[ListingSummary],
        seed_pagination: PaginationDescriptor,
        sentinel: Optional[VisibilitySentinel] = None,
    ):
        self.provider = provider
        self.sentinel = sentinel or VisibilitySentinel()
        self._generation = 0
        self._mounted = False
        self.initialize(query_spec, seed_items, seed_pagination)

    def initialize(
        self,
        query_spec: QuerySpec,
        seed_items: Sequence[ListingSummary],
        seed_pagination: PaginationDescriptor,
    ) -> None:
        """Discard accumulated state and start over from a new seed page."""
        self.query_spec = _freeze(query_spec)
        self.state = LoaderState(items=list(seed_items), pagination=seed_pagination)
        self._generation += 1
        if self._mounted:
            self._attach()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def status(self) -> LoaderStatus:
        if self.state.in_flight:
            return LoaderStatus.LOADING
        if self.state.error:
            return LoaderStatus.ERRORED
        return LoaderStatus.IDLE

    def mount(self) -> None:
        self._mounted = True
        self._attach()

    def unmount(self) -> None:
        self._mounted = False
        self.sentinel.disconnect()

    def _attach(self) -> None:
        self.sentinel.disconnect()
        # an empty result set renders the terminal empty state, nothing to observe
        if self.state.items:
            self.sentinel.observe(self.on_sentinel_visible)

    async def request_next_page(self) -> bool:
        """Fetch and append the next page. Returns True when items were appended."""
        state = self.state
        if state.in_flight or not state.pagination.has_next_page:
            return False

        generation = self._generation
        page = state.pagination.page + 1
        limit = state.pagination.limit
        state.in_flight = True
        state.error = None
        try:
            result = await self.provider(self.query_spec, page, limit)
        except Exception as e:
            if generation != self._generation:
                logger.info("dropping failed page=%d from superseded generation=%d", page, generation)
                return False
            state.error = LOAD_MORE_ERROR
            logger.exception("Error loading more job listings (page=%d): %s", page, e)
            return False
        finally:
            # after a reset `state` is the discarded object, the live one is untouched
            state.in_flight = False

        if generation != self._generation:
            logger.info("dropping page=%d from superseded generation=%d", page, generation)
            return False

        state.items.extend(result.data)
        state.pagination = result.pagination
        logger.debug(
            "loaded page=%d items=%d accumulated=%d has_next=%s",
            result.pagination.page, len(result.data), len(state.items), result.pagination.has_next_page,
        )
        return True

    async def on_sentinel_visible(self) -> None:
        if self.state.in_flight or not self.state.pagination.has_next_page:
            return
        await self.request_next_page()

    async def retry(self) -> bool:
        return await self.request_next_page()

    def view(self) -> LoaderView:
        state = self.state
        items = tuple(state.items)
        observing = self.sentinel.observing
        if not items:
            return LoaderView(ViewStatus.EMPTY, items, message=EMPTY_MESSAGE, observing=observing)
        if state.in_flight:
            return LoaderView(ViewStatus.LOADING, items, observing=observing)
        if state.error:
            return LoaderView(ViewStatus.ERRORED, items, message=state.error, show_retry=True, observing=observing)
        if state.pagination.has_next_page:
            return LoaderView(ViewStatus.HAS_MORE, items, observing=observing)
        return LoaderView(
            ViewStatus.EXHAUSTED,
            items,
            message=END_MESSAGE,
            footer=f"Showing {len(items)} of {state.pagination.total} jobs",
            observing=observing,
        )
