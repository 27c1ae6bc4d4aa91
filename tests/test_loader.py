import asyncio

from board_api.loader import (
    EMPTY_MESSAGE,
    END_MESSAGE,
    LOAD_MORE_ERROR,
    IncrementalListingLoader,
    LoaderStatus,
    ViewStatus,
)
from board_api.schemas import PageResult
from board_api.sentinel import VisibilitySentinel

from conftest import pagination, summaries


class FakeProvider:
    """Serves pages out of a dict keyed by page number and records every call."""

    def __init__(self, pages=None, fail=False, gate=None):
        self.pages = pages or {}
        self.fail = fail
        self.gate = gate
        self.calls = []

    async def __call__(self, query_spec, page, page_size):
        self.calls.append((dict(query_spec), page, page_size))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("backend unavailable")
        return self.pages[page]


def three_page_provider(**kwargs):
    return FakeProvider(
        pages={
            2: PageResult(data=summaries(10, 20), pagination=pagination(2)),
            3: PageResult(data=summaries(20, 25), pagination=pagination(3)),
        },
        **kwargs,
    )


def make_loader(provider, query=None, seed=None, seed_pagination=None, sentinel=None):
    return IncrementalListingLoader(
        provider,
        query if query is not None else {"title": "engineer"},
        summaries(0, 10) if seed is None else seed,
        seed_pagination or pagination(1),
        sentinel=sentinel,
    )


def test_loads_pages_until_exhausted():
    provider = three_page_provider()
    loader = make_loader(provider)

    async def run():
        assert await loader.request_next_page() is True
        assert len(loader.state.items) == 20
        assert loader.view().status == ViewStatus.HAS_MORE

        assert await loader.request_next_page() is True
        assert len(loader.state.items) == 25
        assert loader.state.pagination.has_next_page is False

        # exhausted: nothing more is requested
        assert await loader.request_next_page() is False
        await loader.on_sentinel_visible()

    asyncio.run(run())

    assert [c[1:] for c in provider.calls] == [(2, 10), (3, 10)]
    assert [i.id for i in loader.state.items] == [f"job-{i}" for i in range(25)]
    view = loader.view()
    assert view.status == ViewStatus.EXHAUSTED
    assert view.message == END_MESSAGE
    assert view.footer == "Showing 25 of 25 jobs"


def test_query_spec_passed_through_unchanged():
    provider = three_page_provider()
    loader = make_loader(provider, query={"title": "engineer", "type": ["full-time", "contract"], "utm": "x"})

    asyncio.run(loader.request_next_page())

    assert provider.calls[0][0] == {"title": "engineer", "type": ("full-time", "contract"), "utm": "x"}


def test_no_provider_call_without_next_page():
    provider = FakeProvider()
    loader = make_loader(provider, seed=summaries(0, 5), seed_pagination=pagination(1, total=5))

    async def run():
        assert await loader.request_next_page() is False
        await loader.on_sentinel_visible()
        assert await loader.retry() is False

    asyncio.run(run())
    assert provider.calls == []
    assert loader.view().footer == "Showing 5 of 5 jobs"


def test_single_request_in_flight():
    gate = asyncio.Event()
    provider = three_page_provider(gate=gate)
    loader = make_loader(provider)

    async def run():
        first = asyncio.create_task(loader.request_next_page())
        await asyncio.sleep(0)
        assert loader.status == LoaderStatus.LOADING
        assert loader.view().status == ViewStatus.LOADING

        # rapid scroll events and retry clicks while pending
        for _ in range(5):
            await loader.on_sentinel_visible()
            assert await loader.request_next_page() is False
            assert await loader.retry() is False

        gate.set()
        assert await first is True

    asyncio.run(run())
    assert len(provider.calls) == 1
    assert loader.status == LoaderStatus.IDLE
    assert len(loader.state.items) == 20


def test_failed_fetch_keeps_loaded_items():
    provider = FakeProvider(fail=True)
    loader = make_loader(provider)
    items_before = list(loader.state.items)
    pagination_before = loader.state.pagination

    assert asyncio.run(loader.request_next_page()) is False

    assert loader.state.items == items_before
    assert loader.state.pagination is pagination_before
    assert loader.state.error == LOAD_MORE_ERROR
    assert loader.state.in_flight is False
    assert loader.status == LoaderStatus.ERRORED
    view = loader.view()
    assert view.status == ViewStatus.ERRORED
    assert view.show_retry is True
    assert view.message


def test_retry_reissues_identical_request():
    provider = three_page_provider(fail=True)
    loader = make_loader(provider)

    async def run():
        await loader.request_next_page()
        provider.fail = False
        assert await loader.retry() is True

    asyncio.run(run())
    assert provider.calls[0] == provider.calls[1]
    assert provider.calls[0][1:] == (2, 10)
    assert loader.state.error is None
    assert len(loader.state.items) == 20


def test_initialize_resets_after_error():
    loader = make_loader(FakeProvider(fail=True))
    asyncio.run(loader.request_next_page())
    assert loader.state.error

    loader.initialize({"title": "designer"}, summaries(100, 103), pagination(1, total=3))

    assert [i.id for i in loader.state.items] == ["job-100", "job-101", "job-102"]
    assert loader.state.error is None
    assert loader.query_spec == {"title": "designer"}
    assert loader.status == LoaderStatus.IDLE


def test_response_for_superseded_query_is_dropped():
    gate = asyncio.Event()
    provider = three_page_provider(gate=gate)
    loader = make_loader(provider)

    async def run():
        pending = asyncio.create_task(loader.request_next_page())
        await asyncio.sleep(0)
        loader.initialize({"title": "designer"}, summaries(100, 102), pagination(1, total=2))
        assert loader.state.in_flight is False
        gate.set()
        assert await pending is False

    asyncio.run(run())
    assert [i.id for i in loader.state.items] == ["job-100", "job-101"]
    assert loader.state.pagination.page == 1
    assert loader.state.in_flight is False


def test_failure_for_superseded_query_is_dropped():
    gate = asyncio.Event()
    provider = FakeProvider(fail=True, gate=gate)
    loader = make_loader(provider)

    async def run():
        pending = asyncio.create_task(loader.request_next_page())
        await asyncio.sleep(0)
        loader.initialize({"title": "designer"}, summaries(100, 102), pagination(1, total=2))
        gate.set()
        await pending

    asyncio.run(run())
    assert loader.state.error is None
    assert loader.view().status == ViewStatus.EXHAUSTED


def test_empty_seed_renders_empty_state_without_observing():
    sentinel = VisibilitySentinel()
    loader = make_loader(FakeProvider(), seed=[], seed_pagination=pagination(1, total=0), sentinel=sentinel)
    loader.mount()

    view = loader.view()
    assert view.status == ViewStatus.EMPTY
    assert view.message == EMPTY_MESSAGE
    assert sentinel.observing is False


def test_sentinel_triggers_loading():
    provider = three_page_provider()
    sentinel = VisibilitySentinel(threshold=0.1, root_margin=100)
    loader = make_loader(provider, sentinel=sentinel)
    loader.mount()
    assert sentinel.observing is True

    async def run():
        assert await sentinel.report(0.05) is False
        assert provider.calls == []
        assert await sentinel.report(0.1) is True
        assert len(loader.state.items) == 20
        # sentinel 60 units below the fold is within the margin
        assert await sentinel.report_position(660, 0, 0, 600) is True
        assert len(loader.state.items) == 25
        # still observing after exhaustion, but no more fetches
        assert await sentinel.report(1.0) is True

    asyncio.run(run())
    assert len(provider.calls) == 2
    assert sentinel.observing is True


def test_remount_tracks_seed_and_unmount_disconnects():
    sentinel = VisibilitySentinel()
    loader = make_loader(FakeProvider(), sentinel=sentinel)
    loader.mount()
    assert sentinel.observing

    loader.initialize({}, [], pagination(1, total=0))
    assert not sentinel.observing

    loader.initialize({}, summaries(0, 3), pagination(1, total=3))
    assert sentinel.observing

    loader.unmount()
    assert not sentinel.observing
