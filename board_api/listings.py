"""Job listing queries backing the public list views.

`get_paginated_job_listings` is the pagination data provider: given a query
specification (filter key -> one or many string values), a 1-based page number
and a page size, it returns one page of listing summaries plus pagination
metadata. Keys it does not recognise are ignored, so callers can hand the raw
search params of a page straight through.
"""

from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload
from starlette.concurrency import run_in_threadpool

from .config import settings
from .models import JobListingORM
from .schemas import ListingSummary, PageResult, PaginationDescriptor

QuerySpec = Mapping[str, Union[str, Sequence[str]]]

# params that drive paging rather than filtering
PAGING_KEYS = ("page", "limit")


def _values(query_spec: QuerySpec, key: str) -> List[str]:
    raw = query_spec.get(key)
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = [raw]
    return [v.strip() for v in raw if v and v.strip()]


def query_spec_from_params(items: Iterable[Tuple[str, str]]) -> dict[str, Union[str, List[str]]]:
    """Fold repeated query params into a query specification.

    Single occurrences stay plain strings, repeated keys become lists.
    """
    spec: dict[str, Union[str, List[str]]] = {}
    for key, value in items:
        if key in PAGING_KEYS:
            continue
        existing = spec.get(key)
        if existing is None:
            spec[key] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            spec[key] = [existing, value]
    return spec


def _apply_filters(query, query_spec: QuerySpec):
    titles = _values(query_spec, "title")
    if titles:
        query = query.filter(or_(*[JobListingORM.title.ilike(f"%{t}%") for t in titles]))

    cities = _values(query_spec, "city")
    if cities:
        query = query.filter(or_(*[JobListingORM.city.ilike(f"%{c}%") for c in cities]))

    states = _values(query_spec, "state")
    if states:
        query = query.filter(func.upper(JobListingORM.state_abbreviation).in_([s.upper() for s in states]))

    experience = _values(query_spec, "experience")
    if experience:
        query = query.filter(JobListingORM.experience_level.in_(experience))

    location_requirements = _values(query_spec, "locationRequirement")
    if location_requirements:
        query = query.filter(JobListingORM.location_requirement.in_(location_requirements))

    types = _values(query_spec, "type")
    if types:
        query = query.filter(JobListingORM.type.in_(types))

    job_ids = _values(query_spec, "jobIds")
    if job_ids:
        query = query.filter(JobListingORM.id.in_(job_ids))

    return query


def get_paginated_job_listings(
    db: Session,
    query_spec: QuerySpec,
    page: int = 1,
    page_size: Optional[int] = None,
) -> PageResult:
    if page_size is None:
        page_size = settings.DEFAULT_PAGE_SIZE
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if page_size <= 0:
        raise ValueError(f"page_size must be > 0, got {page_size}")
    page_size = min(page_size, settings.MAX_PAGE_SIZE)

    base = _apply_filters(
        db.query(JobListingORM).filter(JobListingORM.status == "published"),
        query_spec,
    )
    total = base.count()

    rows = (
        base.options(joinedload(JobListingORM.organization))
        .order_by(
            JobListingORM.is_featured.desc(),
            JobListingORM.posted_at.desc(),
            JobListingORM.id,
        )
        .limit(page_size)
        .offset((page - 1) * page_size)
        .all()
    )
    return PageResult(
        data=[ListingSummary.model_validate(r) for r in rows],
        pagination=PaginationDescriptor.compute(page, page_size, total),
    )


def get_published_job_listing(db: Session, job_listing_id: str) -> Optional[JobListingORM]:
    return (
        db.query(JobListingORM)
        .options(joinedload(JobListingORM.organization))
        .filter(JobListingORM.id == job_listing_id, JobListingORM.status == "published")
        .first()
    )


def get_most_recent_job_listing(db: Session, organization_id: str) -> Optional[JobListingORM]:
    return (
        db.query(JobListingORM)
        .filter(JobListingORM.organization_id == organization_id)
        .order_by(JobListingORM.created_at.desc())
        .first()
    )


def get_published_listing_ids(db: Session):
    """(id, updated_at) pairs for every published listing."""
    return (
        db.query(JobListingORM.id, JobListingORM.updated_at)
        .filter(JobListingORM.status == "published")
        .order_by(JobListingORM.updated_at.desc())
        .all()
    )


class SessionPageProvider:
    """Adapts `get_paginated_job_listings` to the async provider signature.

    Each call opens its own session and runs the query off the event loop.
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def _fetch(self, query_spec: QuerySpec, page: int, page_size: int) -> PageResult:
        db = self.session_factory()
        try:
            return get_paginated_job_listings(db, query_spec, page, page_size)
        finally:
            db.close()

    async def __call__(self, query_spec: QuerySpec, page: int, page_size: int) -> PageResult:
        return await run_in_threadpool(self._fetch, query_spec, page, page_size)
