from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..config import settings
from ..deps import get_db, require_api_key
from ..listings import get_paginated_job_listings, get_published_job_listing, query_spec_from_params
from ..models import JobListingORM
from ..schemas import JobListingOut, PageResult

router = APIRouter(prefix="/job-listings", tags=["job listings"])


@router.get("", response_model=PageResult)
def list_job_listings(
    request: Request,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    """One page of published listings.

    Every other query param is a filter (`title`, `city`, `state`, `experience`,
    `locationRequirement`, `type`, `jobIds`); repeat a key to match any of
    several values.
    """
    query_spec = query_spec_from_params(request.query_params.multi_items())
    try:
        return get_paginated_job_listings(db, query_spec, page, limit)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/stats", dependencies=[Depends(require_api_key)])
def stats(db: Session = Depends(get_db)):
    rows = (
        db.query(
            JobListingORM.status.label("status"),
            func.count().label("total"),
            func.max(JobListingORM.posted_at).label("last_posted"),
        )
        .group_by(JobListingORM.status)
        .all()
    )
    return [
        {
            "status": r.status,
            "count": int(r.total),
            "last_posted_at": r.last_posted,
        }
        for r in rows
    ]


@router.get("/{job_listing_id}", response_model=JobListingOut)
def get_job_listing(job_listing_id: str, db: Session = Depends(get_db)):
    row = get_published_job_listing(db, job_listing_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Job listing not found")
    return row
