from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from ..deps import OrgContext, get_current_organization, get_db, require_api_key, require_org_permission
from ..listings import get_most_recent_job_listing
from ..logging_config import get_logger
from ..models import JobListingORM, OrganizationORM
from ..schemas import (
    JobListingCreate,
    JobListingOut,
    JobListingStatusChange,
    JobListingUpdate,
    OrganizationSummary,
    OrganizationUpsert,
)

router = APIRouter(prefix="/employer", tags=["employer"])
logger = get_logger(__name__)

# columns that cannot be cleared through PATCH
_NOT_NULL = {"title", "description", "is_featured", "location_requirement", "experience_level", "type"}


def _get_org_listing(db: Session, org: OrgContext, job_listing_id: str) -> JobListingORM:
    row = (
        db.query(JobListingORM)
        .filter(JobListingORM.id == job_listing_id, JobListingORM.organization_id == org.org_id)
        .first()
    )
    if row is None:
        raise HTTPException(status_code=404, detail="Job listing not found")
    return row


@router.put("/organization", response_model=OrganizationSummary, dependencies=[Depends(require_api_key)])
def upsert_organization(
    payload: OrganizationUpsert,
    org: OrgContext = Depends(get_current_organization),
    db: Session = Depends(get_db),
):
    """Mirror the auth provider's organization record locally."""
    row = db.get(OrganizationORM, org.org_id)
    if row is None:
        row = OrganizationORM(id=org.org_id, name=payload.name, image_url=payload.image_url)
        db.add(row)
    else:
        row.name = payload.name
        row.image_url = payload.image_url
    db.commit()
    db.refresh(row)
    return row


@router.get("")
def employer_home(org: OrgContext = Depends(get_current_organization), db: Session = Depends(get_db)):
    """Send the employer to their most recent listing, or to the new-listing form."""
    latest = get_most_recent_job_listing(db, org.org_id)
    if latest is None:
        return RedirectResponse("/employer/job-listings/new", status_code=307)
    return RedirectResponse(f"/employer/job-listings/{latest.id}", status_code=307)


@router.get("/job-listings", response_model=list[JobListingOut])
def list_org_job_listings(org: OrgContext = Depends(get_current_organization), db: Session = Depends(get_db)):
    return (
        db.query(JobListingORM)
        .filter(JobListingORM.organization_id == org.org_id)
        .order_by(JobListingORM.created_at.desc())
        .all()
    )


@router.get("/job-listings/{job_listing_id}", response_model=JobListingOut)
def get_org_job_listing(
    job_listing_id: str,
    org: OrgContext = Depends(get_current_organization),
    db: Session = Depends(get_db),
):
    return _get_org_listing(db, org, job_listing_id)


@router.post("/job-listings", response_model=JobListingOut, status_code=201)
def create_job_listing(
    payload: JobListingCreate,
    org: OrgContext = Depends(require_org_permission("job_listings:job_listings_create")),
    db: Session = Depends(get_db),
):
    if db.get(OrganizationORM, org.org_id) is None:
        raise HTTPException(status_code=409, detail="Organization is not registered")
    row = JobListingORM(organization_id=org.org_id, status="draft", **payload.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("job listing created id=%s org=%s by=%s", row.id, org.org_id, org.user_id)
    return row


@router.patch("/job-listings/{job_listing_id}", response_model=JobListingOut)
def update_job_listing(
    job_listing_id: str,
    payload: JobListingUpdate,
    org: OrgContext = Depends(require_org_permission("job_listings:job_listings_update")),
    db: Session = Depends(get_db),
):
    row = _get_org_listing(db, org, job_listing_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is None and key in _NOT_NULL:
            continue
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return row


@router.delete("/job-listings/{job_listing_id}", status_code=204)
def delete_job_listing(
    job_listing_id: str,
    org: OrgContext = Depends(require_org_permission("job_listings:job_listings_delete")),
    db: Session = Depends(get_db),
):
    row = _get_org_listing(db, org, job_listing_id)
    db.delete(row)
    db.commit()
    logger.info("job listing deleted id=%s org=%s by=%s", job_listing_id, org.org_id, org.user_id)
    return Response(status_code=204)


@router.post("/job-listings/{job_listing_id}/status", response_model=JobListingOut)
def change_job_listing_status(
    job_listing_id: str,
    payload: JobListingStatusChange,
    org: OrgContext = Depends(require_org_permission("job_listings:job_listings_change_status")),
    db: Session = Depends(get_db),
):
    row = _get_org_listing(db, org, job_listing_id)
    row.status = payload.status
    if payload.status == "published" and row.posted_at is None:
        row.posted_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(row)
    logger.info("job listing status id=%s status=%s", row.id, row.status)
    return row
