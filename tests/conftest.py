import os
import tempfile
from datetime import datetime, timedelta, timezone

_tmpdir = tempfile.mkdtemp(prefix="board-api-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmpdir, 'test.db')}"
os.environ["API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

from board_api import models  # noqa: F401  registers tables on Base
from board_api.db import Base, SessionLocal, engine
from board_api.main import app
from board_api.models import JobListingORM, OrganizationORM
from board_api.schemas import ListingSummary, OrganizationSummary, PaginationDescriptor

BASE_TIME = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

ALL_PERMISSIONS = ",".join([
    "job_listings:job_listings_create",
    "job_listings:job_listings_update",
    "job_listings:job_listings_delete",
    "job_listings:job_listings_change_status",
])


@pytest.fixture(autouse=True)
def _tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def org_headers(org_id="org_acme", user_id="user_1", permissions=ALL_PERMISSIONS):
    headers = {"X-User-Id": user_id, "X-Org-Id": org_id}
    if permissions:
        headers["X-Org-Permissions"] = permissions
    return headers


def add_org(db, org_id="org_acme", name="Acme Corp"):
    org = OrganizationORM(id=org_id, name=name, image_url=None)
    db.add(org)
    db.commit()
    return org


def add_listing(db, org_id="org_acme", n=0, status="published", **overrides):
    values = dict(
        organization_id=org_id,
        title=f"Engineer {n}",
        description="Build things.",
        city="Austin",
        state_abbreviation="TX",
        status=status,
        posted_at=BASE_TIME + timedelta(hours=n) if status == "published" else None,
    )
    values.update(overrides)
    row = JobListingORM(**values)
    db.add(row)
    db.commit()
    return row


def summary(i, org_id="org_acme"):
    return ListingSummary(
        id=f"job-{i}",
        title=f"Engineer {i}",
        organization=OrganizationSummary(id=org_id, name="Acme Corp"),
    )


def summaries(start, stop):
    return [summary(i) for i in range(start, stop)]


def pagination(page, limit=10, total=25):
    return PaginationDescriptor.compute(page, limit, total)
