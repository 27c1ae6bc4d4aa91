from datetime import datetime, timezone
from xml.etree import ElementTree as ET

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from ..config import settings
from ..deps import get_db
from ..listings import get_published_listing_ids

router = APIRouter(tags=["seo"])

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"

# (path, changefreq, priority)
STATIC_PAGES = [
    ("", "daily", "1.0"),
    ("/ai-search", "weekly", "0.8"),
    ("/employer", "weekly", "0.7"),
    ("/employer/pricing", "monthly", "0.6"),
]

ROBOTS_DISALLOW = [
    "/api/",
    "/employer/job-listings/*/edit",
    "/user-settings/",
    "/_next/",
    "/admin/",
]
BLOCKED_AGENTS = ["GPTBot", "Google-Extended"]


def _base_url() -> str:
    return settings.SERVER_URL.rstrip("/")


@router.get("/robots.txt", response_class=PlainTextResponse)
def robots():
    base = _base_url()
    lines = ["User-agent: *", "Allow: /"]
    lines += [f"Disallow: {path}" for path in ROBOTS_DISALLOW]
    for agent in BLOCKED_AGENTS:
        lines += ["", f"User-agent: {agent}", "Disallow: /"]
    lines += ["", f"Host: {base}", f"Sitemap: {base}/sitemap.xml", ""]
    return "\n".join(lines)


def _add_url(urlset: ET.Element, loc: str, lastmod: str, changefreq: str, priority: str):
    url = ET.SubElement(urlset, "url")
    ET.SubElement(url, "loc").text = loc
    ET.SubElement(url, "lastmod").text = lastmod
    ET.SubElement(url, "changefreq").text = changefreq
    ET.SubElement(url, "priority").text = priority


@router.get("/sitemap.xml")
def sitemap(db: Session = Depends(get_db)):
    base = _base_url()
    now = datetime.now(timezone.utc).isoformat()
    urlset = ET.Element("urlset", xmlns=SITEMAP_NS)
    for path, changefreq, priority in STATIC_PAGES:
        _add_url(urlset, f"{base}{path}", now, changefreq, priority)
    for job_listing_id, updated_at in get_published_listing_ids(db):
        lastmod = updated_at.isoformat() if updated_at else now
        _add_url(urlset, f"{base}/job-listings/{job_listing_id}", lastmod, "weekly", "0.9")
    body = ET.tostring(urlset, encoding="utf-8", xml_declaration=True)
    return Response(content=body, media_type="application/xml")
