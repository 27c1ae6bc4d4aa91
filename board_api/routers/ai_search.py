from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException

from ..clients.ai_search import AiSearchClient, AiSearchError
from ..deps import get_current_user_id
from ..logging_config import get_logger
from ..schemas import AiSearchRequest, AiSearchResponse

router = APIRouter(prefix="/ai-search", tags=["ai search"])
logger = get_logger(__name__)


def get_ai_search_client() -> AiSearchClient:
    return AiSearchClient()


@router.post("", response_model=AiSearchResponse)
def ai_search(
    payload: AiSearchRequest,
    user_id: Optional[str] = Depends(get_current_user_id),
    client: AiSearchClient = Depends(get_ai_search_client),
):
    """Run the query through the AI backend and point the caller at the matching listings.

    The backend can take minutes; results are handed back as a `jobIds` filter
    for the regular listing view.
    """
    if user_id is None:
        raise HTTPException(status_code=401, detail="You need to create an account before using AI search")
    try:
        job_ids = client.search(payload.query)
    except AiSearchError as e:
        logger.error("ai search failed for user=%s: %s", user_id, e)
        raise HTTPException(status_code=502, detail=str(e))
    redirect = "/?" + urlencode([("jobIds", i) for i in job_ids]) if job_ids else "/"
    return AiSearchResponse(job_ids=job_ids, redirect=redirect)
