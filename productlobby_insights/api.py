"""HTTP API for campaign creator analytics"""
import logging
from contextlib import asynccontextmanager
from typing import Callable, Generator

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from productlobby_insights.auth import extract_session_token, get_current_user
from productlobby_insights.config import settings
from productlobby_insights.db import db
from productlobby_insights.models.db import User
from productlobby_insights.models.responses import (
    CamelModel, EngagementScoreData, PricingAnalysisData
)
from productlobby_insights.pricing import PricingAnalyzer
from productlobby_insights.services.campaigns import CampaignAccessError, CampaignNotFoundError
from productlobby_insights.services.engagement import EngagementService
from productlobby_insights.services.pricing import PricingService

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    if not db.initialized:
        db.init()
    yield
    db.dispose()

app = FastAPI(title="ProductLobby Insights", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.APP_URL],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

def get_db_session() -> Generator[Session, None, None]:
    with db.session() as session:
        yield session

def success_response(data: CamelModel) -> JSONResponse:
    return JSONResponse({"success": True, "data": data.to_json()})

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)

def creator_analytics(
    request: Request,
    session: Session,
    label: str,
    compute: Callable[[User], CamelModel]
) -> JSONResponse:
    """
    Run a creator-only analytics computation and wrap it in the API envelope.

    Missing session -> 401, unknown campaign -> 404, not the creator -> 403,
    anything else -> 500 with a generic message.
    """
    try:
        token = extract_session_token(request.cookies, request.headers.get('authorization'))
        user = get_current_user(session, token)
        if user is None:
            return error_response(401, 'Unauthorized')
        return success_response(compute(user))
    except CampaignNotFoundError:
        return error_response(404, 'Campaign not found')
    except CampaignAccessError:
        return error_response(403, 'Forbidden')
    except Exception:
        logger.exception(f"Error calculating {label}")
        return error_response(500, 'Internal server error')

@app.get("/health")
def health():
    return {"status": "ok"}

@app.get("/api/campaigns/{campaign_id}/engagement-score")
def engagement_score(campaign_id: str, request: Request, session: Session = Depends(get_db_session)):
    service = EngagementService(session, top_limit=settings.TOP_SUPPORTERS_LIMIT)
    return creator_analytics(
        request, session, 'engagement score',
        lambda user: EngagementScoreData.from_report(service.campaign_engagement(campaign_id, user))
    )

@app.get("/api/campaigns/{campaign_id}/pricing-analysis")
def pricing_analysis(campaign_id: str, request: Request, session: Session = Depends(get_db_session)):
    service = PricingService(session, PricingAnalyzer(settings.DEMAND_CURVE_MAX_POINTS))
    return creator_analytics(
        request, session, 'pricing analysis',
        lambda user: PricingAnalysisData.from_analysis(service.campaign_pricing(campaign_id, user))
    )
