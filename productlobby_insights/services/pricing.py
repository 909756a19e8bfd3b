"""Pricing analysis backed by campaign pledges"""
import logging
from typing import List

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from productlobby_insights.models.db import Lobby, LobbyIntensity, Pledge, User
from productlobby_insights.models.pricing import PricingAnalysis, PricingResponse
from productlobby_insights.pricing import PricingAnalyzer
from productlobby_insights.services.campaigns import CampaignService

logger = logging.getLogger(__name__)

class PricingService:
    """Loads price ceilings for a campaign and runs the analyzer over them"""

    def __init__(self, session: Session, analyzer: PricingAnalyzer = None):
        if not session:
            raise ValueError("Database session is required")
        self.session = session
        self.analyzer = analyzer or PricingAnalyzer()
        self.campaigns = CampaignService(session)

    def load_responses(self, campaign_id: str) -> List[PricingResponse]:
        """Pledges with a price ceiling, tagged with the pledger's lobby intensity"""
        try:
            pledges = self.session.query(Pledge.user_id, Pledge.price_ceiling).filter(
                Pledge.campaign_id == campaign_id,
                Pledge.price_ceiling.isnot(None)
            ).order_by(Pledge.created_at).all()

            intensities = {}
            for user_id, intensity in self.session.query(Lobby.user_id, Lobby.intensity).filter(
                Lobby.campaign_id == campaign_id
            ).order_by(Lobby.created_at):
                # first lobby wins when a user lobbied more than once
                intensities.setdefault(user_id, intensity)
        except SQLAlchemyError as e:
            logger.error(f"Database error loading pledges for campaign {campaign_id}: {e}")
            raise

        return [
            PricingResponse(
                price=float(price_ceiling),
                intensity=intensities.get(user_id, LobbyIntensity.NEAT_IDEA)
            )
            for user_id, price_ceiling in pledges
        ]

    def analyze_campaign(self, campaign_id: str) -> PricingAnalysis:
        responses = self.load_responses(campaign_id)
        logger.info(f"Analyzing {len(responses)} price responses for campaign {campaign_id}")
        return self.analyzer.analyze(responses)

    def campaign_pricing(self, identifier: str, user: User) -> PricingAnalysis:
        """Pricing analysis for a campaign the user created, looked up by id or slug"""
        campaign = self.campaigns.get_owned_campaign(identifier, user)
        return self.analyze_campaign(campaign.id)
