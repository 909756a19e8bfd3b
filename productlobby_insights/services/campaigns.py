"""Campaign lookup and creator access checks shared by the analytics services"""
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from productlobby_insights.models.db import Campaign, User

logger = logging.getLogger(__name__)

class CampaignServiceError(Exception):
    """Base exception for campaign lookup errors"""
    pass

class CampaignNotFoundError(CampaignServiceError):
    """No campaign matches the given id or slug"""
    pass

class CampaignAccessError(CampaignServiceError):
    """The caller is not the campaign's creator"""
    pass

class CampaignService:
    """Resolves campaigns by id or slug and guards creator-only analytics"""

    def __init__(self, session: Session):
        if not session:
            raise ValueError("Database session is required")
        self.session = session

    def find_campaign(self, identifier: str) -> Campaign:
        """Find a campaign by UUID or slug"""
        try:
            campaign = self.session.query(Campaign).filter(
                or_(Campaign.id == identifier, Campaign.slug == identifier)
            ).first()
        except SQLAlchemyError as e:
            logger.error(f"Database error looking up campaign {identifier}: {e}")
            raise

        if campaign is None:
            raise CampaignNotFoundError(f"Campaign not found: {identifier}")
        return campaign

    def get_owned_campaign(self, identifier: str, user: User) -> Campaign:
        """Find a campaign and check that ``user`` created it"""
        campaign = self.find_campaign(identifier)
        if campaign.creator_user_id != user.id:
            logger.warning(f"User {user.id} denied analytics for campaign {campaign.id}")
            raise CampaignAccessError(f"User {user.id} did not create campaign {campaign.id}")
        return campaign
