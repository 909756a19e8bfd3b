"""Supporter engagement report for a single campaign"""
import logging
from typing import Callable, Dict, List

from sqlalchemy.orm import Query, Session
from sqlalchemy.exc import SQLAlchemyError

from productlobby_insights.models.db import (
    Bookmark, CampaignUpdate, Comment, Follow, Lobby, Pledge, Poll, PollOption,
    PollVote, Share, UpdateMedia, UpdateReaction, User
)
from productlobby_insights.models.engagement import (
    ActivityRecord, ActivityType, EngagementReport, UserProfile
)
from productlobby_insights.scoring import EngagementScorer
from productlobby_insights.services.campaigns import CampaignService

logger = logging.getLogger(__name__)

def _lobbies(session: Session, campaign_id: str) -> Query:
    return session.query(Lobby.created_at, User).join(User, Lobby.user_id == User.id) \
        .filter(Lobby.campaign_id == campaign_id) \
        .order_by(Lobby.created_at, Lobby.id)

def _pledges(session: Session, campaign_id: str) -> Query:
    return session.query(Pledge.created_at, User).join(User, Pledge.user_id == User.id) \
        .filter(Pledge.campaign_id == campaign_id) \
        .order_by(Pledge.created_at, Pledge.id)

def _poll_votes(session: Session, campaign_id: str) -> Query:
    return session.query(PollVote.created_at, User).join(User, PollVote.user_id == User.id) \
        .join(PollOption, PollVote.poll_option_id == PollOption.id) \
        .join(Poll, PollOption.poll_id == Poll.id) \
        .filter(Poll.campaign_id == campaign_id) \
        .order_by(PollVote.created_at, PollVote.id)

def _comments(session: Session, campaign_id: str) -> Query:
    return session.query(Comment.created_at, User).join(User, Comment.user_id == User.id) \
        .filter(Comment.campaign_id == campaign_id) \
        .order_by(Comment.created_at, Comment.id)

def _shares(session: Session, campaign_id: str) -> Query:
    return session.query(Share.created_at, User).join(User, Share.user_id == User.id) \
        .filter(Share.campaign_id == campaign_id) \
        .order_by(Share.created_at, Share.id)

def _bookmarks(session: Session, campaign_id: str) -> Query:
    return session.query(Bookmark.created_at, User).join(User, Bookmark.user_id == User.id) \
        .filter(Bookmark.campaign_id == campaign_id) \
        .order_by(Bookmark.created_at, Bookmark.id)

def _reactions(session: Session, campaign_id: str) -> Query:
    return session.query(UpdateReaction.created_at, User).join(User, UpdateReaction.user_id == User.id) \
        .join(UpdateMedia, UpdateReaction.update_media_id == UpdateMedia.id) \
        .join(CampaignUpdate, UpdateMedia.update_id == CampaignUpdate.id) \
        .filter(CampaignUpdate.campaign_id == campaign_id) \
        .order_by(UpdateReaction.created_at, UpdateReaction.id)

def _follows(session: Session, campaign_id: str) -> Query:
    return session.query(Follow.created_at, User).join(User, Follow.user_id == User.id) \
        .filter(Follow.campaign_id == campaign_id) \
        .order_by(Follow.created_at, Follow.id)

# (created_at, User) rows of each activity kind for one campaign
ACTIVITY_QUERIES: Dict[ActivityType, Callable[[Session, str], Query]] = {
    ActivityType.LOBBY: _lobbies,
    ActivityType.PLEDGE: _pledges,
    ActivityType.POLL_VOTE: _poll_votes,
    ActivityType.COMMENT: _comments,
    ActivityType.SHARE: _shares,
    ActivityType.BOOKMARK: _bookmarks,
    ActivityType.REACTION: _reactions,
    ActivityType.FOLLOW: _follows,
}

# Platform-wide tables counted for the baseline score
ACTIVITY_MODELS = {
    ActivityType.LOBBY: Lobby,
    ActivityType.PLEDGE: Pledge,
    ActivityType.POLL_VOTE: PollVote,
    ActivityType.COMMENT: Comment,
    ActivityType.SHARE: Share,
    ActivityType.BOOKMARK: Bookmark,
    ActivityType.REACTION: UpdateReaction,
    ActivityType.FOLLOW: Follow,
}

for _registry in (ACTIVITY_QUERIES, ACTIVITY_MODELS):
    _missing = set(ActivityType) - set(_registry)
    if _missing:
        raise RuntimeError(f"Activity types without a data source: {sorted(t.name for t in _missing)}")

class EngagementService:
    """Builds the supporter engagement report a creator sees for a campaign"""

    def __init__(self, session: Session, scorer: EngagementScorer = None, top_limit: int = 5):
        if not session:
            raise ValueError("Database session is required")
        self.session = session
        self.scorer = scorer or EngagementScorer()
        self.top_limit = top_limit
        self.campaigns = CampaignService(session)

    def collect_activity(self, campaign_id: str) -> List[ActivityRecord]:
        """All supporter activity for a campaign, grouped by kind in canonical order"""
        records = []
        try:
            for activity_type in ActivityType:
                rows = ACTIVITY_QUERIES[activity_type](self.session, campaign_id).all()
                for created_at, user in rows:
                    records.append(ActivityRecord(
                        user=UserProfile(
                            user_id=user.id,
                            display_name=user.display_name,
                            handle=user.handle,
                            avatar=user.avatar
                        ),
                        activity_type=activity_type,
                        timestamp=created_at,
                        campaign_id=campaign_id
                    ))
        except SQLAlchemyError as e:
            logger.error(f"Database error collecting activity for campaign {campaign_id}: {e}")
            raise
        return records

    def count_platform_activity(self) -> tuple[int, int]:
        """
        Count every activity record on the platform and every registered user.

        Returns:
            Tuple[int, int]: (total_activities, total_users)
        """
        try:
            total_activities = sum(
                self.session.query(model).count() for model in ACTIVITY_MODELS.values()
            )
            total_users = self.session.query(User).count()
        except SQLAlchemyError as e:
            logger.error(f"Database error counting platform activity: {e}")
            raise
        return total_activities, total_users

    def build_report(self, campaign_id: str) -> EngagementReport:
        """Engagement report without any access check"""
        records = self.collect_activity(campaign_id)
        supporters = self.scorer.fold_activity(records)
        ranked = self.scorer.rank_supporters(supporters.values())
        total_activities, total_users = self.count_platform_activity()

        logger.info(
            f"Scored {len(ranked)} supporters from {len(records)} activities for campaign {campaign_id}"
        )

        return EngagementReport(
            distribution=self.scorer.build_distribution(ranked),
            top_supporters=self.scorer.top_supporters(ranked, self.top_limit),
            average_engagement_score=self.scorer.average_score(ranked),
            platform_average_score=self.scorer.platform_average(total_activities, total_users),
            total_supporters=len(ranked)
        )

    def campaign_engagement(self, identifier: str, user: User) -> EngagementReport:
        """Engagement report for a campaign the user created, looked up by id or slug"""
        campaign = self.campaigns.get_owned_campaign(identifier, user)
        return self.build_report(campaign.id)
