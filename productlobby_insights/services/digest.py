"""Weekly creator digest: per-creator stats aggregation and email delivery"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol

from sqlalchemy import desc, func
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from productlobby_insights.digest_template import SUBJECT, creator_digest_html
from productlobby_insights.models.db import (
    ACTIVE_CAMPAIGN_STATUSES, Campaign, Comment, Lobby, NotificationPreference, User, utcnow
)
from productlobby_insights.models.digest import (
    Creator, CreatorDigestResult, DigestStats, SendDigestResults, TopCampaignHighlight
)
from productlobby_insights.services.email import EmailResult

logger = logging.getLogger(__name__)

class EmailTransport(Protocol):
    def send_email(self, to: str, subject: str, html: str) -> EmailResult: ...

class DigestService:
    """Aggregates creator stats and sends the weekly summary email"""

    def __init__(
        self,
        session: Session,
        sender: EmailTransport,
        app_url: str,
        days_back: int = 7,
        clock: Callable[[], datetime] = utcnow
    ):
        if not session:
            raise ValueError("Database session is required")
        self.session = session
        self.sender = sender
        self.app_url = app_url
        self.days_back = days_back
        self.clock = clock

    def _cutoff(self) -> datetime:
        return self.clock() - timedelta(days=self.days_back)

    def get_recent_lobbies(self, creator_id: str) -> int:
        """Lobbies on the creator's campaigns inside the look-back window"""
        return self.session.query(Lobby).join(Campaign, Lobby.campaign_id == Campaign.id).filter(
            Campaign.creator_user_id == creator_id,
            Lobby.created_at >= self._cutoff()
        ).count()

    def get_recent_comments(self, creator_id: str) -> int:
        """Comments on the creator's campaigns inside the look-back window"""
        return self.session.query(Comment).join(Campaign, Comment.campaign_id == Campaign.id).filter(
            Campaign.creator_user_id == creator_id,
            Comment.created_at >= self._cutoff()
        ).count()

    def get_total_campaigns(self, creator_id: str) -> int:
        return self.session.query(Campaign).filter(
            Campaign.creator_user_id == creator_id,
            Campaign.status.in_(ACTIVE_CAMPAIGN_STATUSES)
        ).count()

    def get_total_lobbies(self, creator_id: str) -> int:
        return self.session.query(Lobby).join(Campaign, Lobby.campaign_id == Campaign.id).filter(
            Campaign.creator_user_id == creator_id
        ).count()

    def get_top_performing_campaign(self, creator_id: str) -> Optional[TopCampaignHighlight]:
        """Active campaign with the most lobbies"""
        lobby_count = func.count(Lobby.id).label('lobby_count')
        row = self.session.query(Campaign, lobby_count) \
            .outerjoin(Lobby, Lobby.campaign_id == Campaign.id) \
            .filter(
                Campaign.creator_user_id == creator_id,
                Campaign.status.in_(ACTIVE_CAMPAIGN_STATUSES)
            ) \
            .group_by(Campaign.id) \
            .order_by(desc(lobby_count), Campaign.created_at) \
            .first()

        if row is None:
            return None

        campaign, lobbies = row
        comments = self.session.query(Comment).filter(Comment.campaign_id == campaign.id).count()
        return TopCampaignHighlight(
            title=campaign.title,
            slug=campaign.slug,
            lobby_count=lobbies,
            comment_count=comments,
            signal_score=float(campaign.signal_score) if campaign.signal_score is not None else None
        )

    def collect_stats(self, creator_id: str) -> tuple[DigestStats, Optional[TopCampaignHighlight]]:
        stats = DigestStats(
            new_lobbies=self.get_recent_lobbies(creator_id),
            new_comments=self.get_recent_comments(creator_id),
            total_campaigns=self.get_total_campaigns(creator_id),
            total_lobbies=self.get_total_lobbies(creator_id)
        )
        return stats, self.get_top_performing_campaign(creator_id)

    def find_eligible_creators(self) -> list[Creator]:
        """Creators with a live or paused campaign who opted into campaign update emails"""
        users = self.session.query(User) \
            .join(NotificationPreference, NotificationPreference.user_id == User.id) \
            .filter(
                NotificationPreference.email_campaign_updates.is_(True),
                User.campaigns.any(Campaign.status.in_(ACTIVE_CAMPAIGN_STATUSES))
            ) \
            .order_by(User.created_at, User.id) \
            .all()
        return [Creator(id=u.id, email=u.email, display_name=u.display_name) for u in users]

    def _record_digest_sent(self, creator_id: str) -> None:
        """Best effort; a missing preference row or a failed write is not an error"""
        try:
            preference = self.session.query(NotificationPreference).filter_by(user_id=creator_id).first()
            if preference is None:
                return
            preference.last_digest_sent_at = self.clock()
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning(f"Could not record digest time for creator {creator_id}: {e}")

    def _reset_session(self, creator_id: str) -> None:
        try:
            self.session.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Rollback after creator {creator_id} failed: {e}")

    def send_creator_digest_email(
        self,
        creator: Creator,
        stats: DigestStats,
        top_campaign: Optional[TopCampaignHighlight]
    ) -> CreatorDigestResult:
        """Render and send one digest; failures come back as an unsent result"""
        result = CreatorDigestResult(
            creator_id=creator.id,
            creator_email=creator.email,
            creator_name=creator.display_name,
            digest_sent=False
        )
        try:
            html = creator_digest_html(creator.display_name, stats, top_campaign, self.app_url)
            email_result = self.sender.send_email(to=creator.email, subject=SUBJECT, html=html)
        except Exception as e:
            logger.error(f"Digest send to creator {creator.id} raised: {e}")
            result.reason = f"Exception: {e}"
            return result

        if not email_result.success:
            result.reason = email_result.error or "Failed to send email"
            return result

        self._record_digest_sent(creator.id)
        result.digest_sent = True
        return result

    def send_weekly_creator_digests(self) -> SendDigestResults:
        """Send the digest to every eligible creator; one failure never stops the batch"""
        results = SendDigestResults()

        try:
            creators = self.find_eligible_creators()
        except Exception as e:
            logger.error(f"Weekly digest aborted: {e}")
            results.errors.append(f"Fatal error: {e}")
            return results

        if not creators:
            results.errors.append("No creators with active campaigns found")
            return results

        for creator in creators:
            try:
                stats, top_campaign = self.collect_stats(creator.id)
                outcome = self.send_creator_digest_email(creator, stats, top_campaign)
            except Exception as e:
                logger.error(f"Error processing creator {creator.id}: {e}")
                self._reset_session(creator.id)
                results.errors.append(f"Error processing creator {creator.id}: {e}")
                outcome = CreatorDigestResult(
                    creator_id=creator.id,
                    creator_email=creator.email,
                    creator_name=creator.display_name,
                    digest_sent=False,
                    reason=f"Processing error: {e}"
                )
            results.results.append(outcome)

        results.total = len(creators)
        results.sent = sum(1 for r in results.results if r.digest_sent)
        results.failed = len(results.results) - results.sent
        logger.info(f"Weekly digest complete: {results.sent} sent, {results.failed} failed")
        return results

    def send_digest_to_creator(self, creator_id: str) -> CreatorDigestResult:
        """Manual trigger for a single creator, regardless of notification preferences"""
        try:
            user = self.session.get(User, creator_id)
            if user is None:
                return CreatorDigestResult(
                    creator_id=creator_id,
                    creator_email='',
                    creator_name='',
                    digest_sent=False,
                    reason="Creator not found"
                )

            creator = Creator(id=user.id, email=user.email, display_name=user.display_name)
            stats, top_campaign = self.collect_stats(creator.id)
            return self.send_creator_digest_email(creator, stats, top_campaign)
        except Exception as e:
            logger.error(f"Digest for creator {creator_id} failed: {e}")
            return CreatorDigestResult(
                creator_id=creator_id,
                creator_email='',
                creator_name='',
                digest_sent=False,
                reason=f"Exception: {e}"
            )
