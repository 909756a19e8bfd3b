"""Shared pytest fixtures: in-memory database, data builders, fake mail transport"""
from datetime import datetime, timedelta
from decimal import Decimal
from itertools import count

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from productlobby_insights.models.db import (
    Base, Bookmark, Campaign, CampaignStatus, CampaignUpdate, Comment, Follow,
    Lobby, LobbyIntensity, NotificationPreference, Pledge, Poll, PollOption,
    PollVote, Share, UpdateMedia, UpdateReaction, User, UserSession
)
from productlobby_insights.services.email import EmailResult

NOW = datetime(2026, 3, 10, 12, 0, 0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    session = sessionmaker(bind=engine)()
    yield session
    session.close()


class Builder:
    """Small factory for platform rows; every helper flushes so ids are usable"""

    def __init__(self, session):
        self.session = session
        self._seq = count(1)

    def _add(self, obj):
        self.session.add(obj)
        self.session.flush()
        return obj

    def user(self, name=None, handle="__auto__", avatar=None, email=None, created_at=None):
        n = next(self._seq)
        name = name or f"User {n}"
        if handle == "__auto__":
            handle = f"user{n}"
        return self._add(User(
            display_name=name,
            handle=handle,
            avatar=avatar,
            email=email or f"user{n}@example.com",
            created_at=created_at or NOW - timedelta(days=100 - n),
        ))

    def campaign(self, creator, slug=None, title=None, status=CampaignStatus.LIVE, signal_score=None):
        n = next(self._seq)
        return self._add(Campaign(
            slug=slug or f"campaign-{n}",
            title=title or f"Campaign {n}",
            status=status,
            creator_user_id=creator.id,
            signal_score=signal_score,
            created_at=NOW - timedelta(days=60 - n),
        ))

    def login(self, user, token="token-abc", expires_at=None):
        return self._add(UserSession(
            token=token,
            user_id=user.id,
            expires_at=expires_at or NOW + timedelta(days=3650),
        ))

    def lobby(self, campaign, user, at=NOW, intensity=LobbyIntensity.NEAT_IDEA):
        return self._add(Lobby(campaign_id=campaign.id, user_id=user.id, intensity=intensity, created_at=at))

    def pledge(self, campaign, user, price=None, at=NOW):
        price_ceiling = Decimal(str(price)) if price is not None else None
        return self._add(Pledge(campaign_id=campaign.id, user_id=user.id, price_ceiling=price_ceiling, created_at=at))

    def poll_vote(self, campaign, user, at=NOW):
        poll = self._add(Poll(campaign_id=campaign.id, question="Which colour?"))
        option = self._add(PollOption(poll_id=poll.id, label="Blue"))
        return self._add(PollVote(poll_option_id=option.id, user_id=user.id, created_at=at))

    def comment(self, campaign, user, at=NOW):
        return self._add(Comment(campaign_id=campaign.id, user_id=user.id, content="Love it", created_at=at))

    def share(self, campaign, user, at=NOW):
        return self._add(Share(campaign_id=campaign.id, user_id=user.id, platform="x", created_at=at))

    def bookmark(self, campaign, user, at=NOW):
        return self._add(Bookmark(campaign_id=campaign.id, user_id=user.id, created_at=at))

    def reaction(self, campaign, user, at=NOW):
        update = self._add(CampaignUpdate(campaign_id=campaign.id, title="Progress"))
        media = self._add(UpdateMedia(update_id=update.id, url="https://img.example.com/1.png"))
        return self._add(UpdateReaction(update_media_id=media.id, user_id=user.id, created_at=at))

    def follow(self, campaign, user, at=NOW):
        return self._add(Follow(campaign_id=campaign.id, user_id=user.id, created_at=at))

    def every_activity(self, campaign, user, at=NOW):
        for make in (self.lobby, self.pledge, self.poll_vote, self.comment,
                     self.share, self.bookmark, self.reaction, self.follow):
            make(campaign, user, at=at)

    def preference(self, user, email_campaign_updates=True):
        return self._add(NotificationPreference(user_id=user.id, email_campaign_updates=email_campaign_updates))


@pytest.fixture
def build(session):
    return Builder(session)


class FakeSender:
    """Records sent mail; ``fail_for`` addresses raise, ``reject_for`` return an error"""

    def __init__(self, fail_for=(), reject_for=()):
        self.fail_for = set(fail_for)
        self.reject_for = set(reject_for)
        self.sent = []

    def send_email(self, to, subject, html):
        if to in self.fail_for:
            raise RuntimeError(f"SMTP connection reset for {to}")
        if to in self.reject_for:
            return EmailResult(success=False, error="Mail API returned 422")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return EmailResult(success=True)


@pytest.fixture
def sender():
    return FakeSender()
