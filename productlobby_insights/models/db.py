"""SQLAlchemy database models for the ProductLobby platform tables read by analytics"""
import enum
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Boolean, Column, DateTime, Enum, ForeignKey, Numeric, String, Text
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

def utcnow() -> datetime:
    """Naive UTC timestamp, the convention for every DateTime column here"""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def new_id() -> str:
    return str(uuid4())

class CampaignStatus(str, enum.Enum):
    DRAFT = 'DRAFT'
    LIVE = 'LIVE'
    PAUSED = 'PAUSED'
    CLOSED = 'CLOSED'

ACTIVE_CAMPAIGN_STATUSES = (CampaignStatus.LIVE, CampaignStatus.PAUSED)

class LobbyIntensity(str, enum.Enum):
    """Self-reported purchase interest attached to a lobby"""
    NEAT_IDEA = 'NEAT_IDEA'
    PROBABLY_BUY = 'PROBABLY_BUY'
    TAKE_MY_MONEY = 'TAKE_MY_MONEY'

class User(Base):
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, nullable=False)
    display_name = Column(String, nullable=False)
    handle = Column(String, unique=True, nullable=True)
    avatar = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    campaigns = relationship('Campaign', back_populates='creator')
    notification_preference = relationship(
        'NotificationPreference', back_populates='user', uselist=False
    )

class UserSession(Base):
    """Login session; the token is what the browser cookie carries"""
    __tablename__ = 'user_sessions'

    id = Column(String(36), primary_key=True, default=new_id)
    token = Column(String, unique=True, nullable=False, index=True)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False)
    expires_at = Column(DateTime, nullable=False)

    user = relationship('User')

class Campaign(Base):
    __tablename__ = 'campaigns'

    id = Column(String(36), primary_key=True, default=new_id)
    slug = Column(String, unique=True, nullable=False, index=True)
    title = Column(String, nullable=False)
    status = Column(Enum(CampaignStatus), default=CampaignStatus.DRAFT, nullable=False)
    creator_user_id = Column(String(36), ForeignKey('users.id'), nullable=False, index=True)
    signal_score = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    creator = relationship('User', back_populates='campaigns')
    lobbies = relationship('Lobby', back_populates='campaign')
    comments = relationship('Comment', back_populates='campaign')

class Lobby(Base):
    __tablename__ = 'lobbies'

    id = Column(String(36), primary_key=True, default=new_id)
    campaign_id = Column(String(36), ForeignKey('campaigns.id'), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False, index=True)
    intensity = Column(Enum(LobbyIntensity), default=LobbyIntensity.NEAT_IDEA, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    campaign = relationship('Campaign', back_populates='lobbies')
    user = relationship('User')

class Pledge(Base):
    __tablename__ = 'pledges'

    id = Column(String(36), primary_key=True, default=new_id)
    campaign_id = Column(String(36), ForeignKey('campaigns.id'), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False, index=True)
    price_ceiling = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship('User')

class Poll(Base):
    __tablename__ = 'polls'

    id = Column(String(36), primary_key=True, default=new_id)
    campaign_id = Column(String(36), ForeignKey('campaigns.id'), nullable=False, index=True)
    question = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

class PollOption(Base):
    __tablename__ = 'poll_options'

    id = Column(String(36), primary_key=True, default=new_id)
    poll_id = Column(String(36), ForeignKey('polls.id'), nullable=False, index=True)
    label = Column(String, nullable=False)

class PollVote(Base):
    __tablename__ = 'poll_votes'

    id = Column(String(36), primary_key=True, default=new_id)
    poll_option_id = Column(String(36), ForeignKey('poll_options.id'), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship('User')

class Comment(Base):
    __tablename__ = 'comments'

    id = Column(String(36), primary_key=True, default=new_id)
    campaign_id = Column(String(36), ForeignKey('campaigns.id'), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False, index=True)
    content = Column(Text, nullable=False, default='')
    created_at = Column(DateTime, default=utcnow, nullable=False)

    campaign = relationship('Campaign', back_populates='comments')
    user = relationship('User')

class Share(Base):
    __tablename__ = 'shares'

    id = Column(String(36), primary_key=True, default=new_id)
    campaign_id = Column(String(36), ForeignKey('campaigns.id'), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False, index=True)
    platform = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship('User')

class Bookmark(Base):
    __tablename__ = 'bookmarks'

    id = Column(String(36), primary_key=True, default=new_id)
    campaign_id = Column(String(36), ForeignKey('campaigns.id'), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship('User')

class CampaignUpdate(Base):
    __tablename__ = 'campaign_updates'

    id = Column(String(36), primary_key=True, default=new_id)
    campaign_id = Column(String(36), ForeignKey('campaigns.id'), nullable=False, index=True)
    title = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

class UpdateMedia(Base):
    __tablename__ = 'update_media'

    id = Column(String(36), primary_key=True, default=new_id)
    update_id = Column(String(36), ForeignKey('campaign_updates.id'), nullable=False, index=True)
    url = Column(String, nullable=False)

class UpdateReaction(Base):
    __tablename__ = 'update_reactions'

    id = Column(String(36), primary_key=True, default=new_id)
    update_media_id = Column(String(36), ForeignKey('update_media.id'), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False, index=True)
    emoji = Column(String, nullable=False, default='+1')
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship('User')

class Follow(Base):
    __tablename__ = 'follows'

    id = Column(String(36), primary_key=True, default=new_id)
    campaign_id = Column(String(36), ForeignKey('campaigns.id'), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship('User')

class NotificationPreference(Base):
    __tablename__ = 'notification_preferences'

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey('users.id'), unique=True, nullable=False)
    email_campaign_updates = Column(Boolean, default=True, nullable=False)
    last_digest_sent_at = Column(DateTime, nullable=True)

    user = relationship('User', back_populates='notification_preference')
