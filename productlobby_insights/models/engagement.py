"""Domain models for supporter engagement scoring"""
import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

class ActivityType(enum.Enum):
    """Supporter activity kinds; the value is the label shown to creators"""
    LOBBY = 'Lobby'
    PLEDGE = 'Pledge'
    POLL_VOTE = 'Poll Vote'
    COMMENT = 'Comment'
    SHARE = 'Share'
    BOOKMARK = 'Bookmark'
    REACTION = 'Reaction'
    FOLLOW = 'Follow'

    @property
    def label(self) -> str:
        return self.value

@dataclass
class UserProfile:
    """Public projection of a user attached to each activity record"""
    user_id: str
    display_name: str
    handle: Optional[str]
    avatar: Optional[str]

@dataclass
class ActivityRecord:
    """A single supporter action on a campaign"""
    user: UserProfile
    activity_type: ActivityType
    timestamp: Optional[datetime]
    campaign_id: str

    @property
    def user_id(self) -> str:
        return self.user.user_id

def _zero_counts() -> Dict[ActivityType, int]:
    return {activity_type: 0 for activity_type in ActivityType}

@dataclass
class SupporterEngagement:
    """Per-supporter activity counters for one campaign"""
    user_id: str
    display_name: str
    handle: Optional[str]
    avatar: Optional[str]
    counts: Dict[ActivityType, int] = field(default_factory=_zero_counts)
    last_activity_date: Optional[datetime] = None

    @classmethod
    def from_profile(cls, profile: UserProfile) -> 'SupporterEngagement':
        return cls(
            user_id=profile.user_id,
            display_name=profile.display_name,
            handle=profile.handle,
            avatar=profile.avatar
        )

    def record(self, activity_type: ActivityType, timestamp: Optional[datetime]) -> None:
        """Count one activity and keep the latest timestamp seen"""
        self.counts[activity_type] += 1
        if timestamp is not None and (
            self.last_activity_date is None or timestamp > self.last_activity_date
        ):
            self.last_activity_date = timestamp

    @property
    def total_activities(self) -> int:
        return sum(self.counts.values())

    @property
    def activity_types(self) -> List[ActivityType]:
        """Activity kinds used at least once, in canonical order"""
        return [t for t in ActivityType if self.counts[t] > 0]

@dataclass
class SupporterScore:
    """A supporter's engagement counters together with the computed score"""
    engagement: SupporterEngagement
    engagement_score: float
    activity_types: List[str]

@dataclass
class EngagementBucket:
    count: int
    percentage: int

@dataclass
class EngagementDistribution:
    """High / moderate / low engagement split"""
    high: EngagementBucket
    moderate: EngagementBucket
    low: EngagementBucket
    total_supporters: int

@dataclass
class TopSupporter:
    """Public-safe projection of a highly engaged supporter"""
    id: str
    name: str
    handle: str
    avatar: Optional[str]
    engagement_score: float
    last_active: Optional[str]
    activity_types: List[str]

@dataclass
class EngagementReport:
    """Everything the engagement-score endpoint returns for a campaign"""
    distribution: EngagementDistribution
    top_supporters: List[TopSupporter]
    average_engagement_score: float
    platform_average_score: float
    total_supporters: int
