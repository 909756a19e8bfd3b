"""Supporter engagement scoring and distribution"""
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from productlobby_insights.models.engagement import (
    ActivityRecord, ActivityType, EngagementBucket, EngagementDistribution,
    SupporterEngagement, SupporterScore, TopSupporter
)
from productlobby_insights.utils.rounding import percentage, round_half_up

HIGH_ENGAGEMENT_THRESHOLD = 6.0
MODERATE_ENGAGEMENT_THRESHOLD = 3.0

FREQUENCY_WEIGHT = 60
VARIETY_WEIGHT = 40
FREQUENCY_SATURATION = 10  # activities needed for full frequency credit

def to_iso8601(value: Optional[datetime]) -> Optional[str]:
    """ISO 8601 in UTC with milliseconds and a Z suffix; naive timestamps are stored as UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec='milliseconds').replace('+00:00', 'Z')

class EngagementScorer:
    """Turns raw supporter activity into 0-10 engagement scores"""

    def fold_activity(self, records: Iterable[ActivityRecord]) -> Dict[str, SupporterEngagement]:
        """Group activity records per user, seeding each entry from the first record seen"""
        supporters: Dict[str, SupporterEngagement] = {}
        for record in records:
            engagement = supporters.get(record.user_id)
            if engagement is None:
                engagement = SupporterEngagement.from_profile(record.user)
                supporters[record.user_id] = engagement
            engagement.record(record.activity_type, record.timestamp)
        return supporters

    def calculate_frequency_score(self, activity_count: int) -> float:
        """Up to 60 points, saturating at ten activities"""
        return min(activity_count / FREQUENCY_SATURATION, 1.0) * FREQUENCY_WEIGHT

    def calculate_variety_score(self, distinct_types: int) -> float:
        """Up to 40 points for using every kind of activity"""
        return distinct_types / len(ActivityType) * VARIETY_WEIGHT

    def calculate_score(self, engagement: SupporterEngagement) -> SupporterScore:
        """Score one supporter; depends only on the activity counters"""
        activity_types = engagement.activity_types
        frequency_score = self.calculate_frequency_score(engagement.total_activities)
        variety_score = self.calculate_variety_score(len(activity_types))

        return SupporterScore(
            engagement=engagement,
            engagement_score=round_half_up((frequency_score + variety_score) / 10, 1),
            activity_types=[t.label for t in activity_types]
        )

    def rank_supporters(self, supporters: Iterable[SupporterEngagement]) -> List[SupporterScore]:
        """Score everyone and order by score, highest first (stable for ties)"""
        scores = [self.calculate_score(s) for s in supporters]
        return sorted(scores, key=lambda s: s.engagement_score, reverse=True)

    def build_distribution(self, scores: List[SupporterScore]) -> EngagementDistribution:
        """Split scored supporters into high / moderate / low engagement"""
        total = len(scores)
        high = sum(1 for s in scores if s.engagement_score >= HIGH_ENGAGEMENT_THRESHOLD)
        moderate = sum(
            1 for s in scores
            if MODERATE_ENGAGEMENT_THRESHOLD <= s.engagement_score < HIGH_ENGAGEMENT_THRESHOLD
        )
        low = sum(1 for s in scores if s.engagement_score < MODERATE_ENGAGEMENT_THRESHOLD)

        return EngagementDistribution(
            high=EngagementBucket(count=high, percentage=percentage(high, total)),
            moderate=EngagementBucket(count=moderate, percentage=percentage(moderate, total)),
            low=EngagementBucket(count=low, percentage=percentage(low, total)),
            total_supporters=total
        )

    def average_score(self, scores: List[SupporterScore]) -> float:
        if not scores:
            return 0.0
        return round_half_up(sum(s.engagement_score for s in scores) / len(scores), 1)

    def platform_average(self, total_activities: int, total_users: int) -> float:
        """Platform-wide activities per user, on the same 0-10 scale as supporter scores"""
        if total_users <= 0:
            return 0.0
        return round_half_up(total_activities / total_users / 10, 1)

    def top_supporters(self, scores: List[SupporterScore], limit: int = 5) -> List[TopSupporter]:
        """Public projection of the first ``limit`` ranked supporters"""
        top = []
        for score in scores[:limit]:
            engagement = score.engagement
            top.append(TopSupporter(
                id=engagement.user_id,
                name=engagement.display_name,
                handle=engagement.handle or 'anonymous',
                avatar=engagement.avatar,
                engagement_score=score.engagement_score,
                last_active=to_iso8601(engagement.last_activity_date),
                activity_types=score.activity_types
            ))
        return top
