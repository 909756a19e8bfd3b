"""Response models for the analytics HTTP API"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from productlobby_insights.models.db import LobbyIntensity
from productlobby_insights.models.engagement import EngagementBucket, EngagementReport
from productlobby_insights.models.pricing import PricingAnalysis

class CamelModel(BaseModel):
    """Serialises snake_case fields as the camelCase keys the web client reads"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode='json', by_alias=True)

class BucketOut(CamelModel):
    count: int
    percentage: int

    @classmethod
    def from_bucket(cls, bucket: EngagementBucket) -> 'BucketOut':
        return cls(count=bucket.count, percentage=bucket.percentage)

class DistributionOut(CamelModel):
    high_engagement: BucketOut
    moderate_engagement: BucketOut
    low_engagement: BucketOut

class TopSupporterOut(CamelModel):
    id: str
    name: str
    handle: str
    avatar: Optional[str] = None
    engagement_score: float
    last_active: Optional[str] = None
    activity_types: List[str]

class EngagementScoreData(CamelModel):
    distribution: DistributionOut
    top_supporters: List[TopSupporterOut]
    average_engagement_score: float
    platform_average_score: float
    total_supporters: int

    @classmethod
    def from_report(cls, report: EngagementReport) -> 'EngagementScoreData':
        return cls(
            distribution=DistributionOut(
                high_engagement=BucketOut.from_bucket(report.distribution.high),
                moderate_engagement=BucketOut.from_bucket(report.distribution.moderate),
                low_engagement=BucketOut.from_bucket(report.distribution.low),
            ),
            top_supporters=[
                TopSupporterOut(
                    id=s.id,
                    name=s.name,
                    handle=s.handle,
                    avatar=s.avatar,
                    engagement_score=s.engagement_score,
                    last_active=s.last_active,
                    activity_types=s.activity_types,
                )
                for s in report.top_supporters
            ],
            average_engagement_score=report.average_engagement_score,
            platform_average_score=report.platform_average_score,
            total_supporters=report.total_supporters,
        )

class PriceRangeOut(CamelModel):
    min: float
    max: float

class BracketOut(CamelModel):
    bracket: str
    count: int
    percentage: int

class SuggestedPricePointsOut(CamelModel):
    economy: float
    standard: float
    premium: float

class IntensityOut(CamelModel):
    avg: float
    count: int

class IntensityBreakdownOut(CamelModel):
    neat_idea: IntensityOut
    probably_buy: IntensityOut
    take_my_money: IntensityOut

class DemandPointOut(CamelModel):
    price: float
    estimated_buyers: int

class PricingAnalysisData(CamelModel):
    total_responses: int
    average_price: float
    median_price: float
    mode_price: float
    price_range: PriceRangeOut
    distribution: List[BracketOut]
    suggested_price_points: SuggestedPricePointsOut
    by_intensity: IntensityBreakdownOut
    demand_curve: List[DemandPointOut]
    optimal_price: float
    max_revenue: float

    @classmethod
    def from_analysis(cls, analysis: PricingAnalysis) -> 'PricingAnalysisData':
        def intensity(level: LobbyIntensity) -> IntensityOut:
            stats = analysis.by_intensity.get(level)
            if stats is None:
                return IntensityOut(avg=0.0, count=0)
            return IntensityOut(avg=stats.avg, count=stats.count)

        return cls(
            total_responses=analysis.total_responses,
            average_price=analysis.average_price,
            median_price=analysis.median_price,
            mode_price=analysis.mode_price,
            price_range=PriceRangeOut(min=analysis.min_price, max=analysis.max_price),
            distribution=[
                BracketOut(bracket=b.bracket, count=b.count, percentage=b.percentage)
                for b in analysis.distribution
            ],
            suggested_price_points=SuggestedPricePointsOut(
                economy=analysis.suggested_price_points.economy,
                standard=analysis.suggested_price_points.standard,
                premium=analysis.suggested_price_points.premium,
            ),
            by_intensity=IntensityBreakdownOut(
                neat_idea=intensity(LobbyIntensity.NEAT_IDEA),
                probably_buy=intensity(LobbyIntensity.PROBABLY_BUY),
                take_my_money=intensity(LobbyIntensity.TAKE_MY_MONEY),
            ),
            demand_curve=[
                DemandPointOut(price=p.price, estimated_buyers=p.estimated_buyers)
                for p in analysis.demand_curve
            ],
            optimal_price=analysis.optimal_price,
            max_revenue=analysis.max_revenue,
        )
