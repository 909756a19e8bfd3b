"""Domain models for willingness-to-pay analysis"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from productlobby_insights.models.db import LobbyIntensity

@dataclass
class PricingResponse:
    """One supporter's price ceiling and how keen they said they were"""
    price: float
    intensity: LobbyIntensity = LobbyIntensity.NEAT_IDEA

@dataclass
class PriceBracket:
    """Fixed-width price band; ``maximum`` of None means open-ended"""
    minimum: int
    maximum: Optional[int] = None

    @property
    def label(self) -> str:
        if self.maximum is None:
            return f"£{self.minimum}+"
        return f"£{self.minimum}-{self.maximum}"

    def contains(self, price: float) -> bool:
        if self.maximum is None:
            return price >= self.minimum
        return self.minimum <= price < self.maximum

@dataclass
class BracketCount:
    bracket: str
    count: int
    percentage: int

@dataclass
class SuggestedPricePoints:
    economy: float = 0.0
    standard: float = 0.0
    premium: float = 0.0

@dataclass
class IntensityStats:
    avg: float = 0.0
    count: int = 0

@dataclass
class DemandPoint:
    price: float
    estimated_buyers: int

@dataclass
class PricingAnalysis:
    """Descriptive statistics and a revenue-maximising price for one campaign"""
    total_responses: int = 0
    average_price: float = 0.0
    median_price: float = 0.0
    mode_price: float = 0.0
    min_price: float = 0.0
    max_price: float = 0.0
    distribution: List[BracketCount] = field(default_factory=list)
    suggested_price_points: SuggestedPricePoints = field(default_factory=SuggestedPricePoints)
    by_intensity: Dict[LobbyIntensity, IntensityStats] = field(default_factory=dict)
    demand_curve: List[DemandPoint] = field(default_factory=list)
    optimal_price: float = 0.0
    max_revenue: float = 0.0
