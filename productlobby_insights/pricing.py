"""Willingness-to-pay analysis over supporter price ceilings"""
import math
from bisect import bisect_left
from collections import Counter
from typing import Dict, List, Sequence

from productlobby_insights.models.db import LobbyIntensity
from productlobby_insights.models.pricing import (
    BracketCount, DemandPoint, IntensityStats, PriceBracket, PricingAnalysis,
    PricingResponse, SuggestedPricePoints
)
from productlobby_insights.utils.rounding import money, percentage

PRICE_BRACKETS = (
    PriceBracket(0, 10),
    PriceBracket(10, 25),
    PriceBracket(25, 50),
    PriceBracket(50, 100),
    PriceBracket(100, 250),
    PriceBracket(250),
)

ROUND_PRICE_STEP = 5

class PricingAnalyzer:
    """Computes price statistics, a demand curve and the revenue-maximising price"""

    def __init__(self, demand_curve_max_points: int = 20):
        self.demand_curve_max_points = demand_curve_max_points

    def empty_analysis(self, total_responses: int = 0) -> PricingAnalysis:
        """Zero-valued result for campaigns without usable price data"""
        return PricingAnalysis(
            total_responses=total_responses,
            distribution=[BracketCount(b.label, 0, 0) for b in PRICE_BRACKETS],
            by_intensity={level: IntensityStats() for level in LobbyIntensity}
        )

    def median(self, sorted_prices: Sequence[float]) -> float:
        middle = len(sorted_prices) // 2
        if len(sorted_prices) % 2 == 0:
            return (sorted_prices[middle - 1] + sorted_prices[middle]) / 2
        return sorted_prices[middle]

    def mode(self, prices: Sequence[float]) -> float:
        """Most frequent price; ties go to the lowest price"""
        frequency = Counter(prices)
        return min(frequency, key=lambda price: (-frequency[price], price))

    def bucket_prices(self, prices: Sequence[float]) -> List[BracketCount]:
        distribution = []
        for bracket in PRICE_BRACKETS:
            count = sum(1 for p in prices if bracket.contains(p))
            distribution.append(BracketCount(bracket.label, count, percentage(count, len(prices))))
        return distribution

    def suggest_price_points(self, sorted_prices: Sequence[float]) -> SuggestedPricePoints:
        """Lower quartile, median and upper quartile of the sorted prices"""
        n = len(sorted_prices)
        return SuggestedPricePoints(
            economy=money(sorted_prices[math.floor(n * 0.25)]),
            standard=money(sorted_prices[math.floor(n * 0.5)]),
            premium=money(sorted_prices[math.floor(n * 0.75)])
        )

    def by_intensity(self, responses: Sequence[PricingResponse]) -> Dict[LobbyIntensity, IntensityStats]:
        grouped: Dict[LobbyIntensity, List[float]] = {level: [] for level in LobbyIntensity}
        for response in responses:
            grouped[response.intensity].append(response.price)

        return {
            level: IntensityStats(
                avg=money(sum(prices) / len(prices)) if prices else 0.0,
                count=len(prices)
            )
            for level, prices in grouped.items()
        }

    def buyers_at(self, sorted_prices: Sequence[float], candidate: float) -> int:
        """Responses willing to pay at least ``candidate``; prices must be sorted"""
        return len(sorted_prices) - bisect_left(sorted_prices, candidate)

    def demand_curve(self, sorted_prices: Sequence[float]) -> List[DemandPoint]:
        unique_prices = sorted(set(sorted_prices))[:self.demand_curve_max_points]
        return [DemandPoint(money(p), self.buyers_at(sorted_prices, p)) for p in unique_prices]

    def grid_candidates(self, unique_prices: Sequence[float]) -> List[float]:
        """
        Round prices worth scanning from the step grid starting at ``max(1, floor(min))``.

        Between two neighbouring observed prices the buyer count is constant, so
        only the highest grid price in each gap can lead; one per gap is kept.
        """
        start = max(1, math.floor(unique_prices[0]))
        grid = []
        lower = None
        for upper in unique_prices:
            # highest grid price strictly below ``upper``
            steps = math.ceil((upper - start) / ROUND_PRICE_STEP) - 1
            if steps >= 0:
                point = start + steps * ROUND_PRICE_STEP
                if lower is None or point > lower:
                    grid.append(point)
            lower = upper
        if start <= unique_prices[-1]:
            steps = math.floor((unique_prices[-1] - start) / ROUND_PRICE_STEP)
            grid.append(start + steps * ROUND_PRICE_STEP)
        return grid

    def optimal_price(self, sorted_prices: Sequence[float], fallback: float) -> tuple[float, float]:
        """
        Price maximising ``price * buyers`` over observed prices plus the step
        grid of round prices. Candidates are scanned in ascending order so ties
        resolve to the lowest price.

        Returns:
            Tuple[float, float]: (optimal_price, max_revenue)
        """
        unique_prices = sorted(set(sorted_prices))
        candidates = set(unique_prices)
        candidates.update(self.grid_candidates(unique_prices))

        best_price, best_revenue = fallback, 0.0
        for candidate in sorted(candidates):
            revenue = candidate * self.buyers_at(sorted_prices, candidate)
            if revenue > best_revenue:
                best_price, best_revenue = candidate, revenue
        return money(best_price), money(best_revenue)

    def analyze(self, responses: Sequence[PricingResponse]) -> PricingAnalysis:
        """Full analysis; degenerate input yields the empty analysis, never NaN"""
        if not responses:
            return self.empty_analysis()

        usable = [r for r in responses if r.price > 0]
        if not usable:
            return self.empty_analysis(total_responses=len(responses))

        prices = [r.price for r in usable]
        sorted_prices = sorted(prices)
        median_price = self.median(sorted_prices)
        optimal, max_revenue = self.optimal_price(sorted_prices, median_price)

        return PricingAnalysis(
            total_responses=len(prices),
            average_price=money(sum(prices) / len(prices)),
            median_price=money(median_price),
            mode_price=money(self.mode(prices)),
            min_price=money(sorted_prices[0]),
            max_price=money(sorted_prices[-1]),
            distribution=self.bucket_prices(prices),
            suggested_price_points=self.suggest_price_points(sorted_prices),
            by_intensity=self.by_intensity(usable),
            demand_curve=self.demand_curve(sorted_prices),
            optimal_price=optimal,
            max_revenue=max_revenue
        )
