"""
Data models for the stats aggregator.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class BusinessStatsResult:
    """Computed review statistics for one business."""
    business_id: str
    total_reviews: int
    average_rating: float
    rating_distribution: dict[str, int]
    percentiles: dict[str, int]
    raw_tag_scores: dict[str, float] = field(default_factory=dict)
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "business_id": self.business_id,
            "total_reviews": self.total_reviews,
            "average_rating": self.average_rating,
            "rating_distribution": self.rating_distribution,
            "percentiles": self.percentiles,
            "raw_tag_scores": self.raw_tag_scores,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_model(cls, row) -> "BusinessStatsResult":
        return cls(
            business_id=row.business_id,
            total_reviews=row.total_reviews,
            average_rating=row.average_rating,
            rating_distribution=dict(row.rating_distribution or {}),
            percentiles=dict(row.percentiles or {}),
            raw_tag_scores=dict(row.raw_tag_scores or {}),
            updated_at=row.updated_at,
        )
