"""
Data models for the Ranker module.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from processor.stats import neutral_scores


@dataclass
class BusinessSnapshot:
    """One active business with the stats and recent activity it is ranked on."""
    id: str
    name: str
    created_at: datetime
    category: Optional[str] = None
    slug: Optional[str] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    price_range: Optional[str] = None
    verified: bool = False
    has_description: bool = False
    has_image: bool = False
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    # From business_stats (neutral zero state when the row is missing)
    total_reviews: int = 0
    average_rating: float = 0.0
    percentiles: dict = field(default_factory=neutral_scores)

    # Recent review activity
    reviews_short_window: int = 0
    reviews_long_window: int = 0
    recent_avg_rating: Optional[float] = None

    @classmethod
    def from_rows(cls, business, stats=None, activity: tuple = None) -> "BusinessSnapshot":
        """Build from a Business row, its BusinessStats row and a recent-activity tuple."""
        short_count, long_count, recent_avg = activity or (0, 0, None)
        return cls(
            id=business.id,
            name=business.name,
            created_at=business.created_at,
            category=business.category,
            slug=business.slug,
            location=business.location,
            image_url=business.image_url,
            price_range=business.price_range,
            verified=bool(business.verified),
            has_description=business.has_description,
            has_image=business.has_image,
            latitude=business.lat,
            longitude=business.lng,
            total_reviews=stats.total_reviews if stats else 0,
            average_rating=stats.average_rating if stats else 0.0,
            percentiles=dict(stats.percentiles) if stats and stats.percentiles else neutral_scores(),
            reviews_short_window=short_count,
            reviews_long_window=long_count,
            recent_avg_rating=recent_avg,
        )


@dataclass
class RankingSnapshot:
    """Everything one refresh ranks, read at a single point in time."""
    taken_at: datetime
    businesses: list[BusinessSnapshot] = field(default_factory=list)


@dataclass
class RankedEntryData:
    """One row of a ranked set as served to the discovery feed."""
    business_id: str
    name: str
    category: Optional[str]
    total_reviews: int
    average_rating: float
    score: Optional[float] = None
    slug: Optional[str] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    verified: bool = False
    price_range: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[datetime] = None
    percentiles: Optional[dict] = None
    recent_reviews_7d: Optional[int] = None
    recent_reviews_30d: Optional[int] = None
    recent_avg_rating: Optional[float] = None
    days_old: Optional[int] = None
    last_refreshed: Optional[datetime] = None

    def to_row(self) -> dict:
        """Column values for RankedSetRepository.replace_set()."""
        row = self.__dict__.copy()
        row.pop("last_refreshed")
        return row

    def to_dict(self) -> dict:
        data = self.__dict__.copy()
        for key in ("created_at", "last_refreshed"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data

    @classmethod
    def from_model(cls, row) -> "RankedEntryData":
        return cls(
            business_id=row.business_id,
            name=row.name,
            category=row.category,
            total_reviews=row.total_reviews,
            average_rating=row.average_rating,
            score=row.score,
            slug=row.slug,
            location=row.location,
            image_url=row.image_url,
            verified=row.verified,
            price_range=row.price_range,
            latitude=row.latitude,
            longitude=row.longitude,
            created_at=row.created_at,
            percentiles=row.percentiles,
            recent_reviews_7d=row.recent_reviews_7d,
            recent_reviews_30d=row.recent_reviews_30d,
            recent_avg_rating=row.recent_avg_rating,
            days_old=row.days_old,
            last_refreshed=row.last_refreshed,
        )


@dataclass
class SetRefreshResult:
    """Outcome of rebuilding one ranked set."""
    set_name: str
    success: bool
    entry_count: int = 0
    generation: Optional[int] = None
    error: Optional[str] = None
    skipped: bool = False

    def to_dict(self) -> dict:
        return {
            "set_name": self.set_name,
            "success": self.success,
            "entry_count": self.entry_count,
            "generation": self.generation,
            "error": self.error,
            "skipped": self.skipped,
        }


@dataclass
class RefreshReport:
    """Outcome of one refresh_all() run."""
    started_at: datetime
    finished_at: Optional[datetime] = None
    skipped: bool = False
    results: dict[str, SetRefreshResult] = field(default_factory=dict)

    @property
    def failed_sets(self) -> list[str]:
        return [name for name, result in self.results.items() if not result.success]

    @property
    def success(self) -> bool:
        return not self.skipped and not self.failed_sets

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "skipped": self.skipped,
            "success": self.success,
            "failed_sets": self.failed_sets,
            "results": {name: result.to_dict() for name, result in self.results.items()},
        }
