"""Core data models shared by the scraper and the site generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True, slots=True)
class Review:
    author: str
    rating: float
    text: str
    time: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"author": self.author, "rating": self.rating, "text": self.text, "time": self.time}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Review":
        return cls(
            author=data.get("author") or "",
            rating=data.get("rating") or 0,
            text=data.get("text") or "",
            time=data.get("time") or "",
        )


@dataclass(frozen=True, slots=True)
class PhotoRef:
    url: str
    attribution: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "attribution": self.attribution}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PhotoRef":
        return cls(url=data["url"], attribution=data.get("attribution"))


@dataclass(frozen=True, slots=True)
class BusinessRecord:
    """Normalized snapshot of a business returned by Google Places.

    ``review_count`` holds the number of reviews upstream returned, which can
    be larger than ``len(reviews)`` once the stored list is truncated.
    """

    id: Optional[str]
    name: str
    category: str
    location: str
    scraped_at: str
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    rating: Optional[float] = None
    review_count: int = 0
    reviews: Tuple[Review, ...] = ()
    hours: Optional[Tuple[str, ...]] = None
    photos: Tuple[PhotoRef, ...] = ()
    google_maps_url: Optional[str] = None
    types: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize into the JSON shape written to data files."""
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "website": self.website,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "reviews": [review.to_dict() for review in self.reviews],
            "hours": list(self.hours) if self.hours is not None else None,
            "photos": [photo.to_dict() for photo in self.photos],
            "googleMapsUrl": self.google_maps_url,
            "types": list(self.types),
            "category": self.category,
            "location": self.location,
            "scrapedAt": self.scraped_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BusinessRecord":
        """Build a record from a data-file entry. ``name`` is mandatory."""
        if not isinstance(data, dict):
            raise TypeError(f"Business entry must be an object, got {type(data).__name__}")
        name = data["name"]
        if not name:
            raise ValueError("Business entry has an empty name")

        hours = data.get("hours")
        return cls(
            id=data.get("id"),
            name=name,
            category=data.get("category") or "",
            location=data.get("location") or "",
            scraped_at=data.get("scrapedAt") or "",
            address=data.get("address"),
            phone=data.get("phone"),
            website=data.get("website"),
            rating=data.get("rating"),
            review_count=int(data.get("reviewCount") or 0),
            reviews=tuple(Review.from_dict(item) for item in data.get("reviews") or []),
            hours=tuple(hours) if hours is not None else None,
            photos=tuple(PhotoRef.from_dict(item) for item in data.get("photos") or []),
            google_maps_url=data.get("googleMapsUrl"),
            types=tuple(data.get("types") or []),
        )


@dataclass(slots=True)
class SkippedBusiness:
    id: Optional[str]
    name: Optional[str]
    website: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "website": self.website}


@dataclass(slots=True)
class FailedBusiness:
    id: Optional[str]
    name: Optional[str]
    error: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "error": self.error}


@dataclass(slots=True)
class SkipLedger:
    """Candidates left out of a scrape run, kept for the run summary only."""

    has_website: List[SkippedBusiness] = field(default_factory=list)
    failed: List[FailedBusiness] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasWebsite": [entry.to_dict() for entry in self.has_website],
            "failed": [entry.to_dict() for entry in self.failed],
        }


@dataclass(slots=True)
class ScrapeResult:
    businesses: List[BusinessRecord] = field(default_factory=list)
    skipped: SkipLedger = field(default_factory=SkipLedger)
    examined: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "businesses": [business.to_dict() for business in self.businesses],
            "skipped": self.skipped.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class GeneratedSite:
    slug: str
    html: str = field(repr=False)
    business: BusinessRecord = field(repr=False)


@dataclass(frozen=True, slots=True)
class ManifestEntry:
    name: str
    slug: str
    phone: Optional[str]
    rating: Optional[float]
    path: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "slug": self.slug, "phone": self.phone, "rating": self.rating, "path": self.path}


@dataclass(slots=True)
class Manifest:
    generated_at: str
    source: str
    sites: List[ManifestEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "source": self.source,
            "sites": [entry.to_dict() for entry in self.sites],
        }
