"""Utilities for transforming Google Places responses into business records."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from leadsites.core.models import BusinessRecord, PhotoRef, Review
from leadsites.vendors.google_places import photo_url

logger = logging.getLogger(__name__)

MAX_REVIEWS = 5
MAX_PHOTOS = 5


def _to_review(raw: Dict[str, Any]) -> Review:
    return Review(
        author=raw.get("author_name") or "",
        rating=raw.get("rating") or 0,
        text=raw.get("text") or "",
        time=raw.get("relative_time_description") or "",
    )


def _to_photo(raw: Dict[str, Any], api_key: str) -> PhotoRef:
    attributions = raw.get("html_attributions") or []
    return PhotoRef(
        url=photo_url(raw.get("photo_reference", ""), api_key),
        attribution=attributions[0] if attributions else None,
    )


def _weekday_text(opening_hours: Optional[Dict[str, Any]]) -> Optional[Tuple[str, ...]]:
    if not opening_hours:
        return None
    weekday_text: Optional[Iterable[str]] = opening_hours.get("weekday_text")
    if weekday_text is None:
        return None
    return tuple(weekday_text)


def to_business_record(
    place_id: Optional[str],
    details: Dict[str, Any],
    *,
    category: str,
    location: str,
    api_key: str,
    scraped_at: Optional[str] = None,
) -> BusinessRecord:
    reviews: List[Dict[str, Any]] = details.get("reviews") or []
    photos: List[Dict[str, Any]] = details.get("photos") or []
    if scraped_at is None:
        scraped_at = datetime.now(timezone.utc).isoformat()

    return BusinessRecord(
        id=place_id or details.get("place_id"),
        name=details.get("name") or "",
        category=category,
        location=location,
        scraped_at=scraped_at,
        address=details.get("formatted_address"),
        phone=details.get("formatted_phone_number") or None,
        website=details.get("website") or None,
        rating=details.get("rating") or None,
        review_count=len(reviews),
        reviews=tuple(_to_review(raw) for raw in reviews[:MAX_REVIEWS]),
        hours=_weekday_text(details.get("opening_hours")),
        photos=tuple(_to_photo(raw, api_key) for raw in photos[:MAX_PHOTOS]),
        google_maps_url=details.get("url"),
        types=tuple(details.get("types") or []),
    )
