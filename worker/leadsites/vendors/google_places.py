"""Client utilities for the Google Places API."""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://maps.googleapis.com/maps/api/place"
REQUEST_TIMEOUT = 10
DETAIL_FIELDS = "name,formatted_address,formatted_phone_number,website,opening_hours,rating,reviews,photos,types,url"
_SUCCESS_STATUSES = {"OK", "ZERO_RESULTS"}


class GooglePlacesError(RuntimeError):
    """Raised when the Places API returns a non-successful response."""

    def __init__(self, status: str, message: Optional[str] = None) -> None:
        self.status = status
        self.message = message or ""
        super().__init__(f"{status} - {self.message}" if self.message else status)


class SearchError(GooglePlacesError):
    """The text search call failed; the whole scrape run cannot proceed."""


class PlaceDetailsError(GooglePlacesError):
    """A details lookup failed for a single place."""


def _get_json(endpoint: str, params: Dict[str, Any], error_cls: type) -> Dict[str, Any]:
    try:
        response = _SESSION.get(f"{_BASE_URL}/{endpoint}/json", params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as exc:
        raise error_cls("REQUEST_FAILED", str(exc)) from exc

    status = payload.get("status")
    if status not in _SUCCESS_STATUSES:
        logger.error("%s failed: status=%s, error_message=%s", endpoint, status, payload.get("error_message"))
        raise error_cls(status or "UNKNOWN", payload.get("error_message"))
    return payload


def text_search(query: str, api_key: str, pagetoken: Optional[str] = None) -> Dict[str, Any]:
    params = {"query": query, "key": api_key}
    if pagetoken:
        params["pagetoken"] = pagetoken
    return _get_json("textsearch", params, SearchError)


def place_details(place_id: str, api_key: str) -> Dict[str, Any]:
    params = {"place_id": place_id, "fields": DETAIL_FIELDS, "key": api_key}
    payload = _get_json("details", params, PlaceDetailsError)
    result = payload.get("result")
    if not isinstance(result, dict) or not result:
        raise PlaceDetailsError(payload.get("status") or "UNKNOWN", "details response has no result")
    return result


def photo_url(photo_reference: str, api_key: str, max_width: int = 800) -> str:
    """Build a photo URL without touching the network."""
    query = urlencode({"maxwidth": max_width, "photo_reference": photo_reference, "key": api_key})
    return f"{_BASE_URL}/photo?{query}"
