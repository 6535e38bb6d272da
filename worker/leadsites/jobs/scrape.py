"""CLI job to fetch Google Places prospects and save them to a data file."""

import argparse
import json
import logging
import re
import time
from functools import partial
from pathlib import Path
from typing import Callable, Iterator, Optional

from leadsites.core.config import ConfigError, get_settings
from leadsites.core.models import FailedBusiness, ScrapeResult, SkippedBusiness
from leadsites.core.site_probe import QUALITY_BROKEN, ProbeResult, probe_website
from leadsites.etl.transform import to_business_record
from leadsites.vendors import google_places

logger = logging.getLogger(__name__)

# Google rejects a next_page_token used sooner than this after it was issued.
PAGE_TOKEN_DELAY = 2.0

Pacer = Callable[[], None]
Prober = Callable[[Optional[str]], ProbeResult]


def fixed_delay(seconds: float) -> Pacer:
    def pause() -> None:
        time.sleep(seconds)

    return pause


def _iter_candidates(query: str, api_key: str, max_pages: int) -> Iterator[dict]:
    """Yield raw search results page by page; only the first page may raise."""

    response = google_places.text_search(query=query, api_key=api_key)
    pages = 1
    while True:
        results = response.get("results", [])
        logger.info("Fetched %d results on page %d", len(results), pages)
        yield from results

        page_token = response.get("next_page_token")
        if not page_token or pages >= max_pages:
            return
        time.sleep(PAGE_TOKEN_DELAY)
        try:
            response = google_places.text_search(query=query, api_key=api_key, pagetoken=page_token)
        except google_places.SearchError as exc:
            logger.warning("Stopping after page %d, next page failed: %s", pages, exc)
            return
        pages += 1


def scrape_businesses(
    category: str,
    location: str,
    limit: int = 20,
    *,
    no_website_only: bool = False,
    api_key: Optional[str] = None,
    pacer: Optional[Pacer] = None,
    probe: Optional[Prober] = None,
    max_pages: Optional[int] = None,
) -> ScrapeResult:
    """Search for ``category`` in ``location`` and collect up to ``limit`` prospects.

    With ``no_website_only`` set, candidates whose listed website answers are
    skipped, and skipped or failed candidates do not count toward ``limit``.
    A listed website that is down counts as no working site.

    Raises ``SearchError`` when the initial search fails. Failures on single
    candidates are recorded in the result's ledger instead.
    """

    if limit <= 0:
        raise ValueError("limit must be positive")

    settings = get_settings()
    api_key = api_key or settings.google_places_api_key
    if not api_key:
        raise RuntimeError("GOOGLE_PLACES_API_KEY is required")
    if pacer is None:
        pacer = fixed_delay(settings.request_delay_seconds)
    if probe is None:
        probe = partial(probe_website, timeout=settings.probe_timeout_seconds)
    if max_pages is None:
        max_pages = settings.max_pages

    query = f"{category} in {location}"
    logger.info("Searching for %s (limit=%d, no_website_only=%s)", query, limit, no_website_only)

    result = ScrapeResult()
    for place in _iter_candidates(query, api_key, max(max_pages, 1)):
        result.examined += 1

        place_id = place.get("place_id")
        place_name = place.get("name")
        if not place_id:
            logger.debug("Skipping result without place_id: %s", place)
            continue

        logger.info("Getting details for %s (%d/%d accepted)", place_name, len(result.businesses), limit)
        try:
            details = google_places.place_details(place_id=place_id, api_key=api_key)
            if place_name and not details.get("name"):
                details = {**details, "name": place_name}
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to get details for %s: %s", place_name or place_id, exc)
            result.skipped.failed.append(FailedBusiness(id=place_id, name=place_name, error=str(exc)))
            continue

        website = details.get("website")
        if no_website_only and website:
            try:
                outcome = probe(website)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Website probe raised for %s: %s", website, exc)
                outcome = ProbeResult(exists=False, quality=QUALITY_BROKEN)
            if outcome.exists:
                logger.info("Skipping %s: website %s is up", details.get("name"), website)
                result.skipped.has_website.append(
                    SkippedBusiness(id=place_id, name=details.get("name"), website=website)
                )
                continue
            logger.info("Keeping %s: website %s is %s", details.get("name"), website, outcome.quality)

        try:
            business = to_business_record(
                place_id, details, category=category, location=location, api_key=api_key
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to normalize %s: %s", place_name or place_id, exc)
            result.skipped.failed.append(FailedBusiness(id=place_id, name=place_name, error=str(exc)))
            continue

        result.businesses.append(business)
        pacer()
        if len(result.businesses) >= limit:
            break

    logger.info(
        "Completed scrape: examined=%d accepted=%d has_website=%d failed=%d",
        result.examined,
        len(result.businesses),
        len(result.skipped.has_website),
        len(result.skipped.failed),
    )
    return result


def data_file_name(category: str, location: str, no_website_only: bool, timestamp_ms: int) -> str:
    suffix = "_no-site" if no_website_only else ""
    category_part = re.sub(r"\s+", "_", category)
    location_part = re.sub(r"[,\s]+", "_", location)
    return f"{category_part}_{location_part}{suffix}_{timestamp_ms}.json"


def save_businesses(result: ScrapeResult, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump([business.to_dict() for business in result.businesses], fh, ensure_ascii=False, indent=2)
    return path


def log_summary(result: ScrapeResult) -> None:
    for business in result.businesses:
        has_phone = "phone" if business.phone else "-"
        has_website = "site" if business.website else "-"
        rating = f"{business.rating}" if business.rating else "-"
        logger.info("  %-5s %-4s %-4s %s", has_phone, has_website, rating, business.name)
    if result.skipped.has_website:
        logger.info("Skipped %d businesses with a working website", len(result.skipped.has_website))
    for failed in result.skipped.failed:
        logger.info("  failed: %s (%s)", failed.name or failed.id, failed.error)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Scrape Google Places for local business prospects")
    parser.add_argument("category", nargs="?", default=settings.default_category, help="Business category to search")
    parser.add_argument("location", nargs="?", default=settings.default_location, help="City or area to search in")
    parser.add_argument("limit", nargs="?", type=int, default=20, help="Number of prospects to collect")
    parser.add_argument(
        "--no-website",
        dest="no_website_only",
        action="store_true",
        help="Only keep businesses without a working website",
    )
    parser.add_argument(
        "--max-pages",
        dest="max_pages",
        type=int,
        default=settings.max_pages,
        help="Maximum number of search result pages to walk",
    )
    return parser


def main(argv: Optional[list] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    try:
        settings = get_settings()
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(1) from exc
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.location:
        parser.error("location is required when DEFAULT_LOCATION is not configured")
    if args.limit <= 0:
        parser.error("limit must be positive")

    try:
        result = scrape_businesses(
            args.category,
            args.location,
            args.limit,
            no_website_only=args.no_website_only,
            max_pages=args.max_pages,
        )
    except google_places.SearchError as exc:
        logger.error("Search failed: %s", exc)
        raise SystemExit(1) from exc
    except RuntimeError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(1) from exc

    filename = data_file_name(args.category, args.location, args.no_website_only, int(time.time() * 1000))
    path = save_businesses(result, settings.data_dir / filename)
    logger.info("Saved %d businesses to %s", len(result.businesses), path)
    log_summary(result)


if __name__ == "__main__":
    main()
