"""Render a business record into a static marketing page."""

from __future__ import annotations

import html
import logging
import math
import random
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Sequence

from leadsites.core import templating
from leadsites.core.config import DEFAULT_ACTIVATE_BASE_URL, DEFAULT_TEMPLATES_DIR
from leadsites.core.models import BusinessRecord, GeneratedSite, Review

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "plumber"
DEFAULT_CITY = "your area"
SLUG_MAX_LENGTH = 50
MAX_RENDERED_REVIEWS = 3
REVIEW_TEXT_LIMIT = 250

FULL_STAR = "★"
HALF_STAR = "½"
EMPTY_STAR = "☆"

# Ordered: the first rule whose keyword appears in the category wins.
TEMPLATE_RULES = (
    (("landscap", "lawn"), "landscaper"),
    (("handyman", "repair"), "handyman"),
    (("plumb",), "plumber"),
    (("clean", "maid"), "handyman"),
    (("pressure", "wash"), "landscaper"),
)

TAGLINES: Dict[str, Sequence[str]] = {
    "plumber": (
        "Fast, reliable service you can trust. Available 24/7 for emergencies.",
        "Professional plumbing solutions for your home and business.",
        "Quality workmanship and honest pricing. Serving the community for years.",
    ),
    "landscaper": (
        "Professional landscaping that transforms your outdoor space into something extraordinary.",
        "From design to installation, we create stunning landscapes that last.",
        "Your vision, our expertise. Beautiful outdoor spaces start here.",
        "Quality craftsmanship and attention to detail in every project.",
    ),
    "handyman": (
        "No job too small. Fast, reliable repairs you can count on.",
        "Your one-call solution for home repairs and improvements.",
        "Honest work, fair prices. Getting things done right the first time.",
        "From honey-do lists to major fixes, we handle it all.",
    ),
    "house cleaner": (
        "Professional cleaning that makes your home sparkle.",
        "Reliable, thorough cleaning services you can trust.",
        "A clean home is a happy home. Let us help.",
    ),
    "pressure washing": (
        "Restore your property's curb appeal with professional pressure washing.",
        "Powerful cleaning that makes surfaces look new again.",
        "Expert pressure washing for homes and businesses.",
    ),
    "default": (
        "Professional service you can trust. Serving the local community.",
        "Quality work at fair prices. Call us today for a free estimate.",
        "Your local experts. Reliable, professional, and ready to help.",
    ),
}

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")
_CITY_PATTERN = re.compile(r",\s*([^,]+),\s*[A-Z]{2}")

Chooser = Callable[[Sequence[str]], str]


class TemplateNotFoundError(FileNotFoundError):
    """Neither the resolved template nor the default template exists."""


def generate_slug(name: str) -> str:
    slug = _SLUG_INVALID.sub("-", (name or "").lower()).strip("-")
    return slug[:SLUG_MAX_LENGTH].rstrip("-")


def extract_city(address: Optional[str]) -> str:
    if not address:
        return DEFAULT_CITY
    match = _CITY_PATTERN.search(address)
    return match.group(1).strip() if match else DEFAULT_CITY


def template_name_for(category: Optional[str]) -> str:
    lowered = (category or "").lower()
    for keywords, template_name in TEMPLATE_RULES:
        if any(keyword in lowered for keyword in keywords):
            return template_name
    return DEFAULT_TEMPLATE


def pick_tagline(category: Optional[str], choose: Chooser = random.choice) -> str:
    options = TAGLINES.get((category or "").lower()) or TAGLINES["default"]
    return choose(options)


def load_template(template_name: str, templates_dir: Path = DEFAULT_TEMPLATES_DIR) -> str:
    path = Path(templates_dir) / f"{template_name}.html"
    if not path.is_file():
        fallback = Path(templates_dir) / f"{DEFAULT_TEMPLATE}.html"
        logger.debug("Template %s not found, falling back to %s", path, fallback)
        path = fallback
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise TemplateNotFoundError(f"No template available at {path}") from exc


def render_stars(rating: Optional[float]) -> str:
    value = min(max(float(rating or 0), 0.0), 5.0)
    full = math.floor(value)
    half = 1 if value - full >= 0.5 else 0
    return FULL_STAR * full + HALF_STAR * half + EMPTY_STAR * (5 - full - half)


def _truncate(text: str, limit: int = REVIEW_TEXT_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."


def render_reviews_html(reviews: Iterable[Review]) -> str:
    cards = []
    for review in list(reviews)[:MAX_RENDERED_REVIEWS]:
        cards.append(
            f"""
    <div class="review-card">
      <div class="review-header">
        <span class="review-stars">{render_stars(review.rating)}</span>
      </div>
      <p class="review-text">"{_text(_truncate(review.text))}"</p>
      <p class="review-author">— {_text(review.author)}</p>
    </div>
  """
        )
    return "\n".join(cards)


def _text(value: Optional[str]) -> str:
    return html.escape(value or "", quote=False)


def _attr(value: Optional[str]) -> str:
    return html.escape(value or "", quote=True)


def render_hours_html(hours: Optional[Iterable[str]]) -> str:
    items = []
    for entry in hours or ():
        day, _, time = entry.partition(": ")
        items.append(f"<li><span>{_text(day)}</span><span>{_text(time or 'Closed')}</span></li>")
    return "\n".join(items)


def _format_rating(rating: Optional[float]) -> str:
    if not rating:
        return ""
    return f"{rating:g}"


def generate_site(
    business: BusinessRecord,
    template_name: Optional[str] = None,
    *,
    templates_dir: Path = DEFAULT_TEMPLATES_DIR,
    activate_base_url: str = DEFAULT_ACTIVATE_BASE_URL,
    choose: Chooser = random.choice,
    year: Optional[int] = None,
) -> GeneratedSite:
    """Fill a template for ``business`` and return the page with its slug."""

    resolved_name = template_name or template_name_for(business.category)
    template = load_template(resolved_name, templates_dir)

    slug = generate_slug(business.name)
    replacements = {
        "{{BUSINESS_NAME}}": _text(business.name),
        "{{PHONE}}": _attr(business.phone),
        "{{ADDRESS}}": _text(business.address),
        "{{CITY}}": _text(extract_city(business.address)),
        "{{RATING}}": _format_rating(business.rating),
        "{{REVIEW_COUNT}}": str(business.review_count or 0),
        "{{STARS_HTML}}": render_stars(business.rating) if business.rating else "",
        "{{REVIEWS_HTML}}": render_reviews_html(business.reviews),
        "{{HOURS_HTML}}": render_hours_html(business.hours),
        "{{GOOGLE_MAPS_URL}}": _attr(business.google_maps_url or "#"),
        "{{WEBSITE}}": _attr(business.website),
        "{{TAGLINE}}": pick_tagline(business.category, choose),
        "{{ACTIVATE_URL}}": f"{activate_base_url.rstrip('/')}/activate/{slug}",
        "{{YEAR}}": str(year or datetime.now().year),
    }
    conditions = {
        "PHONE": bool(business.phone),
        "RATING": bool(business.rating),
        "HAS_REVIEWS": bool(business.reviews),
        "HAS_HOURS": bool(business.hours),
    }

    rendered = templating.render(template, replacements, conditions)
    return GeneratedSite(slug=slug, html=rendered, business=business)
