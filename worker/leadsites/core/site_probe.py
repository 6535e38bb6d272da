"""Single-request liveness probe for a business's listed website."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger(__name__)

USER_AGENT = "LeadSitesBot/1.0 (+https://cornershopdigital.com/contact)"
PROBE_TIMEOUT = 5

QUALITY_NONE = "none"
QUALITY_HAS_SITE = "has-site"
QUALITY_BROKEN = "broken"
QUALITY_TIMEOUT = "timeout"


@dataclass(frozen=True, slots=True)
class ProbeResult:
    exists: bool
    quality: str


NO_SITE = ProbeResult(exists=False, quality=QUALITY_NONE)


def normalize_probe_url(raw_url: Optional[str]) -> Optional[str]:
    """Strip whitespace and default scheme-less URLs to http."""

    if not raw_url:
        return None
    url = raw_url.strip()
    if not url:
        return None
    if "://" not in url:
        url = f"http://{url}"
    return url


def probe_website(
    url: Optional[str],
    *,
    timeout: float = PROBE_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> ProbeResult:
    """Issue one GET against ``url`` and classify the outcome.

    Redirects are not followed: a 3xx answer already proves something is
    serving the domain. The body is streamed and never read.
    """

    target = normalize_probe_url(url)
    if target is None:
        return NO_SITE

    http = session or requests
    try:
        response = http.get(
            target,
            timeout=timeout,
            allow_redirects=False,
            stream=True,
            headers={"User-Agent": USER_AGENT},
        )
    except requests.Timeout:
        logger.info("Website probe timed out after %ss: %s", timeout, target)
        return ProbeResult(exists=False, quality=QUALITY_TIMEOUT)
    except (requests.RequestException, ValueError) as exc:
        logger.info("Website probe failed for %s: %s", target, exc)
        return ProbeResult(exists=False, quality=QUALITY_BROKEN)

    try:
        status = response.status_code
    finally:
        response.close()

    if 200 <= status < 400:
        return ProbeResult(exists=True, quality=QUALITY_HAS_SITE)
    logger.info("Website probe got HTTP %s for %s", status, target)
    return ProbeResult(exists=False, quality=QUALITY_BROKEN)
