"""CLI job to render a static site for every business in a data file."""

import argparse
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from leadsites.core.config import ConfigError, get_settings
from leadsites.core.models import BusinessRecord, Manifest, ManifestEntry
from leadsites.sites.renderer import generate_site

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"


class NoDataFilesError(FileNotFoundError):
    """The data directory holds no scrape output to generate from."""


def latest_data_file(data_dir: Path) -> str:
    """Return the name of the newest data file; names end in a timestamp."""
    data_dir = Path(data_dir)
    candidates = sorted(path.name for path in data_dir.glob("*.json")) if data_dir.is_dir() else []
    if not candidates:
        raise NoDataFilesError(f"No data files found in {data_dir}")
    return candidates[-1]


def _write_json(path: Path, payload: object) -> None:
    with path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, ensure_ascii=False, indent=2)


def generate_from_data_file(
    data_file: str,
    *,
    data_dir: Optional[Path] = None,
    sites_dir: Optional[Path] = None,
    templates_dir: Optional[Path] = None,
    activate_base_url: Optional[str] = None,
    template_name: Optional[str] = None,
) -> List[ManifestEntry]:
    settings = get_settings()
    data_dir = Path(data_dir or settings.data_dir)
    sites_dir = Path(sites_dir or settings.sites_dir)
    templates_dir = Path(templates_dir or settings.templates_dir)
    activate_base_url = activate_base_url or settings.activate_base_url

    data_path = data_dir / data_file
    with data_path.open("r", encoding="utf-8") as fh:
        entries = json.load(fh)
    if not isinstance(entries, list):
        raise ValueError(f"{data_path} must contain a JSON array of businesses")
    logger.info("Loaded %d businesses from %s", len(entries), data_file)

    sites_dir.mkdir(parents=True, exist_ok=True)
    generated: List[ManifestEntry] = []

    for entry in entries:
        label = entry.get("name") if isinstance(entry, dict) else entry
        try:
            business = BusinessRecord.from_dict(entry)
            site = generate_site(
                business,
                template_name,
                templates_dir=templates_dir,
                activate_base_url=activate_base_url,
            )
            if not site.slug:
                raise ValueError("business name yields an empty slug")

            site_dir = sites_dir / site.slug
            site_dir.mkdir(parents=True, exist_ok=True)
            (site_dir / "index.html").write_text(site.html, encoding="utf-8")
            _write_json(site_dir / "data.json", entry)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to generate site for %s: %s", label, exc)
            continue

        generated.append(
            ManifestEntry(
                name=business.name,
                slug=site.slug,
                phone=business.phone,
                rating=business.rating,
                path=str(site_dir),
            )
        )
        logger.info("Generated %s/", site.slug)

    manifest = Manifest(
        generated_at=datetime.now(timezone.utc).isoformat(),
        source=data_file,
        sites=generated,
    )
    _write_json(sites_dir / MANIFEST_NAME, manifest.to_dict())

    logger.info("Generated %d sites in %s", len(generated), sites_dir)
    return generated


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate static sites from a scraped data file")
    parser.add_argument(
        "data_file",
        nargs="?",
        help="Data file name inside the data directory (defaults to the most recent one)",
    )
    parser.add_argument("--template", dest="template_name", help="Template name to use for every business")
    return parser


def main(argv: Optional[list] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    try:
        settings = get_settings()
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(1) from exc
    args = build_parser().parse_args(argv)

    try:
        data_file = args.data_file or latest_data_file(settings.data_dir)
        generate_from_data_file(data_file, template_name=args.template_name)
    except NoDataFilesError as exc:
        logger.error("%s. Run the scraper first.", exc)
        raise SystemExit(1) from exc
    except (OSError, ValueError) as exc:
        logger.error("Site generation failed: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
