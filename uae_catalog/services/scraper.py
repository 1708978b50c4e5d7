"""Crawl a catalog website: listing page -> university pages -> program pages.

Pages are fetched one at a time with a fixed delay. Any page-level failure
(timeout, connection error, HTTP error) raises FetchError and aborts the crawl;
a selector that matches nothing just leaves that field empty.
"""
from __future__ import annotations

import logging
import time
from typing import Callable
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup, Tag

from uae_catalog.services.sources import RawRecord, SourceBatch


logger = logging.getLogger(__name__)

UNIVERSITY_LINK_SELECTOR = ".university-card a, .university-item a"
UNIVERSITY_NAME_SELECTOR = "h1.university-name, .university-header h1"
UNIVERSITY_LOCATION_SELECTOR = "p.university-location, .university-meta p"
UNIVERSITY_IMAGE_SELECTOR = ".university-banner img, .university-image img"

PROGRAM_CARD_SELECTOR = ".program-card, .program-item"
CARD_NAME_SELECTOR = "h3, .program-name"
CARD_DETAIL_SELECTOR = ".program-detail, .detail-item"

# program page field -> (selector, label prefix to strip)
PROGRAM_PAGE_FIELDS: dict[str, tuple[str, str]] = {
    "name": ("h1.program-name, .program-header h1", ""),
    "degree": (".program-degree, .degree-level", "Degree:"),
    "duration": (".program-duration, .duration", "Duration:"),
    "tuition": (".program-tuition, .tuition-fees", "Tuition:"),
    "intake": (".program-intake, .intake-dates", "Intake:"),
    "studyField": (".program-field, .study-field", "Field:"),
    "hasScholarship": (".scholarship-info, .has-scholarship", "Scholarship:"),
}
REQUIREMENTS_SELECTOR = ".entry-requirements li, .requirements-list li, .documents-needed li"
PROGRAM_IMAGE_SELECTOR = ".program-image img, .program-banner img"

# inline card detail label -> raw field; first label found in the text wins
CARD_DETAIL_LABELS: tuple[tuple[str, str], ...] = (
    ("degree", "degree"),
    ("level", "degree"),
    ("duration", "duration"),
    ("tuition", "tuition"),
    ("fees", "tuition"),
    ("intake", "intake"),
    ("start", "intake"),
)


class FetchError(RuntimeError):
    pass


def _text(scope: BeautifulSoup | Tag, selector: str, strip_label: str = "") -> str:
    node = scope.select_one(selector)
    if node is None:
        return ""
    text = " ".join(node.get_text(" ", strip=True).split())
    if strip_label and text.lower().startswith(strip_label.lower()):
        text = text[len(strip_label):].strip()
    return text


def _attr(scope: BeautifulSoup | Tag, selector: str, attr: str, base_url: str) -> str:
    node = scope.select_one(selector)
    if node is None:
        return ""
    value = (node.get(attr) or "").strip()
    return urljoin(base_url, value) if value else ""


def parse_card_detail(text: str) -> tuple[str, str] | None:
    """Map a "Label: value" detail line onto a raw program field."""
    if ":" not in text:
        return None
    label, value = text.split(":", 1)
    label = label.strip().lower()
    value = value.strip()
    if not value:
        return None
    for needle, field_name in CARD_DETAIL_LABELS:
        if needle in label:
            return field_name, value
    return None


class CatalogScraper:
    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        delay_seconds: float = 0.5,
        timeout_seconds: float = 60.0,
        user_agent: str | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = base_url
        self.session = session or requests.Session()
        if user_agent:
            self.session.headers.update({"User-Agent": user_agent})
        self.delay_seconds = delay_seconds
        self.timeout_seconds = timeout_seconds
        self._sleep = sleep
        self._requests = 0

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "CatalogScraper":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_soup(self, url: str) -> BeautifulSoup:
        if self._requests and self.delay_seconds:
            self._sleep(self.delay_seconds)
        self._requests += 1
        try:
            resp = self.session.get(url, timeout=self.timeout_seconds)
            resp.raise_for_status()
        except requests.Timeout as exc:
            raise FetchError(f"Timed out after {self.timeout_seconds}s loading {url}") from exc
        except requests.RequestException as exc:
            raise FetchError(f"Failed to load {url}: {type(exc).__name__}: {exc}") from exc
        return BeautifulSoup(resp.text or "", "lxml")

    def university_links(self, soup: BeautifulSoup) -> list[str]:
        links: list[str] = []
        for anchor in soup.select(UNIVERSITY_LINK_SELECTOR):
            href = (anchor.get("href") or "").strip()
            if not href:
                continue
            full_url = urljoin(self.base_url, href)
            if full_url not in links:
                links.append(full_url)
        return links

    def parse_university(self, soup: BeautifulSoup, url: str) -> RawRecord:
        return {
            "name": _text(soup, UNIVERSITY_NAME_SELECTOR),
            "location": _text(soup, UNIVERSITY_LOCATION_SELECTOR),
            "imageUrl": _attr(soup, UNIVERSITY_IMAGE_SELECTOR, "src", url),
            "sourceUrl": url,
        }

    def parse_program_card(self, card: Tag, page_url: str) -> tuple[RawRecord, str]:
        record: RawRecord = {"name": _text(card, CARD_NAME_SELECTOR)}
        for detail in card.select(CARD_DETAIL_SELECTOR):
            parsed = parse_card_detail(" ".join(detail.get_text(" ", strip=True).split()))
            if parsed is None:
                continue
            field_name, value = parsed
            record.setdefault(field_name, value)
        image = _attr(card, "img", "src", page_url)
        if image:
            record["imageUrl"] = image
        link = card.select_one("a")
        href = (link.get("href") or "").strip() if link is not None else ""
        return record, urljoin(page_url, href) if href else ""

    def parse_program_page(self, soup: BeautifulSoup, url: str) -> RawRecord:
        record: RawRecord = {}
        for field_name, (selector, label) in PROGRAM_PAGE_FIELDS.items():
            value = _text(soup, selector, label)
            if value:
                record[field_name] = value
        requirements = [
            " ".join(li.get_text(" ", strip=True).split()) for li in soup.select(REQUIREMENTS_SELECTOR)
        ]
        requirements = [r for r in requirements if r]
        if requirements:
            record["requirements"] = requirements
        image = _attr(soup, PROGRAM_IMAGE_SELECTOR, "src", url)
        if image:
            record["imageUrl"] = image
        return record

    def fetch(self) -> SourceBatch:
        logger.info("scraper.start url=%s", self.base_url)
        listing = self.get_soup(self.base_url)
        links = self.university_links(listing)
        logger.info("scraper.universities_found count=%d", len(links))

        batch = SourceBatch()
        for idx, uni_url in enumerate(links, start=1):
            logger.info("scraper.university %d/%d url=%s", idx, len(links), uni_url)
            uni_soup = self.get_soup(uni_url)
            university = self.parse_university(uni_soup, uni_url)
            batch.universities.append(university)

            cards = uni_soup.select(PROGRAM_CARD_SELECTOR)
            logger.info("scraper.programs_found university=%s count=%d", university["name"] or uni_url, len(cards))
            for card in cards:
                record, program_url = self.parse_program_card(card, uni_url)
                if program_url:
                    record.update(self.parse_program_page(self.get_soup(program_url), program_url))
                    record["sourceUrl"] = program_url
                record["universityName"] = university["name"]
                batch.programs.append(record)

        logger.info(
            "scraper.done universities=%d programs=%d requests=%d",
            len(batch.universities),
            len(batch.programs),
            self._requests,
        )
        return batch
