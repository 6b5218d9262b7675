"""BookDP search URL builder and text helpers.

Pure functions with no browser dependency.
"""

import re
from urllib.parse import quote

_PRICE_RE = re.compile(r"\d+(?:\.\d+)?")


def build_search_url(base_url: str, topic: str, page: int = 1) -> str:
    """Build a product search URL for a topic and one-based page number.

    Page 1 is the bare search; later pages use WooCommerce's /page/N/ prefix.
    """
    base = base_url.rstrip("/")
    query = f"?s={quote(topic, safe='')}&post_type=product"
    if page <= 1:
        return f"{base}/{query}"
    return f"{base}/page/{page}/{query}"


def author_from_url(product_url: str) -> str:
    """Derive the author name from a product URL slug.

    Slugs look like ``/<title>-<author>-<isbn>/``; the segment before the
    trailing slash is split on hyphens, the ISBN part dropped and the rest
    joined with spaces. Returns "" when the slug has a single part.
    """
    if not product_url:
        return ""
    segments = product_url.split("/")
    if len(segments) < 2:
        return ""
    slug = segments[-2]
    parts = slug.split("-")
    if not slug or len(parts) < 2:
        return ""
    return " ".join(parts[:-1])


def parse_price(text: str | None) -> float | None:
    """Parse a display price such as ``$1,299.95``. None when no number is found."""
    if not text:
        return None
    match = _PRICE_RE.search(text.replace(",", ""))
    if match is None:
        return None
    return float(match.group())


def first_sentence(text: str | None) -> str:
    """Return the first sentence of ``text`` terminated by a period, or ""."""
    if not text:
        return ""
    head = text.strip().split(".")[0].strip()
    if not head:
        return ""
    return f"{head}."
