"""Trade taxonomy and ``{trade}-{suburb}`` discovery slugs."""

import re

# Shared by discovery, signup and profile
TRADE_CATEGORIES: list[str] = [
    "Building",
    "Carpentry",
    "Plumbing",
    "Electrical",
    "Concreting",
    "Bricklaying",
    "Roofing",
    "Plastering / Gyprock",
    "Painting & Decorating",
    "Tiling",
    "Flooring",
    "Cabinet Making / Joinery",
    "Waterproofing",
    "Landscaping",
    "HVAC / Air Conditioning",
    "Demolition",
    "Labouring",
]

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def _slug_words(value: str) -> str:
    """Lowercase, drop punctuation, collapse whitespace."""
    cleaned = re.sub(r"[^a-z0-9\s]", "", value.lower())
    return re.sub(r"\s+", " ", cleaned).strip()


def create_trade_suburb_slug(trade: str, suburb: str) -> str:
    return f"{_slug_words(trade).replace(' ', '-')}-{_slug_words(suburb).replace(' ', '-')}"


def parse_trade_suburb_slug(slug: str) -> dict[str, str] | None:
    """Split a discovery slug back into a known trade and a title-cased suburb.

    The shortest matching trade prefix wins, and at least one word must be
    left over for the suburb.
    """
    parts = slug.split("-")
    if len(parts) < 2:
        return None

    by_words = {_slug_words(t): t for t in TRADE_CATEGORIES}
    for i in range(len(parts) - 1):
        trade = by_words.get(" ".join(parts[: i + 1]).lower())
        if trade is not None:
            suburb = " ".join(word.capitalize() for word in parts[i + 1 :] if word)
            if suburb:
                return {"trade": trade, "suburb": suburb}
    return None


def format_suburb_for_display(suburb: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in suburb.split(" "))


def is_uuid(value: str) -> bool:
    return bool(_UUID_RE.match(value))
