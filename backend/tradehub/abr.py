"""Australian Business Register (ABR) lookups.

The ABR JSON service answers in JSONP even when asked for JSON, so responses
are unwrapped before parsing. A lookup only confirms that the ABN exists and
is active; granting VERIFIED status is an admin decision.
"""

import json
import re
from dataclasses import dataclass
from typing import Any

import httpx

from .logging_config import get_logger

logger = get_logger("tradehub.abr")

_JSONP_RE = re.compile(r"^[a-zA-Z_$][\w$]*\((.*)\)\s*;?\s*$", re.DOTALL)


class AbrLookupError(Exception):
    """Raised when the register cannot be reached or answers garbage."""

    def __init__(self, message: str, status_code: int | None = None, snippet: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.snippet = snippet


@dataclass
class AbnDetails:
    """Result of an ABR lookup."""

    abn: str
    abn_status: str | None
    entity_name: str | None = None
    entity_type: str | None = None
    gst: str | None = None
    message: str | None = None

    @property
    def is_active(self) -> bool:
        return self.abn_status == "Active"

    def to_dict(self) -> dict:
        return {
            "abn": self.abn,
            "abn_status": self.abn_status,
            "entity_name": self.entity_name,
            "entity_type": self.entity_type,
            "gst": self.gst,
        }


def parse_abr_payload(text: str) -> dict[str, Any]:
    """Parse a JSON or JSONP ABR response body."""
    trimmed = text.strip()
    match = _JSONP_RE.match(trimmed)
    if match:
        return json.loads(match.group(1))
    return json.loads(trimmed)


async def lookup_abn(
    abn: str,
    guid: str,
    base_url: str,
    timeout: float = 10.0,
) -> AbnDetails:
    """Fetch ABN details from the register.

    Raises:
        AbrLookupError: on transport errors, non-2xx responses or unparseable bodies.
    """
    params = {"abn": abn, "guid": guid, "callback": "cb"}
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(
                base_url,
                params=params,
                headers={
                    "Accept": "application/json,text/plain,*/*",
                    "User-Agent": "TradeHub/1.0",
                },
            )
    except httpx.HTTPError as e:
        logger.warning(f"ABR request failed: {type(e).__name__}")
        raise AbrLookupError("ABR request failed") from e

    text = response.text
    if response.status_code >= 400:
        raise AbrLookupError(
            "ABR request failed", status_code=response.status_code, snippet=text[:300]
        )

    try:
        data = parse_abr_payload(text)
    except (json.JSONDecodeError, ValueError) as e:
        raise AbrLookupError("Invalid ABR response format", snippet=text[:300]) from e

    if not isinstance(data, dict):
        raise AbrLookupError("Invalid ABR response format", snippet=text[:300])

    return AbnDetails(
        abn=data.get("Abn") or abn,
        abn_status=data.get("AbnStatus"),
        entity_name=data.get("EntityName") or None,
        entity_type=data.get("EntityTypeName") or None,
        gst=data.get("Gst") or None,
        message=data.get("Message") or None,
    )
