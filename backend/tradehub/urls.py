"""Return-URL sanitization for post-login and verification redirects."""

from urllib.parse import quote, unquote, urlsplit

DEFAULT_RETURN_URL = "/dashboard"

_BLOCKED_MARKERS = ("://", "javascript:", "data:", "webcontainer", "local-credentialless")


def _is_unsafe(candidate: str) -> bool:
    lowered = candidate.lower()
    if candidate.startswith("//") or "@" in candidate or "\\" in candidate:
        return True
    return any(marker in lowered for marker in _BLOCKED_MARKERS)


def sanitize_return_url(url: str | None, fallback: str = DEFAULT_RETURN_URL) -> str:
    """Return a same-site path for *url*, or *fallback* if it could leave the site.

    Both the raw and the percent-decoded forms are checked so ``%2F%2Fevil.com``
    is rejected the same way ``//evil.com`` is.
    """
    if not url or not isinstance(url, str):
        return fallback

    trimmed = url.strip()
    if not trimmed.startswith("/") or _is_unsafe(trimmed):
        return fallback

    decoded = unquote(trimmed)
    if not decoded.startswith("/") or _is_unsafe(decoded):
        return fallback

    parts = urlsplit(trimmed)
    result = parts.path or "/"
    if parts.query:
        result += f"?{parts.query}"
    if parts.fragment:
        result += f"#{parts.fragment}"
    return result


def build_login_url(return_url: str | None = None) -> str:
    sanitized = sanitize_return_url(return_url)
    if sanitized == DEFAULT_RETURN_URL:
        return "/login"
    return f"/login?returnUrl={quote(sanitized, safe='')}"


def verification_gate_url(return_url: str | None) -> str:
    """Where to send a user who must verify their ABN before continuing."""
    return f"/verify-business?returnUrl={quote(sanitize_return_url(return_url), safe='')}"
