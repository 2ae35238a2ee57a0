"""Social handle normalization: strip a leading ``@`` and extract handles from profile URLs."""

import re


TWITTER_URL = re.compile(
    r"(?:https?://)?(?:www\.)?(?:twitter\.com|x\.com)/@?([A-Za-z0-9_]+)",
    re.IGNORECASE,
)
LINKEDIN_URL = re.compile(
    r"(?:https?://)?(?:[a-z]{2,3}\.)?linkedin\.com/in/([A-Za-z0-9_-]+)",
    re.IGNORECASE,
)
TELEGRAM_URL = re.compile(
    r"(?:https?://)?(?:www\.)?(?:t\.me|telegram\.me)/@?([A-Za-z0-9_]+)",
    re.IGNORECASE,
)


def _normalize(value: str | None, url_pattern: re.Pattern[str]) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    match = url_pattern.search(value)
    if match:
        return match.group(1)
    return value.lstrip("@").strip().rstrip("/") or None


def normalize_twitter(value: str | None) -> str | None:
    """Return the bare Twitter / X handle of *value*."""
    return _normalize(value, TWITTER_URL)


def normalize_linkedin(value: str | None) -> str | None:
    """Return the LinkedIn profile slug of *value*."""
    return _normalize(value, LINKEDIN_URL)


def normalize_telegram(value: str | None) -> str | None:
    """Return the bare Telegram handle of *value*."""
    return _normalize(value, TELEGRAM_URL)
