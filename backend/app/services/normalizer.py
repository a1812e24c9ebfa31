"""
Normalization service for inbound intake fields.

Cleans websites, phone numbers and file types into the canonical forms the
commerce platform accepts, before anything is submitted upstream. Pure
functions, no I/O.
"""

import re
import logging
from typing import Optional

logger = logging.getLogger(__name__)

# Only these schemes are accepted as a customer website metafield
_URL_RE = re.compile(r'^(ftp|http|https)://[^ "]+$')

_NON_DIGIT_RE = re.compile(r"\D")

# Upload allow-list: lower-cased extension -> MIME type
_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".pdf": "application/pdf",
}

ALLOWED_FILE_TYPES_MESSAGE = "Invalid file type: Please submit a JPG, PNG, or PDF."


def normalize_website(raw: Optional[str]) -> str:
    """
    Prepend ``http://`` when the website has no http(s) scheme.

    Examples:
        "example.com"          -> "http://example.com"
        "https://example.com"  -> "https://example.com"
        ""                     -> ""
    """
    if not raw:
        return ""

    website = raw.strip()
    if not website:
        return ""

    if not website.startswith("http://") and not website.startswith("https://"):
        website = "http://" + website
    return website


def validate_website(url: Optional[str]) -> bool:
    """
    Return True if ``url`` is an ftp/http/https URL with no spaces or quotes.

    Used as a gate before attaching the website as customer metadata; an
    invalid website is dropped, never an error.
    """
    if not url:
        return False
    return bool(_URL_RE.match(url))


def normalize_phone(raw: Optional[str]) -> Optional[str]:
    """
    Convert a North American phone number to E.164.

    Examples:
        "555-123-4567"     -> "+15551234567"
        "1 (555) 123-4567" -> "+15551234567"
        "123"              -> None

    None means "no phone available"; callers must not treat it as a failure.
    """
    if not raw:
        return None

    digits = _NON_DIGIT_RE.sub("", str(raw))

    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    if len(digits) == 10:
        return f"+1{digits}"

    logger.debug("normalize_phone: %d digits, not a NANP number", len(digits))
    return None


def classify_file_type(extension: Optional[str]) -> Optional[str]:
    """
    Map a file extension (with its leading dot) to an allowed MIME type.

    Matching is case-insensitive and exact: ".PDF" -> "application/pdf",
    ".gif" -> None, "pdf" -> None.
    """
    if not extension:
        return None
    return _MIME_TYPES.get(extension.lower())


def file_content_type(mime_type: str) -> str:
    """Commerce platform content type for a classified upload: FILE or IMAGE."""
    return "FILE" if mime_type == "application/pdf" else "IMAGE"
