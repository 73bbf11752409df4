"""
Heuristic contact extraction from flattened resume text.

Everything here is pure string processing: the same text always yields the
same ExtractedContact, and a field that cannot be found is left as None.
"""
import re
from typing import List, Optional

from ..application.models import ExtractedContact

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")

# Most specific first; the first pattern with any match wins
PHONE_PATTERNS = [
    re.compile(r"(\+?1[-.\s]?)?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})"),
    re.compile(r"(\+\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}"),
    re.compile(r"\d{3}[-.\s]?\d{3}[-.\s]?\d{4}"),
]

# Stripped from the match before counting digits
COUNTRY_CODE = re.compile(r"^\+?1\s?")

LINE_SEPARATORS = re.compile(r"\n|,|;|\.")

NAME_SKIP_PATTERNS = [
    re.compile(r"@"),
    re.compile(r"phone|tel|mobile|cell|fax", re.IGNORECASE),
    re.compile(r"resume|cv|curriculum", re.IGNORECASE),
    re.compile(r"experience|education|skills|summary|objective", re.IGNORECASE),
    re.compile(r"linkedin|github|portfolio|website", re.IGNORECASE),
    re.compile(r"address|street|city|state|zip", re.IGNORECASE),
    re.compile(r"^\d"),
    re.compile(r"[^\w\s-]"),
]

CAPITALIZED_WORD = re.compile(r"^[A-Z][a-z]+$")
LOOSE_NAME = re.compile(r"^[A-Za-z\s]+$")

STRICT_NAME_SCAN_LINES = 15
LOOSE_NAME_SCAN_LINES = 10


def extract_email(text: str) -> Optional[str]:
    match = EMAIL_PATTERN.search(text)
    return match.group(0) if match else None


def extract_phone(text: str) -> Optional[str]:
    """
    Return the first phone-shaped substring.

    A leading ``+1`` is removed and the rest reduced to digits; ten digits come
    back bare, anything else is returned as matched.
    """
    for pattern in PHONE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        raw = match.group(0).strip()
        digits = re.sub(r"\D", "", COUNTRY_CODE.sub("", raw))
        if len(digits) == 10:
            return digits
        return raw
    return None


def split_lines(text: str) -> List[str]:
    return [line.strip() for line in LINE_SEPARATORS.split(text) if line.strip()]


def is_name_line(line: str) -> bool:
    if any(pattern.search(line) for pattern in NAME_SKIP_PATTERNS):
        return False

    words = line.split()
    if not 2 <= len(words) <= 4:
        return False

    capitalized = [word for word in words if CAPITALIZED_WORD.match(word)]
    return len(capitalized) >= min(2, len(words))


def is_loose_name_line(line: str) -> bool:
    return 2 < len(line) < 50 and bool(LOOSE_NAME.match(line)) and len(line.split()) >= 2


def extract_name(text: str) -> Optional[str]:
    lines = split_lines(text)

    for line in lines[:STRICT_NAME_SCAN_LINES]:
        if is_name_line(line):
            return line

    for line in lines[:LOOSE_NAME_SCAN_LINES]:
        if is_loose_name_line(line):
            return line

    return None


def extract_info(text: str) -> ExtractedContact:
    return ExtractedContact(
        name=extract_name(text),
        email=extract_email(text),
        phone=extract_phone(text),
    )
