"""Publish-date normalization."""

import re
from datetime import date
from typing import Optional

import dateutil.parser


# "发布时间：", "发布日期:", "Published:", "Date:"
_PREFIX_RE = re.compile(r'(发布(时间|日期)|published(\s+on)?|date)\s*[：:]', re.IGNORECASE)
_TRAILING_NOISE_RE = re.compile(r'[·\s]+$')
# 2024-03-05, 2024/3/5, 2024年3月5日
_YMD_RE = re.compile(r'(\d{4})\s*[年/-]\s*(\d{1,2})\s*[月/-]\s*(\d{1,2})\s*日?')


def clean_date_text(text: str) -> str:
    """Strip publish-date prefixes and trailing separators."""
    cleaned = _PREFIX_RE.sub('', text)
    cleaned = _TRAILING_NOISE_RE.sub('', cleaned)
    return cleaned.strip()


def normalize_date(text: Optional[str]) -> Optional[date]:
    """
    Parse heterogeneous date text into a calendar date.

    The explicit year/month/day pattern is tried before generic parsing
    because generic parsers guess wrong on mixed-locale input.

    Returns:
        The date, or None when nothing usable was found
    """
    if not text:
        return None

    cleaned = clean_date_text(text)
    if not cleaned:
        return None

    match = _YMD_RE.search(cleaned)
    if match:
        year, month, day = (int(group) for group in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            pass

    try:
        return dateutil.parser.parse(cleaned).date()
    except (ValueError, OverflowError):
        return None
