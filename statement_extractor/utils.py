import re
import math
from datetime import datetime
from typing import Optional, Sequence

from .models import MAX_MERCHANT_LENGTH

# Candidate layouts, tried in order; the first that parses wins.
DATE_FORMATS = ('%d/%m/%Y', '%d/%m/%y', '%m/%d/%Y')

_DATE_SEPARATORS = re.compile(r'[-/.]')
_AMOUNT_NOISE = re.compile(r'rs\.?|inr|[₹$€£,\s]', re.IGNORECASE)
_DESCRIPTION_DISALLOWED = re.compile(r'[^\w\s@.,_\-/\\&()]')


def parse_amount_safe(raw_value) -> Optional[float]:
    """Parse currency-like strings to float. Returns None if not parseable."""
    if raw_value is None:
        return None
    s = str(raw_value).strip()
    if not s or s.lower() in {"nan", "none", "-"}:
        return None
    cleaned = _AMOUNT_NOISE.sub('', s)

    is_negative = False
    if cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = cleaned[1:-1]
        is_negative = True
    elif cleaned.endswith("-"):
        cleaned = cleaned[:-1]
        is_negative = True

    if cleaned in {"", "."}:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return -value if is_negative else value


def parse_date_token(raw_value, formats: Sequence[str] = DATE_FORMATS) -> Optional[datetime]:
    """Parse a numeric date token after normalising its separators to '/'.

    Returns a naive (local) datetime at midnight, or None if no format fits.
    """
    if raw_value is None:
        return None
    s = _DATE_SEPARATORS.sub('/', str(raw_value).strip())
    for fmt in formats:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    return None


def to_epoch_millis(value: datetime) -> int:
    """Epoch milliseconds for a naive datetime interpreted in local time."""
    return int(value.timestamp() * 1000)


def clean_description(raw_value, max_length: int = MAX_MERCHANT_LENGTH) -> str:
    """Trim, collapse whitespace, drop unusual characters and cap the length."""
    if raw_value is None:
        return ''
    desc = re.sub(r'\s+', ' ', str(raw_value).strip())
    desc = _DESCRIPTION_DISALLOWED.sub('', desc)
    return desc[:max_length]
