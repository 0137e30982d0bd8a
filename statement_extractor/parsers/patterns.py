"""Ordered regex cascades for spotting transaction lines.

A cascade is tried top to bottom and the first pattern that matches a line
wins. The specific patterns (UPI, card, interbank transfer) come before the
catch-alls, so reordering a cascade changes which description and amount are
captured for the same line.
"""
import re
from typing import Callable, NamedTuple, Pattern, Tuple

TokenTriple = Tuple[str, str, str]


class TransactionPattern(NamedTuple):
    name: str
    regex: Pattern
    handler: Callable[['re.Match'], TokenTriple]


def date_desc_amount(match: 're.Match') -> TokenTriple:
    """Default handler: groups 1-3 are date, description, amount."""
    return match.group(1), match.group(2), match.group(3)


def _compile(expr: str) -> Pattern:
    return re.compile(expr, re.IGNORECASE)


DATE = r'(\d{1,2}[/-]\d{1,2}[/-]\d{2,4})'
CURRENCY = r'(?:Rs\.?|INR|₹)?\s*'
AMOUNT = r'(\d[\d,]*\.\d{2})'
# Narration text: account refs (A/c 123), UPI handles, parenthesised names
DESCRIPTION = r'[A-Za-z0-9\s.,\-_:;?@/\\&()]'

# OCR output drops and swaps punctuation, so accept '.' as a date separator
# and amounts without a fixed decimal part.
LOOSE_DATE = r'(\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4})'
LOOSE_AMOUNT = r'(\d+(?:[,.]\d+)*\.?\d*)'

# Used to decide whether a following line starts a new transaction
DATE_AT_LINE_START = re.compile(r'^\s*\d{1,2}[/-]\d{1,2}[/-]\d{2,4}')


STANDARD_PATTERNS: Tuple[TransactionPattern, ...] = (
    TransactionPattern(
        'upi',
        _compile(DATE + r'\s+UPI[-\s/:]+([^.]*?)(?:[-\s/]UPI)?\s+' + CURRENCY + AMOUNT),
        date_desc_amount,
    ),
    TransactionPattern(
        'card',
        _compile(DATE + r'\s+(?:POS|ATM|CARD)[-\s/:]+([^.]*?)\s+' + CURRENCY + AMOUNT),
        date_desc_amount,
    ),
    TransactionPattern(
        'transfer',
        _compile(DATE + r'\s+(?:NEFT|IMPS|RTGS)[-\s/:]+([^.]*?)\s+' + CURRENCY + AMOUNT),
        date_desc_amount,
    ),
    TransactionPattern(
        'cr_dr',
        _compile(DATE + r'\s+([^.]*?)\s+' + CURRENCY + AMOUNT + r'\s*(?:CR|DR)\b'),
        date_desc_amount,
    ),
    TransactionPattern(
        'general',
        _compile(DATE + r'\s+(' + DESCRIPTION + r'+?)\s+' + CURRENCY + AMOUNT),
        date_desc_amount,
    ),
    TransactionPattern(
        'ocr_loose',
        _compile(LOOSE_DATE + r'\s+(' + DESCRIPTION + r'+)\s+([0-9,.]+)'),
        date_desc_amount,
    ),
)


LOOSE_PATTERNS: Tuple[TransactionPattern, ...] = (
    TransactionPattern(
        'upi',
        _compile(LOOSE_DATE + r'\s+UPI[-\s/:]+([^\d]+?)(?:[-\s/]UPI)?\s+' + CURRENCY + LOOSE_AMOUNT),
        date_desc_amount,
    ),
    TransactionPattern(
        'card',
        _compile(LOOSE_DATE + r'\s+(?:POS|ATM|CARD)[-\s/:]+([^\d]+?)\s+' + CURRENCY + LOOSE_AMOUNT),
        date_desc_amount,
    ),
    TransactionPattern(
        'transfer',
        _compile(LOOSE_DATE + r'\s+(?:NEFT|IMPS|RTGS)[-\s/:]+([^\d]+?)\s+' + CURRENCY + LOOSE_AMOUNT),
        date_desc_amount,
    ),
    TransactionPattern(
        'cr_dr',
        _compile(LOOSE_DATE + r'\s+([^\d]+?)\s+' + CURRENCY + LOOSE_AMOUNT + r'\s*(?:CR|DR)\b'),
        date_desc_amount,
    ),
    TransactionPattern(
        'general',
        _compile(LOOSE_DATE + r'\s+([A-Za-z0-9\s.,\-_:@/\\&()]+?)\s+' + CURRENCY + LOOSE_AMOUNT),
        date_desc_amount,
    ),
    TransactionPattern(
        'ocr_loose',
        _compile(LOOSE_DATE + r'\s+([A-Za-z0-9\s.@,\-_:/\\&()]+)\s+([0-9,.]+)(?:\s+(?:CR|DR))?'),
        date_desc_amount,
    ),
)
