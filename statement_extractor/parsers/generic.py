"""Heuristic text parser for statements of unknown layout.

This parser walks the statement text line by line and runs an ordered
regex cascade (see ``patterns.py``) over each line, converting the first
usable match into a Transaction. Extraction is best effort: lines that no
pattern matches, or whose date/amount cannot be parsed, are dropped without
failing the call.
"""
import re
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Pattern, Sequence

from ..models import RawMatch, StatementParsingResult, Transaction
from ..normalizer import (
    ACCOUNT_PATTERNS,
    CREDIT_KEYWORDS,
    DEBIT_KEYWORDS,
    EXTENDED_CREDIT_KEYWORDS,
    EXTENDED_DEBIT_KEYWORDS,
    LOOSE_ACCOUNT_PATTERNS,
    normalize_match,
)
from .patterns import DATE_AT_LINE_START, LOOSE_PATTERNS, STANDARD_PATTERNS, TransactionPattern

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionProfile:
    """Knobs that distinguish the line-faithful parser from the OCR-tolerant one."""
    name: str
    patterns: Sequence[TransactionPattern]
    collapse_whitespace: bool = False
    join_continuations: bool = False
    debit_keywords: Sequence[str] = DEBIT_KEYWORDS
    credit_keywords: Sequence[str] = CREDIT_KEYWORDS
    account_patterns: Sequence[Pattern] = ACCOUNT_PATTERNS


STANDARD_PROFILE = ExtractionProfile(
    name='standard',
    patterns=STANDARD_PATTERNS,
)

# Whitespace is collapsed over the whole document before splitting, so line
# boundaries disappear; continuation joining only has an effect when a
# caller turns collapsing off (dataclasses.replace).
LOOSE_PROFILE = ExtractionProfile(
    name='loose',
    patterns=LOOSE_PATTERNS,
    collapse_whitespace=True,
    join_continuations=True,
    debit_keywords=EXTENDED_DEBIT_KEYWORDS,
    credit_keywords=EXTENDED_CREDIT_KEYWORDS,
    account_patterns=LOOSE_ACCOUNT_PATTERNS,
)

PROFILES = {
    STANDARD_PROFILE.name: STANDARD_PROFILE,
    LOOSE_PROFILE.name: LOOSE_PROFILE,
}


def get_profile(name: str) -> ExtractionProfile:
    try:
        return PROFILES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown extraction profile {name!r}; expected one of {sorted(PROFILES)}")


def iter_candidate_lines(text: str, profile: ExtractionProfile = STANDARD_PROFILE) -> Iterator[str]:
    """Yield the non-blank lines the cascade should be run against.

    With ``join_continuations`` a line is glued to the following one when
    that next line does not open with a date, recovering descriptions that
    wrap. The next line is still yielded on its own afterwards.
    """
    if profile.collapse_whitespace:
        text = re.sub(r'\s+', ' ', text)

    lines = text.split('\n')
    for i, raw_line in enumerate(lines):
        line = raw_line.strip()
        if not line:
            continue

        if profile.join_continuations and i < len(lines) - 1:
            next_line = lines[i + 1]
            if not DATE_AT_LINE_START.match(next_line):
                line = f"{line} {next_line.strip()}".strip()

        yield line


def match_line(line: str, profile: ExtractionProfile = STANDARD_PROFILE,
               debug: bool = False) -> Optional[Transaction]:
    """Run the cascade over one line and return the first transaction it yields."""
    for pattern in profile.patterns:
        try:
            match = pattern.regex.search(line)
            if not match:
                continue

            date_token, description, amount_token = pattern.handler(match)
            if debug:
                logger.debug(f"[{pattern.name}] Found potential transaction: Date={date_token}, "
                             f"Description={description}, Amount={amount_token}")

            transaction = normalize_match(
                RawMatch(pattern.name, date_token, description, amount_token, line),
                debit_keywords=profile.debit_keywords,
                credit_keywords=profile.credit_keywords,
                account_patterns=profile.account_patterns,
                debug=debug,
            )
        except Exception as e:
            logger.warning(f"Pattern {pattern.name} failed on line {line[:60]!r}: {e}")
            continue

        if transaction is not None:
            return transaction
    return None


def extract_transactions(text: str, profile: ExtractionProfile = STANDARD_PROFILE,
                         debug: bool = False) -> List[Transaction]:
    """Extract transactions from raw statement text, sorted by timestamp (oldest first)."""
    transactions: List[Transaction] = []
    if not text:
        return transactions

    line_count = 0
    for line in iter_candidate_lines(text, profile):
        line_count += 1
        transaction = match_line(line, profile, debug=debug)
        if transaction is not None:
            transactions.append(transaction)
        elif debug:
            logger.debug(f"No pattern matched line: {line[:80]!r}")

    logger.info(f"[GENERIC PARSER] Found {len(transactions)} transactions in {line_count} lines "
                f"(profile={profile.name})")

    # list.sort is stable, so equal timestamps keep document order
    transactions.sort(key=lambda t: t.timestamp)
    return transactions


def parse_generic_statement(text: str, profile: ExtractionProfile = STANDARD_PROFILE,
                            debug: bool = False) -> StatementParsingResult:
    """Wrap ``extract_transactions`` in a result object; an empty list is still a success."""
    try:
        transactions = extract_transactions(text, profile, debug=debug)
    except Exception as e:
        logger.error(f"Generic extraction failed: {e}", exc_info=debug)
        return StatementParsingResult(
            success=False,
            message='Failed to extract transactions',
            error=str(e),
            parser_used='generic',
        )

    if transactions:
        message = f"Successfully extracted {len(transactions)} transactions"
    else:
        message = 'No transactions found in statement'
    return StatementParsingResult(
        success=True,
        message=message,
        transactions=transactions,
        parser_used='generic',
    )
