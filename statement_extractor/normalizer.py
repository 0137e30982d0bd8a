"""Turn raw pattern matches into Transaction records.

Each helper looks at the whole source line, not just the captured tokens:
statements put the direction marker (Dr/Cr), the payment rail and the
counterparty handle in different places depending on the bank.
"""
import re
import logging
from typing import Optional, Pattern, Sequence, Tuple

from .models import RawMatch, Transaction, TransactionMode
from .utils import clean_description, parse_amount_safe, parse_date_token, to_epoch_millis

logger = logging.getLogger(__name__)

DEBIT_KEYWORDS: Tuple[str, ...] = ('dr', 'debit', 'withdrawal', 'paid', 'purchase')
CREDIT_KEYWORDS: Tuple[str, ...] = ('cr', 'credit', 'received', 'refund')

# Statement-layout parsers and the OCR-tolerant profile also recognise these
EXTENDED_DEBIT_KEYWORDS: Tuple[str, ...] = DEBIT_KEYWORDS + ('deducted',)
EXTENDED_CREDIT_KEYWORDS: Tuple[str, ...] = CREDIT_KEYWORDS + ('added',)

# Checked in order, first hit wins
MODE_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (TransactionMode.UPI, ('upi',)),
    (TransactionMode.NEFT, ('neft',)),
    (TransactionMode.IMPS, ('imps',)),
    (TransactionMode.RTGS, ('rtgs',)),
    (TransactionMode.ATM, ('atm',)),
    (TransactionMode.POS, ('pos', 'card')),
    (TransactionMode.CASH, ('cash',)),
    (TransactionMode.CHEQUE, ('cheque', 'chq')),
)

UPI_ID_PATTERN = re.compile(r'([a-zA-Z0-9._-]+@[a-zA-Z0-9._-]+)')

ACCOUNT_PATTERNS: Tuple[Pattern, ...] = (
    re.compile(r'A/c\s*:?\s*(\d+)', re.IGNORECASE),
    re.compile(r'Account\s*:?\s*(\d+)', re.IGNORECASE),
    re.compile(r'Acct\s*:?\s*(\d+)', re.IGNORECASE),
)

LOOSE_ACCOUNT_PATTERNS: Tuple[Pattern, ...] = ACCOUNT_PATTERNS + (
    re.compile(r'AC\s*:?\s*(\d+)', re.IGNORECASE),
    re.compile(r'([0-9]{6,})'),  # any long digit run, last resort
)


def _contains_any(text: str, keywords: Sequence[str]) -> bool:
    return any(k in text for k in keywords)


def resolve_direction(amount: float, line: str,
                      debit_keywords: Sequence[str] = DEBIT_KEYWORDS,
                      credit_keywords: Sequence[str] = CREDIT_KEYWORDS) -> float:
    """Sign an amount from the debit/credit keywords present in its line.

    A line with only debit keywords yields a negative amount and a line with
    only credit keywords a positive one. When both or neither appear the
    parsed sign is returned untouched.
    """
    lowered = line.lower()
    is_debit = _contains_any(lowered, debit_keywords)
    is_credit = _contains_any(lowered, credit_keywords)

    if is_debit and not is_credit:
        return -abs(amount)
    if is_credit and not is_debit:
        return abs(amount)
    if is_debit and is_credit:
        logger.debug(f"Both debit and credit keywords in line, keeping parsed sign: {line!r}")
    return amount


def classify_mode(line: str) -> str:
    lowered = line.lower()
    for mode, keywords in MODE_KEYWORDS:
        if _contains_any(lowered, keywords):
            return mode
    return TransactionMode.BANK_TRANSFER


def extract_upi_id(line: str) -> Optional[str]:
    match = UPI_ID_PATTERN.search(line)
    return match.group(1) if match else None


def extract_account_number(line: str, patterns: Sequence[Pattern] = ACCOUNT_PATTERNS) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(line)
        if match:
            return match.group(1)
    return None


def normalize_match(raw: RawMatch,
                    debit_keywords: Sequence[str] = DEBIT_KEYWORDS,
                    credit_keywords: Sequence[str] = CREDIT_KEYWORDS,
                    account_patterns: Sequence[Pattern] = ACCOUNT_PATTERNS,
                    debug: bool = False) -> Optional[Transaction]:
    """Build a Transaction from a raw match, or None when the date or amount is unusable."""
    parsed_date = parse_date_token(raw.date_token)
    if parsed_date is None:
        if debug:
            logger.debug(f"[{raw.pattern_name}] Failed to parse date: {raw.date_token!r}")
        return None

    amount = parse_amount_safe(raw.amount_token)
    if amount is None:
        if debug:
            logger.debug(f"[{raw.pattern_name}] Invalid amount: {raw.amount_token!r}")
        return None

    transaction = Transaction(
        merchant_name=clean_description(raw.description_token),
        amount=resolve_direction(amount, raw.line, debit_keywords, credit_keywords),
        timestamp=to_epoch_millis(parsed_date),
        transaction_mode=classify_mode(raw.line),
        upi_id=extract_upi_id(raw.line),
        account_number=extract_account_number(raw.line, account_patterns),
    )

    if debug:
        logger.debug(f"[{raw.pattern_name}] Processed transaction: {transaction.merchant_name}, "
                     f"{transaction.amount}, {parsed_date.strftime('%d/%m/%Y')}")
    return transaction
