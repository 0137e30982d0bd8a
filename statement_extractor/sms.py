"""Parser for bank SMS alerts ("Rs.500.00 debited from A/c XX1234 ...").

Produces the same Transaction record as the statement parsers, so alerts
and statement rows can be merged by the caller. Unlike statement rows an
alert may carry a time of day, which is kept in the timestamp.
"""
import re
import logging
from datetime import datetime
from typing import Optional

from .models import Transaction, TransactionMode
from .normalizer import classify_mode
from .utils import clean_description, parse_amount_safe, to_epoch_millis

logger = logging.getLogger(__name__)

CREDIT = 'CREDIT'
DEBIT = 'DEBIT'
UNKNOWN = 'UNKNOWN'

_CURRENCY = r'(?:Rs\.?|INR|₹)'
_NUMBER = r'([0-9]+(?:,[0-9]+)*(?:\.[0-9]{1,2})?)'

AMOUNT_PATTERNS = (
    re.compile(_CURRENCY + r'\s*' + _NUMBER, re.IGNORECASE),
    re.compile(_NUMBER + r'\s*' + _CURRENCY, re.IGNORECASE),
)

ACCOUNT_PATTERNS = (
    re.compile(r'Bank\s*AC\s*[Xx*]+([0-9]+)', re.IGNORECASE),
    re.compile(r'A/c\s*(?:no\.?)?\s*[Xx*]+([0-9]+)', re.IGNORECASE),
    re.compile(r'Acct\s*[Xx*]+([0-9]+)', re.IGNORECASE),
    re.compile(r'Account\s*(?:no\.?)?\s*[Xx*]+([0-9]+)', re.IGNORECASE),
    re.compile(r'\bAC\s*[Xx*]+([0-9]+)', re.IGNORECASE),
    re.compile(r'[Xx*]{2,}([0-9]{4})'),
)

UPI_ID_PATTERNS = (
    re.compile(r'[a-zA-Z0-9._-]+@[a-zA-Z0-9.-]+'),
    re.compile(r'\d{10}@[a-zA-Z]+'),
)

REFERENCE_PATTERNS = (
    re.compile(r'UPI\s*Ref\.?\s*(?:no\.?)?\s*[:#]?\s*([0-9]+)', re.IGNORECASE),
    re.compile(r'\b(?:ref(?:erence)?|txn)\s*(?:no\.?|number|id)?\s*[:#]?\s*([A-Za-z0-9]*\d[A-Za-z0-9]*)', re.IGNORECASE),
    re.compile(r'\bIMPS(?::|\s+)([A-Za-z0-9]*\d[A-Za-z0-9]*)', re.IGNORECASE),
    re.compile(r'\bNEFT(?::|\s+)([A-Za-z0-9]*\d[A-Za-z0-9]*)', re.IGNORECASE),
)

BALANCE_PATTERN = re.compile(
    r'(?:available|avl|bal)(?:ance)?\.?\s*(?:bal(?:ance)?\.?)?\s*(?:is)?\s*:?\s*' + _CURRENCY + r'\s*' + _NUMBER,
    re.IGNORECASE,
)

NUMERIC_DATE_PATTERN = re.compile(r'\b(\d{2})[-/](\d{2})[-/](\d{2,4})\b')
NAMED_MONTH_DATE_PATTERN = re.compile(r'\b(\d{2})-?([A-Za-z]{3})-?(\d{2,4})\b')
TIME_PATTERN = re.compile(r'\b(\d{1,2}):(\d{2})(?::\d{2})?\b')

_MERCHANT_TAIL = r'\s+([^\s]*[^\s.;,](?:\s+[^\s]*[^\s.;,])*?)(?:\s+(?:(?:on|at|via|ref)\b|\d)|[.;,]\s|[.;]?$)'
MERCHANT_PATTERNS = {
    DEBIT: (
        re.compile(r'\b(?:paid to|sent to|to)' + _MERCHANT_TAIL, re.IGNORECASE),
    ),
    CREDIT: (
        re.compile(r'\b(?:received from|from|by)' + _MERCHANT_TAIL, re.IGNORECASE),
    ),
    UNKNOWN: (
        re.compile(r'\b(?:paid to|received from|sent to|to|from)' + _MERCHANT_TAIL, re.IGNORECASE),
    ),
}
PHONE_UPI_ID = re.compile(r'^(\d{10})@[a-zA-Z]+$')

# SMS alerts name the rail explicitly; IMPS/NEFT alerts often mention UPI apps too
SMS_MODE_ORDER = (TransactionMode.IMPS, TransactionMode.NEFT, TransactionMode.UPI, TransactionMode.RTGS)


def is_banking_message(message: str) -> bool:
    lower = message.lower()
    if any(k in lower for k in ('credited', 'debited', 'payment', 'sent', 'received')):
        return True
    return (('rs.' in lower or 'inr' in lower) and
            any(k in lower for k in ('a/c', 'acct', 'account', 'ac', 'bank', 'upi')))


def determine_direction(message: str) -> str:
    lower = message.lower()
    if 'credited to your card' in lower and 'payment' in lower:
        return CREDIT
    if 'credited' in lower or 'received' in lower:
        return CREDIT
    if 'credit' in lower and 'credit card' not in lower:
        return CREDIT
    if 'debited' in lower:
        return DEBIT
    if 'debit' in lower and 'debit card' not in lower:
        return DEBIT
    if 'payment of' in lower or 'paid' in lower or 'sent' in lower:
        return DEBIT
    if 'payment' in lower and 'card' in lower:
        return DEBIT
    return UNKNOWN


def extract_amount(message: str) -> Optional[float]:
    for pattern in AMOUNT_PATTERNS:
        match = pattern.search(message)
        if match:
            return parse_amount_safe(match.group(1))
    return None


def extract_account_number(message: str) -> Optional[str]:
    for pattern in ACCOUNT_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(1)
    return None


def extract_upi_id(message: str) -> Optional[str]:
    for pattern in UPI_ID_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(0).rstrip('.')
    return None


def extract_reference(message: str) -> Optional[str]:
    for pattern in REFERENCE_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(1)
    return None


def extract_balance(message: str) -> Optional[float]:
    match = BALANCE_PATTERN.search(message)
    return parse_amount_safe(match.group(1)) if match else None


def extract_mode(message: str) -> str:
    upper = message.upper()
    for mode in SMS_MODE_ORDER:
        if mode in upper:
            return mode
    return classify_mode(message)


def extract_merchant(message: str, direction: str) -> str:
    for pattern in MERCHANT_PATTERNS.get(direction, MERCHANT_PATTERNS[UNKNOWN]):
        match = pattern.search(message.strip())
        if match:
            merchant = match.group(1).strip().rstrip('.;,')
            phone = PHONE_UPI_ID.match(merchant)
            if phone:
                return phone.group(1)
            return merchant
    return 'Unknown'


def extract_sms_timestamp(message: str, received_at: Optional[datetime] = None) -> int:
    """Epoch millis from the date/time written in the alert, defaulting to ``received_at``."""
    moment = received_at or datetime.now()

    match = NUMERIC_DATE_PATTERN.search(message)
    month = None
    if match:
        day, month, year = int(match.group(1)), int(match.group(2)), int(match.group(3))
    else:
        match = NAMED_MONTH_DATE_PATTERN.search(message)
        if match:
            try:
                month = datetime.strptime(match.group(2).title(), '%b').month
            except ValueError:
                month = None
            day, year = int(match.group(1)), int(match.group(3))

    if match and month is not None:
        if year < 100:
            year += 2000
        try:
            moment = moment.replace(year=year, month=month, day=day)
        except ValueError:
            logger.debug(f"Ignoring impossible date in SMS: {match.group(0)}")

    time_match = TIME_PATTERN.search(message)
    if time_match:
        hour, minute = int(time_match.group(1)), int(time_match.group(2))
        if hour < 24 and minute < 60:
            moment = moment.replace(hour=hour, minute=minute, second=0, microsecond=0)

    return to_epoch_millis(moment)


def parse_sms(message: str, received_at: Optional[datetime] = None) -> Optional[Transaction]:
    """Parse a bank alert into a Transaction, or None if it isn't a usable transaction alert.

    An alert is kept only when its direction is known, the amount is positive
    and it names an account number or a UPI id.
    """
    if not message or not is_banking_message(message):
        return None

    direction = determine_direction(message)
    amount = extract_amount(message)
    account_number = extract_account_number(message)
    upi_id = extract_upi_id(message)
    merchant = clean_description(extract_merchant(message, direction))

    if direction == UNKNOWN or not amount or amount <= 0 or not (account_number or upi_id) or not merchant:
        logger.debug(f"Rejected SMS: direction={direction}, amount={amount}, "
                     f"account={account_number}, upi={upi_id}, merchant={merchant!r}")
        return None

    return Transaction(
        merchant_name=merchant,
        amount=amount if direction == CREDIT else -amount,
        timestamp=extract_sms_timestamp(message, received_at),
        transaction_mode=extract_mode(message),
        upi_id=upi_id,
        account_number=account_number,
        reference=extract_reference(message),
        balance=extract_balance(message),
    )
