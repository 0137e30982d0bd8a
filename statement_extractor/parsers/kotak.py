"""Kotak Mahindra Bank statement parser.

Handles the text layout of Kotak account statements:
- a header block with labelled fields (Account No, Period, balances, totals, counts)
- one transaction per line: date, narration, Chq/Ref No, amount(Dr|Cr), balance(Dr|Cr)

Unlike the generic parser this one refuses text without the Kotak marker
instead of guessing.
"""
import re
import logging
from datetime import datetime
from typing import List, Optional

from ..errors import UnsupportedFormatError
from ..models import BankStatement, StatementParsingResult, StatementPeriod, Transaction, TransactionMode
from ..normalizer import (
    EXTENDED_CREDIT_KEYWORDS,
    EXTENDED_DEBIT_KEYWORDS,
    classify_mode,
    extract_upi_id,
    resolve_direction,
)
from ..utils import clean_description, parse_amount_safe, to_epoch_millis

logger = logging.getLogger(__name__)

KOTAK_MARKERS = ('KOTAK', 'Kotak Mahindra Bank')
KOTAK_DATE_FORMAT = '%d-%m-%Y'

ACCOUNT_NO_PATTERN = re.compile(r'Account No\s*:\s*([0-9]+)', re.IGNORECASE)
PERIOD_PATTERN = re.compile(r'Period\s*:\s*(\d{1,2}-\d{1,2}-\d{4})\s*to\s*(\d{1,2}-\d{1,2}-\d{4})', re.IGNORECASE)
CUSTOMER_PATTERN = re.compile(
    r'(?:Customer\s+Name|Account\s+Holder(?:\s+Name)?|Name)\s*:\s*([A-Za-z][A-Za-z .]*?)\s*(?:\n|\s{2,}|$)',
    re.IGNORECASE,
)
OPENING_BALANCE_PATTERN = re.compile(r'Opening Balance\s*:\s*([0-9,.]+)\s*\(([A-Za-z]+)\)', re.IGNORECASE)
CLOSING_BALANCE_PATTERN = re.compile(r'Closing Balance\s*:\s*([0-9,.]+)\s*\(([A-Za-z]+)\)', re.IGNORECASE)
TOTAL_WITHDRAWAL_PATTERN = re.compile(r'Total Withdrawal Amount\s*:\s*([0-9,.]+)\s*\(([A-Za-z]+)\)', re.IGNORECASE)
TOTAL_DEPOSIT_PATTERN = re.compile(r'Total Deposit Amount\s*:\s*([0-9,.]+)\s*\(([A-Za-z]+)\)', re.IGNORECASE)
WITHDRAWAL_COUNT_PATTERN = re.compile(r'Withdrawal Count\s*:\s*(\d+)', re.IGNORECASE)
DEPOSIT_COUNT_PATTERN = re.compile(r'Deposit Count\s*:\s*(\d+)', re.IGNORECASE)

# date, narration, Chq/Ref No, amount(type), balance(type)
TRANSACTION_ROW_PATTERN = re.compile(
    r'(\d{1,2}-\d{1,2}-\d{4})\s+(.+?)\s+([A-Z0-9-]+)\s+'
    r'(\d[\d,]*\.\d{2})(?:\s*\(([A-Za-z]+)\))?\s+'
    r'(\d[\d,]*\.\d{2})(?:\s*\(([A-Za-z]+)\))?',
    re.IGNORECASE,
)


def is_kotak_statement(text: str) -> bool:
    """The marker check is case-sensitive: 'KOTAK' or 'Kotak Mahindra Bank'."""
    return bool(text) and any(marker in text for marker in KOTAK_MARKERS)


def _parse_kotak_date(date_str: str) -> Optional[datetime]:
    try:
        return datetime.strptime(date_str.strip(), KOTAK_DATE_FORMAT)
    except ValueError:
        return None


def _balance_with_type(match: Optional['re.Match']) -> float:
    """Header balance; a (Dr) suffix marks an overdrawn (negative) balance."""
    if not match:
        return 0.0
    value = parse_amount_safe(match.group(1)) or 0.0
    if match.group(2).lower() == 'dr':
        return -abs(value)
    return value


def _amount_only(match: Optional['re.Match']) -> float:
    if not match:
        return 0.0
    return parse_amount_safe(match.group(1)) or 0.0


def _count(match: Optional['re.Match']) -> int:
    return int(match.group(1)) if match else 0


def parse_kotak_header(text: str) -> BankStatement:
    """Read the labelled header fields. Missing fields keep their defaults.

    Raises:
        UnsupportedFormatError: if the text has no Kotak marker.
    """
    if not is_kotak_statement(text):
        raise UnsupportedFormatError('Unsupported bank statement format')

    account_match = ACCOUNT_NO_PATTERN.search(text)
    period_match = PERIOD_PATTERN.search(text)
    customer_match = CUSTOMER_PATTERN.search(text)

    period = StatementPeriod()
    if period_match:
        start = _parse_kotak_date(period_match.group(1))
        end = _parse_kotak_date(period_match.group(2))
        period = StatementPeriod(
            start=start.date() if start else None,
            end=end.date() if end else None,
        )

    return BankStatement(
        account_number=account_match.group(1) if account_match else 'Unknown',
        customer_name=customer_match.group(1).strip() if customer_match else 'Unknown',
        period=period,
        opening_balance=_balance_with_type(OPENING_BALANCE_PATTERN.search(text)),
        closing_balance=_balance_with_type(CLOSING_BALANCE_PATTERN.search(text)),
        total_withdrawal=_amount_only(TOTAL_WITHDRAWAL_PATTERN.search(text)),
        total_deposit=_amount_only(TOTAL_DEPOSIT_PATTERN.search(text)),
        withdrawal_count=_count(WITHDRAWAL_COUNT_PATTERN.search(text)),
        deposit_count=_count(DEPOSIT_COUNT_PATTERN.search(text)),
    )


def _signed_amount(amount: float, amount_type: Optional[str], line: str) -> float:
    if amount_type:
        kind = amount_type.lower()
        if kind == 'dr':
            return -abs(amount)
        if kind == 'cr':
            return abs(amount)
    return resolve_direction(amount, line, EXTENDED_DEBIT_KEYWORDS, EXTENDED_CREDIT_KEYWORDS)


def parse_kotak_row(line: str, account_number: Optional[str] = None) -> Optional[Transaction]:
    """Parse one statement row. Returns None when the line is not a transaction row.

    Raises:
        ValueError: if the row matched but its date or amount is unusable.
    """
    match = TRANSACTION_ROW_PATTERN.search(line)
    if not match:
        return None

    date_str, description, ref_no, amount_str, amount_type, balance_str, balance_type = match.groups()

    parsed_date = _parse_kotak_date(date_str)
    if parsed_date is None:
        raise ValueError(f"Invalid date: {date_str}")

    amount = parse_amount_safe(amount_str)
    if amount is None:
        raise ValueError(f"Invalid amount: {amount_str}")

    balance = parse_amount_safe(balance_str)
    if balance is not None and balance_type and balance_type.lower() == 'dr':
        balance = -abs(balance)

    transaction_mode = classify_mode(description)
    upi_id = extract_upi_id(description) if transaction_mode == TransactionMode.UPI else None

    return Transaction(
        merchant_name=clean_description(description),
        amount=_signed_amount(amount, amount_type, line),
        timestamp=to_epoch_millis(parsed_date),
        transaction_mode=transaction_mode,
        upi_id=upi_id,
        account_number=account_number,
        reference=ref_no,
        balance=balance,
    )


def parse_kotak_statement(text: str, debug: bool = False) -> StatementParsingResult:
    """Parse a Kotak Mahindra Bank statement into its header and transactions.

    Args:
        text: Raw text of the statement, line breaks preserved
        debug: Log every parsed and rejected row

    Returns:
        StatementParsingResult; ``success`` is False for non-Kotak text.
    """
    try:
        logger.info("KOTAK PARSER: Parsing Kotak Bank statement...")
        try:
            statement = parse_kotak_header(text)
        except UnsupportedFormatError as e:
            logger.info("KOTAK PARSER: Kotak marker not found, refusing statement")
            return StatementParsingResult(
                success=False,
                message='Not a Kotak Mahindra Bank statement',
                error=str(e),
                parser_used='kotak',
            )

        account_number = statement.account_number if statement.account_number != 'Unknown' else None
        lines = text.split('\n')
        transactions: List[Transaction] = []

        if debug:
            logger.info(f"KOTAK PARSER: Processing {len(lines)} lines for transactions")

        for idx, line in enumerate(lines):
            try:
                transaction = parse_kotak_row(line, account_number)
            except Exception as e:
                logger.warning(f"KOTAK PARSER: Error processing line {idx + 1}: {e}")
                continue
            if transaction is None:
                continue

            transactions.append(transaction)
            if debug:
                logger.debug(f"KOTAK PARSER: Found transaction: {transaction.merchant_name}, "
                             f"{transaction.amount}, {transaction.date.strftime('%d/%m/%Y')}")

        transactions.sort(key=lambda t: t.timestamp)
        statement.transactions = transactions

        logger.info(f"KOTAK PARSER: Extracted {len(transactions)} transactions")
        return StatementParsingResult(
            success=True,
            message=f"Successfully parsed statement with {len(transactions)} transactions",
            statement=statement,
            transactions=transactions,
            parser_used='kotak',
        )

    except Exception as e:
        logger.error(f"KOTAK PARSER: Error parsing Kotak statement: {e}", exc_info=debug)
        return StatementParsingResult(
            success=False,
            message='Failed to parse statement',
            error=str(e),
            parser_used='kotak',
        )

