import re
from dataclasses import replace
from datetime import datetime

import pytest

from statement_extractor.models import TransactionMode
from statement_extractor.parsers.generic import (
    LOOSE_PROFILE,
    STANDARD_PROFILE,
    extract_transactions,
    get_profile,
    iter_candidate_lines,
    match_line,
    parse_generic_statement,
)
from statement_extractor.parsers.patterns import TransactionPattern
from statement_extractor.utils import to_epoch_millis


def test_upi_line():
    transaction = match_line('15/03/2024 UPI-JOHN DOE UPI Rs.1,500.00 Dr')
    assert transaction.merchant_name == 'JOHN DOE'
    assert transaction.amount == -1500.0
    assert transaction.transaction_mode == TransactionMode.UPI
    assert transaction.timestamp == to_epoch_millis(datetime(2024, 3, 15))


def test_neft_credit_line():
    transaction = match_line('01-04-24 NEFT ABC CORP 25000.00 CR')
    assert transaction.merchant_name == 'ABC CORP'
    assert transaction.amount == 25000.0
    assert transaction.transaction_mode == TransactionMode.NEFT
    assert transaction.date == datetime(2024, 4, 1).date()


def test_line_without_amount_is_skipped(generic_text):
    result = parse_generic_statement(generic_text)
    assert result.success is True
    assert result.parser_used == 'generic'
    assert [t.merchant_name for t in result.transactions] == ['JOHN DOE', 'ABC CORP']
    assert match_line('16/03/2024 Balance brought forward') is None


def test_transactions_sorted_oldest_first():
    text = '\n'.join([
        '20/03/2024 Grocery Store 300.00',
        '05/03/2024 Book Shop 120.00',
        '12/03/2024 Pharmacy 80.00',
    ])
    transactions = extract_transactions(text)
    assert [t.merchant_name for t in transactions] == ['Book Shop', 'Pharmacy', 'Grocery Store']
    timestamps = [t.timestamp for t in transactions]
    assert timestamps == sorted(timestamps)


def test_same_day_keeps_document_order():
    text = '10/03/2024 First Shop 10.00\n10/03/2024 Second Shop 20.00'
    assert [t.merchant_name for t in extract_transactions(text)] == ['First Shop', 'Second Shop']


def test_extraction_is_repeatable(generic_text):
    assert extract_transactions(generic_text) == extract_transactions(generic_text)


def test_long_description_is_truncated():
    transaction = match_line('10/03/2024 ' + 'A' * 150 + ' 100.00')
    assert transaction is not None
    assert len(transaction.merchant_name) == 100


def test_empty_text():
    assert extract_transactions('') == []
    result = parse_generic_statement('no transactions in here')
    assert result.success is True
    assert result.transactions == []
    assert result.message == 'No transactions found in statement'


def test_loose_profile_reads_ocr_dates():
    transactions = extract_transactions('05.03.2024 Coffee shop 250 DR', LOOSE_PROFILE)
    assert len(transactions) == 1
    assert transactions[0].merchant_name == 'Coffee shop'
    assert transactions[0].amount == -250.0


def test_loose_profile_collapses_document():
    lines = list(iter_candidate_lines('a\n\nb  c\n', LOOSE_PROFILE))
    assert lines == ['a b c']


def test_continuation_lines_are_joined():
    profile = replace(LOOSE_PROFILE, collapse_whitespace=False)
    lines = list(iter_candidate_lines('10/03/2024 UPI-RAMESH\nKUMAR 450.00\n11/03/2024 x', profile))
    assert lines == ['10/03/2024 UPI-RAMESH KUMAR 450.00', 'KUMAR 450.00', '11/03/2024 x']


def test_standard_profile_keeps_lines():
    assert list(iter_candidate_lines(' a \n\n b ', STANDARD_PROFILE)) == ['a', 'b']


def test_get_profile():
    assert get_profile('LOOSE') is LOOSE_PROFILE
    with pytest.raises(ValueError):
        get_profile('unknown')


def test_account_reference_in_narration():
    transaction = match_line('10/03/2024 Transfer to A/c 123456 500.00')
    assert transaction.merchant_name == 'Transfer to A/c 123456'
    assert transaction.amount == 500.0
    assert transaction.account_number == '123456'


def test_parenthesised_merchant():
    transaction = match_line('10/03/2024 AMAZON (INDIA) 499.00')
    assert transaction.merchant_name == 'AMAZON (INDIA)'
    assert transaction.amount == 499.0


def test_upi_narration_with_dotted_handle():
    transaction = match_line('15/03/2024 UPI/SWIGGY/swiggy@icici.com/Food 500.00 DR')
    assert transaction.merchant_name == 'UPI/SWIGGY/swiggy@icici.com/Food'
    assert transaction.amount == -500.0
    assert transaction.transaction_mode == TransactionMode.UPI
    assert transaction.upi_id == 'swiggy@icici.com'


def test_rejected_match_falls_through_to_next_pattern():
    def broken(match):
        raise RuntimeError('handler failed')

    def dot_amount(match):
        return match.group(1), 'placeholder', '.'

    profile = replace(STANDARD_PROFILE, patterns=(
        TransactionPattern('raises', re.compile(r'(\d{2}/\d{2}/\d{4})'), broken),
        TransactionPattern('no_amount', re.compile(r'(\d{2}/\d{2}/\d{4})'), dot_amount),
    ) + tuple(STANDARD_PROFILE.patterns))

    transaction = match_line('10/03/2024 Book Shop 120.00', profile)
    assert transaction.merchant_name == 'Book Shop'
    assert transaction.amount == 120.0


def test_dot_only_amount_is_dropped():
    assert match_line('01/01/2024 Closing note .') is None
