from datetime import datetime

from statement_extractor.analysis import (
    find_recurring_debits,
    reconcile_statement,
    summarize_transactions,
    transactions_to_dataframe,
)
from statement_extractor.models import Transaction, TransactionMode
from statement_extractor.parsers.kotak import parse_kotak_statement
from statement_extractor.utils import to_epoch_millis


def _tx(name, amount, day, mode=TransactionMode.BANK_TRANSFER):
    return Transaction(merchant_name=name, amount=amount, timestamp=to_epoch_millis(day), transaction_mode=mode)


def test_reconcile_consistent_statement(kotak_text):
    report = reconcile_statement(parse_kotak_statement(kotak_text).statement)
    assert report.is_consistent
    assert report.parsed_withdrawal_total == 500.0
    assert report.parsed_deposit_total == 25000.0
    assert report.expected_closing_balance == 34500.0


def test_reconcile_reports_discrepancies(kotak_text):
    text = kotak_text.replace('Total Deposit Amount: 25,000.00(Cr)', 'Total Deposit Amount: 26,000.00(Cr)')
    text = text.replace('Withdrawal Count: 1', 'Withdrawal Count: 2')
    result = parse_kotak_statement(text)
    report = reconcile_statement(result.statement)
    assert result.success is True
    assert not report.is_consistent
    assert len(report.discrepancies) == 2
    assert report.to_dict()['is_consistent'] is False


def test_summarize_transactions():
    transactions = [
        _tx('SALARY', 50000.0, datetime(2024, 3, 1), TransactionMode.NEFT),
        _tx('GROCERY', -1200.0, datetime(2024, 3, 5), TransactionMode.UPI),
        _tx('CAFE', -300.0, datetime(2024, 3, 9), TransactionMode.UPI),
    ]
    summary = summarize_transactions(transactions)
    assert summary['transaction_count'] == 3
    assert summary['credit_count'] == 1
    assert summary['debit_count'] == 2
    assert summary['total_credit'] == 50000.0
    assert summary['total_debit'] == 1500.0
    assert summary['net'] == 48500.0
    assert summary['by_mode']['UPI'] == {'count': 2, 'total': -1500.0}
    assert summary['first_date'] == '2024-03-01'
    assert summary['last_date'] == '2024-03-09'


def test_summarize_empty():
    summary = summarize_transactions([])
    assert summary['transaction_count'] == 0
    assert summary['by_mode'] == {}


def test_dataframe_columns():
    df = transactions_to_dataframe([_tx('A', -1.0, datetime(2024, 1, 1))])
    assert list(df['merchant_name']) == ['A']
    assert 'transaction_mode' in df.columns


def test_find_recurring_debits():
    transactions = [
        _tx('NETFLIX SUBSCRIPTION', -649.0, datetime(2024, 1, 5)),
        _tx('Netflix Subscription 123456789', -649.0, datetime(2024, 2, 5)),
        _tx('NETFLIX SUBSCRIPTION', -649.0, datetime(2024, 3, 5)),
        _tx('GROCERY MART', -1520.0, datetime(2024, 1, 10)),
        _tx('BOOKS', -300.0, datetime(2024, 2, 11)),
        _tx('SALARY', 50000.0, datetime(2024, 1, 31)),
    ]
    recurring = find_recurring_debits(transactions)
    assert len(recurring) == 1
    assert recurring[0]['merchant_pattern'] == 'netflix subscription'
    assert recurring[0]['estimated_amount'] == 649.0
    assert recurring[0]['occurrences'] == 3
    assert recurring[0]['first_occurrence_date'] == '2024-01-05'


def test_same_month_repeats_are_not_recurring():
    transactions = [_tx('CAFE', -100.0, datetime(2024, 1, day)) for day in (3, 10, 17)]
    assert find_recurring_debits(transactions) == []
