"""Analysis module: optional passes over already-extracted transactions.

None of these feed back into extraction. A statement whose declared totals
disagree with its parsed rows is still a successful parse; the
reconciliation report only describes the gap.
"""
import re
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

import pandas as pd
from fuzzywuzzy import fuzz

from .models import BankStatement, Transaction

logger = logging.getLogger(__name__)

_DESCRIPTION_NOISE = re.compile(r'\b\d{2,}/\d{2,}/\d{2,}\b|\b\d{6,}\b|[x*]{4,}')


def transactions_to_dataframe(transactions: Sequence[Transaction]) -> pd.DataFrame:
    columns = ['date', 'merchant_name', 'amount', 'transaction_mode', 'upi_id',
               'account_number', 'reference', 'balance', 'timestamp']
    rows = []
    for t in transactions:
        rows.append({
            'date': t.date,
            'merchant_name': t.merchant_name,
            'amount': t.amount,
            'transaction_mode': t.transaction_mode,
            'upi_id': t.upi_id,
            'account_number': t.account_number,
            'reference': t.reference,
            'balance': t.balance,
            'timestamp': t.timestamp,
        })
    return pd.DataFrame(rows, columns=columns)


@dataclass
class ReconciliationReport:
    parsed_withdrawal_total: float
    parsed_deposit_total: float
    parsed_withdrawal_count: int
    parsed_deposit_count: int
    expected_closing_balance: float
    discrepancies: List[str] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        return not self.discrepancies

    def to_dict(self) -> Dict[str, Any]:
        return {
            'parsed_withdrawal_total': self.parsed_withdrawal_total,
            'parsed_deposit_total': self.parsed_deposit_total,
            'parsed_withdrawal_count': self.parsed_withdrawal_count,
            'parsed_deposit_count': self.parsed_deposit_count,
            'expected_closing_balance': self.expected_closing_balance,
            'is_consistent': self.is_consistent,
            'discrepancies': list(self.discrepancies),
        }


def reconcile_statement(statement: BankStatement, tolerance: float = 0.01) -> ReconciliationReport:
    """Compare a statement's declared header figures with its parsed rows."""
    debits = [t for t in statement.transactions if t.amount < 0]
    credits = [t for t in statement.transactions if t.amount > 0]

    withdrawal_total = round(sum(-t.amount for t in debits), 2)
    deposit_total = round(sum(t.amount for t in credits), 2)
    expected_closing = round(statement.opening_balance + deposit_total - withdrawal_total, 2)

    report = ReconciliationReport(
        parsed_withdrawal_total=withdrawal_total,
        parsed_deposit_total=deposit_total,
        parsed_withdrawal_count=len(debits),
        parsed_deposit_count=len(credits),
        expected_closing_balance=expected_closing,
    )

    if abs(withdrawal_total - statement.total_withdrawal) > tolerance:
        report.discrepancies.append(
            f"Withdrawal total {withdrawal_total:.2f} != declared {statement.total_withdrawal:.2f}")
    if abs(deposit_total - statement.total_deposit) > tolerance:
        report.discrepancies.append(
            f"Deposit total {deposit_total:.2f} != declared {statement.total_deposit:.2f}")
    if len(debits) != statement.withdrawal_count:
        report.discrepancies.append(
            f"Withdrawal count {len(debits)} != declared {statement.withdrawal_count}")
    if len(credits) != statement.deposit_count:
        report.discrepancies.append(
            f"Deposit count {len(credits)} != declared {statement.deposit_count}")
    if abs(expected_closing - statement.closing_balance) > tolerance:
        report.discrepancies.append(
            f"Opening balance plus movements {expected_closing:.2f} != declared closing "
            f"{statement.closing_balance:.2f}")

    if report.discrepancies:
        logger.warning(f"Statement {statement.account_number} does not reconcile: {report.discrepancies}")
    else:
        logger.info(f"Statement {statement.account_number} reconciles with its header totals")
    return report


def summarize_transactions(transactions: Sequence[Transaction]) -> Dict[str, Any]:
    """Credit/debit totals, per-mode breakdown and date range."""
    df = transactions_to_dataframe(transactions)
    if df.empty:
        return {
            'transaction_count': 0,
            'credit_count': 0,
            'debit_count': 0,
            'total_credit': 0.0,
            'total_debit': 0.0,
            'net': 0.0,
            'by_mode': {},
            'first_date': None,
            'last_date': None,
        }

    credits = df[df['amount'] > 0]
    debits = df[df['amount'] < 0]
    by_mode = (
        df.groupby('transaction_mode')['amount']
        .agg(['count', 'sum'])
        .rename(columns={'sum': 'total'})
    )

    return {
        'transaction_count': int(len(df)),
        'credit_count': int(len(credits)),
        'debit_count': int(len(debits)),
        'total_credit': round(float(credits['amount'].sum()), 2),
        'total_debit': round(float(-debits['amount'].sum()), 2),
        'net': round(float(df['amount'].sum()), 2),
        'by_mode': {
            mode: {'count': int(row['count']), 'total': round(float(row['total']), 2)}
            for mode, row in by_mode.iterrows()
        },
        'first_date': df['date'].min().isoformat(),
        'last_date': df['date'].max().isoformat(),
    }


def _normalize_merchant(name: str) -> str:
    return _DESCRIPTION_NOISE.sub('', name.strip().lower()).strip()


def find_recurring_debits(transactions: Sequence[Transaction], min_occurrences: int = 3,
                          amount_tolerance: float = 0.05,
                          desc_similarity_threshold: int = 80) -> List[Dict[str, Any]]:
    """
    Find debits that repeat with a similar merchant and amount (subscriptions, EMIs).

    Merchants are grouped with fuzzy token matching; within a group the most
    common amount, give or take ``amount_tolerance``, must occur at least
    ``min_occurrences`` times in distinct months.
    """
    logger.info("Analyzing recurring debits...")
    debits = [t for t in transactions if t.amount < 0]
    if len(debits) < min_occurrences:
        logger.info("Not enough debit transactions to analyze for recurrence.")
        return []

    groups: Dict[str, List[Transaction]] = {}
    processed = set()
    for i, current in enumerate(debits):
        if i in processed:
            continue
        key = _normalize_merchant(current.merchant_name)
        if not key:
            continue
        groups[key] = [current]
        processed.add(i)

        for j in range(i + 1, len(debits)):
            if j in processed:
                continue
            other = _normalize_merchant(debits[j].merchant_name)
            if other and fuzz.token_sort_ratio(key, other) >= desc_similarity_threshold:
                groups[key].append(debits[j])
                processed.add(j)

    recurring = []
    for key, group in groups.items():
        if len(group) < min_occurrences:
            continue

        common_amount, _ = Counter(round(abs(t.amount), 2) for t in group).most_common(1)[0]
        matching = [t for t in group if abs(abs(t.amount) - common_amount) <= common_amount * amount_tolerance]
        months = {t.date.strftime('%Y-%m') for t in matching}
        if len(matching) < min_occurrences or len(months) < min_occurrences:
            continue

        matching.sort(key=lambda t: t.timestamp)
        recurring.append({
            'merchant_pattern': key,
            'merchant_name': matching[0].merchant_name,
            'estimated_amount': common_amount,
            'occurrences': len(matching),
            'transaction_mode': matching[-1].transaction_mode,
            'first_occurrence_date': matching[0].date.isoformat(),
            'last_occurrence_date': matching[-1].date.isoformat(),
        })
        logger.info(f"Identified recurring debit: Desc='{key}', Amt={common_amount:.2f}, Occurrences={len(matching)}")

    return recurring
