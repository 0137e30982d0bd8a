"""Data records produced by the extraction pipeline."""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

MAX_MERCHANT_LENGTH = 100


class TransactionMode:
    """Closed set of payment-mode labels."""
    UPI = 'UPI'
    NEFT = 'NEFT'
    IMPS = 'IMPS'
    RTGS = 'RTGS'
    ATM = 'ATM'
    POS = 'POS'
    CASH = 'CASH'
    CHEQUE = 'CHEQUE'
    BANK_TRANSFER = 'BANK_TRANSFER'

    ALL = (UPI, NEFT, IMPS, RTGS, ATM, POS, CASH, CHEQUE, BANK_TRANSFER)


@dataclass
class Transaction:
    """A single money movement. Positive amounts are credits, negative are debits."""
    merchant_name: str
    amount: float
    timestamp: int  # epoch milliseconds, local midnight of the booking date
    transaction_mode: str = TransactionMode.BANK_TRANSFER
    upi_id: Optional[str] = None
    account_number: Optional[str] = None
    reference: Optional[str] = None
    balance: Optional[float] = None

    @property
    def date(self) -> date:
        return datetime.fromtimestamp(self.timestamp / 1000).date()

    @property
    def is_credit(self) -> bool:
        return self.amount > 0

    @property
    def is_debit(self) -> bool:
        return self.amount < 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary, leaving out optional fields that are unset."""
        data = {
            'merchant_name': self.merchant_name,
            'amount': self.amount,
            'timestamp': self.timestamp,
            'date': self.date.isoformat(),
            'transaction_mode': self.transaction_mode,
            'type': 'credit' if self.amount >= 0 else 'debit',
        }
        for key in ('upi_id', 'account_number', 'reference', 'balance'):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class StatementPeriod:
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass
class BankStatement:
    """Header summary of a fixed-layout statement plus its parsed rows.

    The declared totals and counts are copied from the header as-is; they are
    not checked against ``transactions`` (see ``analysis.reconcile_statement``).
    """
    account_number: str = 'Unknown'
    customer_name: str = 'Unknown'
    period: StatementPeriod = field(default_factory=StatementPeriod)
    opening_balance: float = 0.0
    closing_balance: float = 0.0
    total_withdrawal: float = 0.0
    total_deposit: float = 0.0
    withdrawal_count: int = 0
    deposit_count: int = 0
    transactions: List[Transaction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'account_number': self.account_number,
            'customer_name': self.customer_name,
            'period': {
                'from': self.period.start.isoformat() if self.period.start else None,
                'to': self.period.end.isoformat() if self.period.end else None,
            },
            'opening_balance': self.opening_balance,
            'closing_balance': self.closing_balance,
            'total_withdrawal': self.total_withdrawal,
            'total_deposit': self.total_deposit,
            'withdrawal_count': self.withdrawal_count,
            'deposit_count': self.deposit_count,
            'transactions': [t.to_dict() for t in self.transactions],
        }


@dataclass
class StatementParsingResult:
    """Outcome of an extraction call.

    A successful call may carry an empty transaction list; ``error`` is only
    set when ``success`` is False.
    """
    success: bool
    message: str
    transactions: List[Transaction] = field(default_factory=list)
    statement: Optional[BankStatement] = None
    error: Optional[str] = None
    parser_used: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'success': self.success,
            'message': self.message,
            'transactions': [t.to_dict() for t in self.transactions],
        }
        if self.statement is not None:
            data['statement'] = self.statement.to_dict()
        if self.error is not None:
            data['error'] = self.error
        if self.parser_used is not None:
            data['parser_used'] = self.parser_used
        return data


@dataclass
class RawMatch:
    """Tokens captured by one pattern on one candidate line."""
    pattern_name: str
    date_token: str
    description_token: str
    amount_token: str
    line: str
