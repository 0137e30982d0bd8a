"""Bank statement and SMS alert transaction extraction."""

from .config import ExtractorConfig, load_config
from .errors import DocumentReadError, ExtractorError, TextServiceUnavailableError, UnsupportedFormatError
from .extractor import StatementExtractor
from .models import BankStatement, StatementParsingResult, StatementPeriod, Transaction, TransactionMode
from .parsers import parse_statement_text
from .sms import parse_sms

__all__ = [
    'BankStatement',
    'DocumentReadError',
    'ExtractorConfig',
    'ExtractorError',
    'StatementExtractor',
    'StatementParsingResult',
    'StatementPeriod',
    'TextServiceUnavailableError',
    'Transaction',
    'TransactionMode',
    'UnsupportedFormatError',
    'load_config',
    'parse_sms',
    'parse_statement_text',
]
