"""Statement parsers: Kotak fixed layout, generic regex cascade, and the router between them."""

from .generic import (
    LOOSE_PROFILE,
    STANDARD_PROFILE,
    ExtractionProfile,
    extract_transactions,
    get_profile,
    parse_generic_statement,
)
from .kotak import is_kotak_statement, parse_kotak_header, parse_kotak_statement
from .router import StatementParserRouter, parse_statement_text

__all__ = [
    'ExtractionProfile',
    'LOOSE_PROFILE',
    'STANDARD_PROFILE',
    'StatementParserRouter',
    'extract_transactions',
    'get_profile',
    'is_kotak_statement',
    'parse_generic_statement',
    'parse_kotak_header',
    'parse_kotak_statement',
    'parse_statement_text',
]
