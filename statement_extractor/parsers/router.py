"""Parser router: picks the layout-specific parser or the generic one.

In ``auto`` mode a detected Kotak statement goes to the Kotak parser first;
if that parser refuses the text or finds no rows, the generic heuristic
parser gets a chance on the same text.
"""
import logging
from typing import Union

from ..models import StatementParsingResult
from .detect import detect_template
from .generic import ExtractionProfile, STANDARD_PROFILE, get_profile, parse_generic_statement
from .kotak import parse_kotak_statement

logger = logging.getLogger(__name__)

PARSER_CHOICES = ('auto', 'kotak', 'generic')


class StatementParserRouter:
    """Selects a parsing strategy for statement text."""

    def __init__(self, profile: Union[str, ExtractionProfile] = STANDARD_PROFILE, debug: bool = False):
        self.profile = get_profile(profile) if isinstance(profile, str) else profile
        self.debug = debug

    def parse(self, text: str, parser: str = 'auto') -> StatementParsingResult:
        """
        Parse statement text with the requested parser.

        Args:
            text: Statement text
            parser: 'auto', 'kotak' or 'generic'

        Returns:
            StatementParsingResult with ``parser_used`` set
        """
        if parser not in PARSER_CHOICES:
            raise ValueError(f"Unknown parser {parser!r}; expected one of {PARSER_CHOICES}")

        if parser == 'kotak':
            return parse_kotak_statement(text, debug=self.debug)
        if parser == 'generic':
            return parse_generic_statement(text, self.profile, debug=self.debug)

        template_info = detect_template(text)
        if self.debug:
            logger.info(f"Template detected: {template_info.template_key} "
                        f"(confidence: {template_info.confidence:.2f}, features: {template_info.features})")

        if template_info.suggested_parser != 'kotak':
            return parse_generic_statement(text, self.profile, debug=self.debug)

        result = parse_kotak_statement(text, debug=self.debug)
        if result.success and result.transactions:
            return result

        reason = result.error or 'no transaction rows matched'
        logger.warning(f"Kotak parser gave no transactions ({reason}), trying generic parser")
        fallback = parse_generic_statement(text, self.profile, debug=self.debug)
        fallback.parser_used = 'generic_fallback'
        if fallback.success and not fallback.transactions and result.success:
            # Nothing either way; keep the header the Kotak parser did read
            return result
        return fallback


def parse_statement_text(text: str, parser: str = 'auto',
                         profile: Union[str, ExtractionProfile] = STANDARD_PROFILE,
                         debug: bool = False) -> StatementParsingResult:
    router = StatementParserRouter(profile=profile, debug=debug)
    return router.parse(text, parser=parser)
