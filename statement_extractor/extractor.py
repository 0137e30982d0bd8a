"""High-level orchestrator for statement extraction.

This module provides the entry points used by the CLI and the web app:
text in, or PDF bytes/path in, StatementParsingResult out.
"""
import os
import logging
from typing import Optional

from .config import ExtractorConfig, load_config
from .errors import DocumentReadError
from .models import StatementParsingResult
from .parsers.router import PARSER_CHOICES, StatementParserRouter
from .text_source import PdfPlumberTextService, TextAcquisitionService, extract_text_from_pdf

logger = logging.getLogger(__name__)


class StatementExtractor:
    """Main extractor class that wires text acquisition to the parser router."""

    def __init__(self,
                 config: Optional[ExtractorConfig] = None,
                 text_service: Optional[TextAcquisitionService] = None,
                 debug: Optional[bool] = None):
        self.config = config or load_config()
        self.debug = self.config.debug if debug is None else debug
        self.text_service = text_service
        self.router = StatementParserRouter(profile=self.config.profile, debug=self.debug)

    def _service(self, password: Optional[str]) -> TextAcquisitionService:
        if self.text_service is not None:
            return self.text_service
        return PdfPlumberTextService(
            password=password,
            resolution=self.config.ocr_resolution,
            language=self.config.ocr_language,
            tesseract_cmd=self.config.tesseract_cmd,
        )

    def extract_from_text(self, text: str, parser: Optional[str] = None) -> StatementParsingResult:
        """Parse pasted or previously extracted statement text."""
        parser = parser or self.config.parser
        if parser not in PARSER_CHOICES:
            logger.error(f"Unknown parser requested: {parser!r}")
            return StatementParsingResult(
                success=False,
                message='Unknown statement parser',
                error=f"Unknown parser {parser!r}; expected one of {', '.join(PARSER_CHOICES)}",
            )
        if self.debug:
            logger.info(f"Text sample for extraction: {text[:500]!r}")
        return self.router.parse(text or '', parser=parser)

    def extract_text(self, data: bytes, password: Optional[str] = None) -> str:
        """Document text with OCR fallback.

        Raises:
            DocumentReadError: unreadable or encrypted document.
            TextServiceUnavailableError: no usable text service.
        """
        return extract_text_from_pdf(
            data,
            self._service(password),
            min_length=self.config.min_text_length,
            page_limit=self.config.ocr_page_limit,
        )

    def extract_from_bytes(self, data: bytes, password: Optional[str] = None,
                           parser: Optional[str] = None) -> StatementParsingResult:
        """Extract transactions from PDF bytes.

        Document errors become a failed result; a missing text service is an
        environment problem and propagates.
        """
        try:
            text = self.extract_text(data, password=password)
        except DocumentReadError as e:
            logger.error(f"Error extracting PDF text: {e}")
            return StatementParsingResult(
                success=False,
                message='Failed to read statement document',
                error=str(e),
            )

        logger.info(f"Text extracted: {len(text)} characters")
        return self.extract_from_text(text, parser=parser)

    def extract_from_path(self, pdf_path: str, password: Optional[str] = None,
                          parser: Optional[str] = None) -> StatementParsingResult:
        if not os.path.isfile(pdf_path):
            logger.error(f"PDF file not found at path: {pdf_path}")
            return StatementParsingResult(
                success=False,
                message='Failed to read statement document',
                error=f"File not found: {pdf_path}",
            )

        logger.info(f"Extracting text from {pdf_path}")
        with open(pdf_path, 'rb') as f:
            data = f.read()
        return self.extract_from_bytes(data, password=password, parser=parser)
