"""Getting text out of a statement document.

The text layer of the PDF is read first. Scanned statements have little or
no text layer, so when the result is short the first pages are rendered to
images and run through OCR, and whichever text is richer is kept.
"""
import io
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

import pdfplumber
import pytesseract
from PIL import Image

from .errors import DocumentReadError, ExtractorError, TextServiceUnavailableError

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 200
OCR_PAGE_LIMIT = 2


class TextAcquisitionService(ABC):
    """Source of raw document text: a text-layer reader plus an OCR engine."""

    @abstractmethod
    def get_text(self, data: bytes) -> str:
        """Text layer of the whole document, pages separated by newlines."""

    @abstractmethod
    def render_pages(self, data: bytes, max_pages: int) -> List[Image.Image]:
        """Raster images of the first ``max_pages`` pages."""

    @abstractmethod
    def recognize_text(self, image: Image.Image) -> str:
        """OCR text of one page image."""

    def ocr_available(self) -> bool:
        return True


class PdfPlumberTextService(TextAcquisitionService):
    """pdfplumber for the text layer and page rendering, Tesseract for OCR."""

    def __init__(self, password: Optional[str] = None, resolution: int = 144,
                 language: str = 'eng', tesseract_cmd: Optional[str] = None):
        self.password = password
        self.resolution = resolution
        self.language = language
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self._ocr_available: Optional[bool] = None

    def _open(self, data: bytes):
        try:
            return pdfplumber.open(io.BytesIO(data), password=self.password)
        except Exception as e:
            if self.password is None and 'password' in str(e).lower():
                raise DocumentReadError('PDF is encrypted, a password is required') from e
            raise DocumentReadError(f"Could not open PDF: {e}") from e

    def get_text(self, data: bytes) -> str:
        pdf = self._open(data)
        full_text = ''
        try:
            logger.info(f"PDF loaded. Pages: {len(pdf.pages)}")
            for page_num, page in enumerate(pdf.pages, start=1):
                page_text = page.extract_text() or ''
                if page_text:
                    logger.debug(f"Page {page_num} extracted {len(page_text)} characters")
                else:
                    logger.warning(f"Page {page_num} extracted no text (possibly image-based page)")
                full_text += page_text + '\n'
        except Exception as e:
            raise DocumentReadError(f"Error extracting text from PDF: {e}") from e
        finally:
            pdf.close()
        return full_text

    def render_pages(self, data: bytes, max_pages: int) -> List[Image.Image]:
        pdf = self._open(data)
        images = []
        try:
            for page in pdf.pages[:max_pages]:
                images.append(page.to_image(resolution=self.resolution).original.copy())
        finally:
            pdf.close()
        return images

    def recognize_text(self, image: Image.Image) -> str:
        return pytesseract.image_to_string(image, lang=self.language)

    def ocr_available(self) -> bool:
        if self._ocr_available is None:
            try:
                version = pytesseract.get_tesseract_version()
                logger.debug(f"Tesseract {version} available for OCR")
                self._ocr_available = True
            except Exception as e:
                logger.warning(f"Tesseract not available, skipping OCR: {e}")
                self._ocr_available = False
        return self._ocr_available


def select_document_text(primary: str, ocr_fallback: Callable[[], str],
                         min_length: int = MIN_TEXT_LENGTH) -> str:
    """Choose between the text layer and OCR output.

    ``ocr_fallback`` is only called when the stripped primary text is shorter
    than ``min_length``. Longer OCR text replaces the primary text, shorter
    non-empty OCR text is appended to it.
    """
    primary_length = len(primary.strip())
    logger.info(f"Standard extraction: {primary_length} characters")
    if primary_length >= min_length:
        return primary

    logger.info("Insufficient text, trying OCR...")
    secondary = ocr_fallback()
    secondary_length = len(secondary.strip())

    if secondary_length > primary_length:
        logger.info(f"Using OCR results ({secondary_length} chars)")
        return secondary
    if secondary_length > 0:
        logger.info("Combining standard and OCR results")
        return primary + '\n' + secondary
    return primary


def ocr_first_pages(data: bytes, service: TextAcquisitionService, page_limit: int = OCR_PAGE_LIMIT) -> str:
    """OCR text of the first pages; failures count as empty text, never raise."""
    try:
        if not service.ocr_available():
            return ''
        images = service.render_pages(data, page_limit)
    except Exception as e:
        logger.error(f"Could not render pages for OCR: {e}")
        return ''

    ocr_text = ''
    for page_num, image in enumerate(images, start=1):
        logger.info(f"OCR processing page {page_num}/{len(images)}")
        try:
            page_text = service.recognize_text(image) or ''
        except Exception as e:
            logger.error(f"OCR error on page {page_num}: {e}")
            page_text = ''
        ocr_text += page_text + '\n'
    return ocr_text


def extract_text_from_pdf(data: bytes, service: Optional[TextAcquisitionService],
                          min_length: int = MIN_TEXT_LENGTH,
                          page_limit: int = OCR_PAGE_LIMIT) -> str:
    """Text of a PDF document, falling back to OCR for image-only statements.

    Raises:
        TextServiceUnavailableError: if no text acquisition service is configured.
        DocumentReadError: if the document itself cannot be read.
    """
    if service is None:
        raise TextServiceUnavailableError('No text acquisition service configured')

    try:
        primary = service.get_text(data)
    except ExtractorError:
        raise
    except Exception as e:
        raise DocumentReadError(f"Error extracting text from PDF: {e}") from e

    return select_document_text(
        primary,
        lambda: ocr_first_pages(data, service, page_limit),
        min_length=min_length,
    )
