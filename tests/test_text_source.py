import pytest
from PIL import Image

from statement_extractor import text_source
from statement_extractor.errors import DocumentReadError, TextServiceUnavailableError
from statement_extractor.text_source import (
    PdfPlumberTextService,
    extract_text_from_pdf,
    ocr_first_pages,
    select_document_text,
)

PDF_BYTES = b'%PDF-1.4 fake'


def test_short_text_is_replaced_by_richer_ocr():
    primary = 'x' * 50
    ocr_text = 'y' * 800
    assert select_document_text(primary, lambda: ocr_text) == ocr_text


def test_long_text_never_runs_ocr(fake_service):
    primary = 'z' * 300
    service = fake_service(text=primary, ocr_pages=['never used'])
    assert extract_text_from_pdf(PDF_BYTES, service) == primary
    assert service.render_calls == 0
    assert service.recognize_calls == 0


def test_ocr_pipeline_uses_ocr_text(fake_service):
    service = fake_service(text='a' * 50, ocr_pages=['b' * 800])
    text = extract_text_from_pdf(PDF_BYTES, service)
    assert text.strip() == 'b' * 800
    assert service.recognize_calls == 1


def test_shorter_ocr_text_is_appended():
    assert select_document_text('abc', lambda: 'd') == 'abc\nd'


def test_empty_ocr_keeps_primary():
    assert select_document_text('abc', lambda: '   ') == 'abc'


def test_ocr_limited_to_first_pages(fake_service):
    service = fake_service(text='', ocr_pages=['one', 'two', 'three'])
    assert ocr_first_pages(PDF_BYTES, service, page_limit=2) == 'one\ntwo\n'
    assert service.recognize_calls == 2


def test_ocr_page_error_counts_as_empty(fake_service):
    service = fake_service(text='', ocr_pages=[RuntimeError('tesseract crashed'), 'page two'])
    assert ocr_first_pages(PDF_BYTES, service) == '\npage two\n'


def test_ocr_unavailable(fake_service):
    service = fake_service(text='short', ocr_pages=['unused'], ocr_available=False)
    assert extract_text_from_pdf(PDF_BYTES, service) == 'short'
    assert service.render_calls == 0


def test_missing_service_is_fatal():
    with pytest.raises(TextServiceUnavailableError):
        extract_text_from_pdf(PDF_BYTES, None)


def test_backend_failure_becomes_document_error(fake_service):
    service = fake_service(error=RuntimeError('pdf backend crashed'))
    with pytest.raises(DocumentReadError, match='pdf backend crashed'):
        extract_text_from_pdf(PDF_BYTES, service)


def test_ocr_availability_check_failure_counts_as_no_ocr(fake_service):
    service = fake_service(text='short', ocr_pages=['unused'])
    service.ocr_available = lambda: 1 / 0
    assert ocr_first_pages(PDF_BYTES, service) == ''


def test_tesseract_receives_page_image(monkeypatch):
    seen = {}

    def fake_image_to_string(image, lang):
        seen['image'], seen['lang'] = image, lang
        return 'OCR TEXT'

    monkeypatch.setattr(text_source.pytesseract, 'image_to_string', fake_image_to_string)
    page = Image.new('RGB', (20, 20), 'white')
    assert PdfPlumberTextService(language='hin').recognize_text(page) == 'OCR TEXT'
    assert seen['image'] is page
    assert seen['lang'] == 'hin'
