import pytest

from statement_extractor.config import ExtractorConfig
from statement_extractor.text_source import TextAcquisitionService


class FakeTextService(TextAcquisitionService):
    """Deterministic stand-in for pdfplumber/Tesseract that records its calls."""

    def __init__(self, text='', ocr_pages=None, ocr_available=True, error=None):
        self.text = text
        self.ocr_pages = list(ocr_pages or [])
        self._ocr_available = ocr_available
        self.error = error
        self.get_text_calls = 0
        self.render_calls = 0
        self.recognize_calls = 0

    def get_text(self, data):
        self.get_text_calls += 1
        if self.error is not None:
            raise self.error
        return self.text

    def render_pages(self, data, max_pages):
        self.render_calls += 1
        return list(range(min(max_pages, len(self.ocr_pages))))

    def recognize_text(self, image):
        self.recognize_calls += 1
        page = self.ocr_pages[image]
        if isinstance(page, Exception):
            raise page
        return page

    def ocr_available(self):
        return self._ocr_available


KOTAK_STATEMENT = """Kotak Mahindra Bank
Account Statement
Account No: 1234567890
Customer Name: RAHUL SHARMA
Period: 01-04-2024 to 30-04-2024
Opening Balance: 10,000.00(Cr)
Closing Balance: 34,500.00(Cr)
Total Withdrawal Amount: 500.00(Dr)
Total Deposit Amount: 25,000.00(Cr)
Withdrawal Count: 1
Deposit Count: 1
Date Narration Chq/Ref No Withdrawal(Dr)/Deposit(Cr) Balance
05-04-2024 UPI/SWIGGY/swiggy@icici/Food UPI-409512345678 500.00(Dr) 34,500.00(Cr)
02-04-2024 NEFT ACME CORP SALARY NEFT-N123 25,000.00(Cr) 35,000.00(Cr)
"""

GENERIC_STATEMENT = """ACME BANK LTD
Statement of account
15/03/2024 UPI-JOHN DOE UPI Rs.1,500.00 Dr
16/03/2024 Balance brought forward
01-04-24 NEFT ABC CORP 25000.00 CR
"""


@pytest.fixture
def fake_service():
    return FakeTextService


@pytest.fixture
def config():
    return ExtractorConfig()


@pytest.fixture
def kotak_text():
    return KOTAK_STATEMENT


@pytest.fixture
def generic_text():
    return GENERIC_STATEMENT
