import pytest

from statement_extractor.parsers import LOOSE_PROFILE, StatementParserRouter, parse_statement_text


def test_auto_uses_kotak_parser(kotak_text):
    result = parse_statement_text(kotak_text)
    assert result.parser_used == 'kotak'
    assert result.statement is not None
    assert len(result.transactions) == 2


def test_auto_uses_generic_parser(generic_text):
    result = parse_statement_text(generic_text)
    assert result.parser_used == 'generic'
    assert len(result.transactions) == 2


def test_auto_falls_back_when_kotak_finds_nothing():
    text = 'KOTAK\n15/03/2024 UPI-JOHN DOE UPI Rs.1,500.00 Dr\n'
    result = parse_statement_text(text)
    assert result.success is True
    assert result.parser_used == 'generic_fallback'
    assert result.transactions[0].merchant_name == 'JOHN DOE'


def test_auto_keeps_kotak_header_when_nothing_found():
    result = parse_statement_text('Kotak Mahindra Bank\nAccount No: 555\n')
    assert result.success is True
    assert result.parser_used == 'kotak'
    assert result.statement.account_number == '555'
    assert result.transactions == []


def test_forced_kotak_parser_refuses_other_banks(generic_text):
    result = parse_statement_text(generic_text, parser='kotak')
    assert result.success is False
    assert result.error == 'Unsupported bank statement format'


def test_forced_generic_parser(kotak_text):
    result = parse_statement_text(kotak_text, parser='generic')
    assert result.parser_used == 'generic'
    assert result.statement is None


def test_router_profile_by_name():
    assert StatementParserRouter(profile='loose').profile is LOOSE_PROFILE


def test_unknown_parser():
    with pytest.raises(ValueError):
        StatementParserRouter().parse('text', parser='hdfc')
