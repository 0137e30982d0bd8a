from datetime import datetime

import pytest

from statement_extractor.utils import clean_description, parse_amount_safe, parse_date_token, to_epoch_millis


@pytest.mark.parametrize('raw, expected', [
    ('1,500.00', 1500.0),
    ('Rs.1,500.00', 1500.0),
    ('INR 250', 250.0),
    ('₹ 99.50', 99.5),
    ('(200.00)', -200.0),
    ('200.00-', -200.0),
    ('-75', -75.0),
])
def test_parse_amount_safe(raw, expected):
    assert parse_amount_safe(raw) == expected


@pytest.mark.parametrize('raw', [None, '', 'nan', '-', '.', 'abc', 'inf', '1.2.3'])
def test_parse_amount_safe_rejects_garbage(raw):
    assert parse_amount_safe(raw) is None


def test_parse_date_token_formats():
    assert parse_date_token('15/03/2024') == datetime(2024, 3, 15)
    assert parse_date_token('01-04-24') == datetime(2024, 4, 1)
    assert parse_date_token('05.03.2024') == datetime(2024, 3, 5)
    # day 25 cannot be a month, so the US layout is used
    assert parse_date_token('03/25/2024') == datetime(2024, 3, 25)


def test_parse_date_token_invalid():
    assert parse_date_token('31/02/2024') is None
    assert parse_date_token('not a date') is None


def test_to_epoch_millis_is_local_time():
    moment = datetime(2024, 3, 15)
    assert to_epoch_millis(moment) == int(moment.timestamp() * 1000)
    assert datetime.fromtimestamp(to_epoch_millis(moment) / 1000) == moment


def test_clean_description():
    assert clean_description('  JOHN   DOE  ') == 'JOHN DOE'
    assert clean_description('PAY*MENT #42 @shop') == 'PAYMENT 42 @shop'
    assert clean_description('A' * 150) == 'A' * 100
    assert clean_description(None) == ''
