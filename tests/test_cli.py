import json

import pytest

from statement_extractor.cli import main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('STATEMENT_PROFILE', 'STATEMENT_PARSER', 'STATEMENT_LOG_DIR', 'STATEMENT_DEBUG'):
        monkeypatch.delenv(name, raising=False)


def test_text_file_to_all_formats(tmp_path, kotak_text, capsys):
    source = tmp_path / 'april.txt'
    source.write_text(kotak_text, encoding='utf-8')
    out_dir = tmp_path / 'out'

    code = main(['--text', str(source), '-o', str(out_dir), '-f', 'all', '--reconcile'])

    assert code == 0
    assert (out_dir / 'april.xlsx').exists()
    assert (out_dir / 'april.xml').exists()
    data = json.loads((out_dir / 'april.json').read_text(encoding='utf-8'))
    assert data['parser_used'] == 'kotak'
    assert data['reconciliation']['is_consistent'] is True
    assert 'Statement totals reconcile.' in capsys.readouterr().out


def test_forced_parser_failure(tmp_path, generic_text):
    source = tmp_path / 'other.txt'
    source.write_text(generic_text, encoding='utf-8')
    assert main(['--text', str(source), '--parser', 'kotak', '-o', str(tmp_path)]) == 1


def test_missing_pdf(tmp_path):
    assert main([str(tmp_path / 'missing.pdf'), '-o', str(tmp_path)]) == 1


def test_requires_exactly_one_input():
    with pytest.raises(SystemExit):
        main([])
