"""Command line entry point: ``statement-extract``."""
import os
import sys
import logging
import argparse
from dataclasses import replace
from typing import List, Optional

from .analysis import reconcile_statement, summarize_transactions
from .config import load_config
from .errors import ExtractorError
from .exporters import EXPORTERS
from .extractor import StatementExtractor
from .log_config import configure_logging
from .parsers.router import PARSER_CHOICES

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Extract bank statement transactions from a PDF or text file.')
    parser.add_argument('pdf', nargs='?', help='Path to the bank statement PDF file.')
    parser.add_argument('--text', metavar='FILE', help='Parse an already extracted text file instead of a PDF.')
    parser.add_argument('--parser', choices=PARSER_CHOICES, default=None, help='Parser to use (default: auto).')
    parser.add_argument('--profile', choices=['standard', 'loose'], default=None,
                        help='Pattern profile for the generic parser.')
    parser.add_argument('-p', '--password', help='Password for encrypted PDF.', default=None)
    parser.add_argument('-o', '--output-dir', help='Directory to save output files.', default='outputs')
    parser.add_argument('-f', '--output-format', help='Output format.', default='json',
                        choices=['json', 'excel', 'xml', 'all'])
    parser.add_argument('--reconcile', action='store_true',
                        help='Check parsed rows against the statement header totals.')
    parser.add_argument('--debug', help='Enable debug logging.', action='store_true')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if bool(args.pdf) == bool(args.text):
        parser.error('give either a PDF path or --text FILE')

    config = load_config()
    if args.profile:
        config = replace(config, profile=args.profile)
    if args.debug:
        config = replace(config, debug=True)
    configure_logging(config.log_level, config.log_dir, debug=config.debug)

    extractor = StatementExtractor(config=config)
    source = args.text or args.pdf
    try:
        if args.text:
            with open(args.text, 'r', encoding='utf-8') as f:
                result = extractor.extract_from_text(f.read(), parser=args.parser)
        else:
            result = extractor.extract_from_path(args.pdf, password=args.password, parser=args.parser)
    except FileNotFoundError:
        print(f"Error: input file not found at '{source}'", file=sys.stderr)
        return 1
    except ExtractorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not result.success:
        print(f"Extraction failed: {result.message} ({result.error})", file=sys.stderr)
        return 1

    print(f"{result.message} (parser: {result.parser_used})")
    summary = summarize_transactions(result.transactions)
    print(f"Credits: {summary['credit_count']} totalling {summary['total_credit']:.2f}")
    print(f"Debits: {summary['debit_count']} totalling {summary['total_debit']:.2f}")

    reconciliation = None
    if args.reconcile:
        if result.statement is None:
            print("No statement header to reconcile against.")
        else:
            reconciliation = reconcile_statement(result.statement)
            if reconciliation.is_consistent:
                print("Statement totals reconcile.")
            else:
                for discrepancy in reconciliation.discrepancies:
                    print(f"Discrepancy: {discrepancy}")

    os.makedirs(args.output_dir, exist_ok=True)
    base_name = os.path.splitext(os.path.basename(source))[0]
    formats = list(EXPORTERS) if args.output_format == 'all' else [args.output_format]
    for fmt in formats:
        export, extension = EXPORTERS[fmt]
        path = export(result, os.path.join(args.output_dir, base_name + extension), reconciliation)
        print(f"Exported to {fmt}: {path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
