"""Export module: writes a StatementParsingResult as JSON, Excel or XML.

Every exporter takes the result plus an output path and returns the path
written.
"""
import json
import logging
from datetime import datetime
import xml.etree.ElementTree as ET
import xml.dom.minidom
from typing import Optional

import openpyxl
from openpyxl.styles import Font

from .analysis import ReconciliationReport
from .models import StatementParsingResult

logger = logging.getLogger(__name__)

AMOUNT_FORMAT = '#,##0.00'
TRANSACTION_HEADERS = ['Date', 'Merchant', 'Mode', 'Debit', 'Credit', 'Balance',
                       'UPI ID', 'Account', 'Reference']


def export_json(result: StatementParsingResult, output_path: str,
                reconciliation: Optional[ReconciliationReport] = None) -> str:
    logger.info(f"Exporting data to JSON: {output_path}")
    payload = result.to_dict()
    if reconciliation is not None:
        payload['reconciliation'] = reconciliation.to_dict()
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    logger.info(f"Successfully exported data to {output_path}")
    return output_path


def export_excel(result: StatementParsingResult, output_path: str,
                 reconciliation: Optional[ReconciliationReport] = None) -> str:
    """
    Export transactions to an Excel workbook.

    The "Transactions" sheet always exists; a "Statement" sheet with the
    header figures is added when the parser produced a BankStatement.
    """
    logger.info(f"Exporting data to Excel: {output_path}")
    wb = openpyxl.Workbook()
    if "Sheet" in wb.sheetnames:
        wb.remove(wb["Sheet"])

    header_font = Font(bold=True)

    ws = wb.create_sheet("Transactions")
    for column, width in zip('ABCDEFGHI', (12, 50, 14, 15, 15, 15, 30, 16, 22)):
        ws.column_dimensions[column].width = width

    for col, header in enumerate(TRANSACTION_HEADERS, 1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = header_font

    for row_idx, t in enumerate(result.transactions, 2):
        debit_val = abs(t.amount) if t.amount < 0 else None
        credit_val = t.amount if t.amount >= 0 else None
        ws.cell(row=row_idx, column=1, value=t.date)
        ws.cell(row=row_idx, column=2, value=t.merchant_name)
        ws.cell(row=row_idx, column=3, value=t.transaction_mode)
        cell_debit = ws.cell(row=row_idx, column=4, value=debit_val)
        cell_credit = ws.cell(row=row_idx, column=5, value=credit_val)
        cell_balance = ws.cell(row=row_idx, column=6, value=t.balance)
        ws.cell(row=row_idx, column=7, value=t.upi_id)
        ws.cell(row=row_idx, column=8, value=t.account_number)
        ws.cell(row=row_idx, column=9, value=t.reference)
        for cell in (cell_debit, cell_credit, cell_balance):
            if cell.value is not None:
                cell.number_format = AMOUNT_FORMAT

    statement = result.statement
    if statement is not None:
        info_ws = wb.create_sheet("Statement")
        info_ws.column_dimensions['A'].width = 30
        info_ws.column_dimensions['B'].width = 30
        rows = [
            ("Account Number", statement.account_number),
            ("Customer Name", statement.customer_name),
            ("Period From", statement.period.start.isoformat() if statement.period.start else None),
            ("Period To", statement.period.end.isoformat() if statement.period.end else None),
            ("Opening Balance", statement.opening_balance),
            ("Closing Balance", statement.closing_balance),
            ("Total Withdrawal", statement.total_withdrawal),
            ("Total Deposit", statement.total_deposit),
            ("Withdrawal Count", statement.withdrawal_count),
            ("Deposit Count", statement.deposit_count),
        ]
        if reconciliation is not None:
            rows.append(("Reconciles", "Yes" if reconciliation.is_consistent else "No"))
            rows.extend(("Discrepancy", d) for d in reconciliation.discrepancies)

        for row_idx, (label, value) in enumerate(rows, 1):
            info_ws.cell(row=row_idx, column=1, value=label).font = header_font
            cell = info_ws.cell(row=row_idx, column=2, value=value)
            if isinstance(value, float):
                cell.number_format = AMOUNT_FORMAT

    wb.save(output_path)
    logger.info(f"Successfully exported data to {output_path}")
    return output_path


def export_xml(result: StatementParsingResult, output_path: str,
               reconciliation: Optional[ReconciliationReport] = None) -> str:
    """Export the result to a pretty-printed XML file."""
    logger.info(f"Exporting data to XML: {output_path}")

    root = ET.Element('BankStatement')
    root.set('success', 'true' if result.success else 'false')
    root.set('generatedTimestamp', datetime.now().isoformat())
    if result.parser_used:
        root.set('parser', result.parser_used)
    ET.SubElement(root, 'Message').text = result.message
    if result.error:
        ET.SubElement(root, 'Error').text = result.error

    statement = result.statement
    if statement is not None:
        info_elem = ET.SubElement(root, 'AccountInformation')
        for key, value in statement.to_dict().items():
            if key == 'transactions':
                continue
            if isinstance(value, dict):
                section = ET.SubElement(info_elem, key)
                for sub_key, sub_value in value.items():
                    ET.SubElement(section, sub_key).text = '' if sub_value is None else str(sub_value)
            else:
                ET.SubElement(info_elem, key).text = '' if value is None else str(value)

    if reconciliation is not None:
        rec_elem = ET.SubElement(root, 'Reconciliation')
        rec_elem.set('consistent', 'true' if reconciliation.is_consistent else 'false')
        for discrepancy in reconciliation.discrepancies:
            ET.SubElement(rec_elem, 'Discrepancy').text = discrepancy

    transactions_elem = ET.SubElement(root, 'Transactions')
    transactions_elem.set('count', str(len(result.transactions)))
    for t in result.transactions:
        tx_elem = ET.SubElement(transactions_elem, 'Transaction')
        for key, value in t.to_dict().items():
            ET.SubElement(tx_elem, key).text = str(value)

    rough_string = ET.tostring(root, 'utf-8')
    reparsed = xml.dom.minidom.parseString(rough_string)
    with open(output_path, 'wb') as f:
        f.write(reparsed.toprettyxml(indent="  ", encoding='utf-8'))

    logger.info(f"Successfully exported data to {output_path}")
    return output_path


EXPORTERS = {
    'json': (export_json, '.json'),
    'excel': (export_excel, '.xlsx'),
    'xml': (export_xml, '.xml'),
}
