"""
Export utilities for the voucher register.
Supports Excel (.xlsx) and CSV (.csv) formats.
"""
import csv
import io
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from django.http import HttpResponse
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter


class ExportFormat:
    EXCEL = 'xlsx'
    CSV = 'csv'

    CHOICES = [EXCEL, CSV]
    CONTENT_TYPES = {
        EXCEL: 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        CSV: 'text/csv',
    }


def format_value(value: Any) -> str:
    """Format a value for export."""
    if value is None:
        return ''
    if isinstance(value, datetime):
        return value.strftime('%Y-%m-%d %H:%M:%S')
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    return str(value)


def _cell_value(value: Any, numeric: bool):
    # Keep amounts numeric in Excel so totals can be summed
    if numeric and isinstance(value, Decimal):
        return float(value)
    return format_value(value)


def export_to_excel(
    data: list[dict],
    columns: list[dict],
    title: str = 'Export',
    sheet_name: str = 'Data',
) -> bytes:
    """
    Export rows to an Excel workbook.

    Layout: title in row 1, export timestamp in row 2, column headers in
    row 4, data from row 5. The header row is frozen.

    Args:
        data: List of dictionaries containing the data
        columns: List of column definitions with 'key', 'header', and optional 'width'/'numeric'
        title: Title for the export
        sheet_name: Name of the worksheet
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name

    header_font = Font(bold=True, color='FFFFFF')
    header_fill = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')
    header_alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
    thin_border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(columns))
    title_cell = ws.cell(row=1, column=1, value=title)
    title_cell.font = Font(bold=True, size=14)
    title_cell.alignment = Alignment(horizontal='center')

    ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=len(columns))
    timestamp_cell = ws.cell(row=2, column=1, value=f"Exported: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    timestamp_cell.alignment = Alignment(horizontal='center')
    timestamp_cell.font = Font(italic=True, size=10, color='666666')

    header_row = 4
    for col_idx, col in enumerate(columns, 1):
        cell = ws.cell(row=header_row, column=col_idx, value=col['header'])
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment
        cell.border = thin_border
        ws.column_dimensions[get_column_letter(col_idx)].width = col.get('width', 15)

    for row_idx, row_data in enumerate(data, header_row + 1):
        for col_idx, col in enumerate(columns, 1):
            numeric = col.get('numeric', False)
            value = _cell_value(row_data.get(col['key'], ''), numeric)
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            cell.border = thin_border
            if numeric:
                cell.alignment = Alignment(horizontal='right')
                cell.number_format = '#,##0.00'

    ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def export_to_csv(
    data: list[dict],
    columns: list[dict],
    delimiter: str = ',',
) -> str:
    output = io.StringIO()
    writer = csv.writer(output, delimiter=delimiter, quoting=csv.QUOTE_MINIMAL)

    writer.writerow([col['header'] for col in columns])
    for row_data in data:
        writer.writerow([format_value(row_data.get(col['key'], '')) for col in columns])

    return output.getvalue()


def create_export_response(
    data: list[dict],
    columns: list[dict],
    format: str,
    filename: str,
    title: str = 'Export',
) -> HttpResponse:
    """
    Create an HTTP attachment response with the exported file.

    Raises ValueError for an unsupported format.
    """
    if format not in ExportFormat.CHOICES:
        raise ValueError(f"Invalid format: {format}. Must be one of {ExportFormat.CHOICES}")

    content_type = ExportFormat.CONTENT_TYPES[format]

    if format == ExportFormat.EXCEL:
        response = HttpResponse(export_to_excel(data, columns, title=title), content_type=content_type)
    else:
        response = HttpResponse(export_to_csv(data, columns), content_type=content_type)
        response.charset = 'utf-8-sig'  # BOM for Excel compatibility

    response['Content-Disposition'] = f'attachment; filename="{filename}.{format}"'
    return response


# =============================================================================
# Voucher Register
# =============================================================================

VOUCHER_EXPORT_COLUMNS = [
    {'key': 'voucher_number', 'header': 'Voucher Number', 'width': 18},
    {'key': 'date', 'header': 'Date', 'width': 12},
    {'key': 'voucher_type', 'header': 'Type', 'width': 10},
    {'key': 'status', 'header': 'Status', 'width': 12},
    {'key': 'narration', 'header': 'Narration', 'width': 35},
    {'key': 'total_debit', 'header': 'Total Debit', 'width': 15, 'numeric': True},
    {'key': 'total_credit', 'header': 'Total Credit', 'width': 15, 'numeric': True},
    {'key': 'source_document', 'header': 'Source Document', 'width': 12},
    {'key': 'source_reference', 'header': 'Source Reference', 'width': 20},
    {'key': 'created_by_email', 'header': 'Created By', 'width': 25},
    {'key': 'created_at', 'header': 'Created At', 'width': 18},
]

VOUCHER_LINE_EXPORT_COLUMNS = [
    {'key': 'voucher_number', 'header': 'Voucher Number', 'width': 18},
    {'key': 'date', 'header': 'Date', 'width': 12},
    {'key': 'line_no', 'header': 'Line #', 'width': 8},
    {'key': 'account_code', 'header': 'Account Code', 'width': 15},
    {'key': 'account_name', 'header': 'Account Name', 'width': 30},
    {'key': 'payee_id', 'header': 'Payee', 'width': 15},
    {'key': 'description', 'header': 'Description', 'width': 35},
    {'key': 'debit', 'header': 'Debit', 'width': 15, 'numeric': True},
    {'key': 'credit', 'header': 'Credit', 'width': 15, 'numeric': True},
]


def prepare_voucher_export_data(vouchers) -> list[dict]:
    """One row per voucher."""
    data = []
    for voucher in vouchers:
        data.append({
            'voucher_number': voucher.voucher_number,
            'date': voucher.date,
            'voucher_type': voucher.voucher_type,
            'status': voucher.status,
            'narration': voucher.narration,
            'total_debit': voucher.total_debit,
            'total_credit': voucher.total_credit,
            'source_document': voucher.source_document,
            'source_reference': voucher.source_reference,
            'created_by_email': voucher.created_by.email if voucher.created_by else '',
            'created_at': voucher.created_at,
        })
    return data


def prepare_voucher_lines_export_data(vouchers) -> list[dict]:
    """One row per journal line."""
    data = []
    for voucher in vouchers:
        for line in voucher.lines.all():
            data.append({
                'voucher_number': voucher.voucher_number,
                'date': voucher.date,
                'line_no': line.line_no,
                'account_code': line.account.code,
                'account_name': line.account.name,
                'payee_id': line.payee_id,
                'description': line.description,
                'debit': line.debit,
                'credit': line.credit,
            })
    return data
