"""
Export service for transaction data.

Provides functionality to export transactions to CSV and XLSX formats.
"""

import csv
import io
import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional, cast

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from spendbook.config import CSV_DATE_FORMAT, CSV_HEADERS, EXPORT_FILENAME_PREFIX
from spendbook.models import EnrichedTransaction, RollupRow, group_totals

if TYPE_CHECKING:
    from spendbook.db.repository import FinanceRepository

logger = logging.getLogger(__name__)


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    XLSX = "xlsx"


def _csv_row(txn: EnrichedTransaction) -> list[str]:
    return [
        txn.transaction_date.strftime(CSV_DATE_FORMAT),
        txn.bank_account.account_name,
        txn.expense_category.name,
        txn.expense_category.category,
        txn.expense_category.group,
        txn.description or "",
        f"{txn.amount:.2f}",
    ]


def _write_text(ws: Worksheet, row: int, column: int, value):
    """Write a text cell; openpyxl would otherwise treat a leading "=" as a formula."""
    cell = ws.cell(row=row, column=column, value=value)
    if isinstance(value, str) and value.startswith("="):
        cell.data_type = "s"
    return cell


class ExportService:
    """Service for exporting transactions to various formats."""

    def __init__(self, repository: "FinanceRepository"):
        """
        Initialize the export service.

        Args:
            repository: Repository to read transactions from
        """
        self.repository = repository

    def get_transactions(
        self,
        start_date=None,
        end_date=None,
    ) -> list[EnrichedTransaction]:
        """
        Get transactions with optional date filtering.

        The range applies only when both bounds are given; otherwise every
        transaction is returned.
        """
        if start_date and end_date:
            return self.repository.queries.filter_by_date_range(start_date, end_date)
        return self.repository.transactions.list()

    def render_csv(self, transactions: list[EnrichedTransaction]) -> str:
        """
        Render transactions as CSV text, one row per transaction in input order.

        The header row is plain; every data field is quoted so commas or
        quotes inside names and descriptions never split columns.
        """
        text_buffer = io.StringIO()

        header_writer = csv.writer(text_buffer, lineterminator="\n")
        header_writer.writerow(CSV_HEADERS)

        writer = csv.writer(text_buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for txn in transactions:
            writer.writerow(_csv_row(txn))

        return text_buffer.getvalue()

    def export_to_csv(self, start_date=None, end_date=None) -> io.BytesIO:
        """
        Export transactions to CSV format.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter

        Returns:
            BytesIO buffer containing UTF-8 encoded CSV data
        """
        transactions = self.get_transactions(start_date, end_date)

        buffer = io.BytesIO()
        buffer.write(self.render_csv(transactions).encode("utf-8"))
        buffer.seek(0)

        logger.info(f"Exported {len(transactions)} transactions to CSV")
        return buffer

    def export_to_xlsx(self, start_date=None, end_date=None) -> io.BytesIO:
        """
        Export transactions to XLSX format with formatting.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter

        Returns:
            BytesIO buffer containing the XLSX data
        """
        transactions = self.get_transactions(start_date, end_date)

        wb = Workbook()
        ws = cast(Worksheet, wb.active)
        ws.title = "Transactions"

        # Define styles
        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(
            start_color="4472C4", end_color="4472C4", fill_type="solid"
        )

        for col, header in enumerate(CSV_HEADERS, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")

        # Data rows; dates and amounts stay typed so Excel can sort and sum them
        for row_idx, txn in enumerate(transactions, 2):
            ws.cell(row=row_idx, column=1, value=txn.transaction_date.date())
            _write_text(ws, row_idx, 2, txn.bank_account.account_name)
            _write_text(ws, row_idx, 3, txn.expense_category.name)
            _write_text(ws, row_idx, 4, txn.expense_category.category)
            _write_text(ws, row_idx, 5, txn.expense_category.group)
            _write_text(ws, row_idx, 6, txn.description or "")
            ws.cell(row=row_idx, column=7, value=txn.amount)

            ws.cell(row=row_idx, column=1).number_format = "yyyy-mm-dd"
            ws.cell(row=row_idx, column=7).number_format = "#,##0.00"

        column_widths = [12, 20, 20, 15, 15, 40, 12]
        for col, width in enumerate(column_widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

        # Freeze header row
        ws.freeze_panes = "A2"

        self._add_summary_sheet(wb, transactions)

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)

        logger.info(f"Exported {len(transactions)} transactions to XLSX")
        return buffer

    def _add_summary_sheet(self, wb: Workbook, transactions: list[EnrichedTransaction]):
        """Add a summary sheet with category and bank totals of the exported rows."""
        ws = wb.create_sheet(title="Summary")

        header_font = Font(bold=True)
        title_font = Font(bold=True, size=14)

        ws.cell(row=1, column=1, value="Expense Summary").font = title_font
        ws.cell(
            row=2,
            column=1,
            value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        )

        sections: list[tuple[str, list[RollupRow]]] = [
            (
                "Category",
                group_totals(transactions, lambda t: t.expense_category.category),
            ),
            (
                "Bank Account",
                group_totals(transactions, lambda t: t.bank_account.account_name),
            ),
        ]

        row = 4
        for title, rows in sections:
            ws.cell(row=row, column=1, value=title).font = header_font
            ws.cell(row=row, column=2, value="Count").font = header_font
            ws.cell(row=row, column=3, value="Total").font = header_font
            row += 1

            for rollup in rows:
                _write_text(ws, row, 1, rollup.key)
                ws.cell(row=row, column=2, value=rollup.count)
                total_cell = ws.cell(row=row, column=3, value=rollup.total)
                total_cell.number_format = "#,##0.00"
                row += 1

            row += 1

        grand_total = sum((t.amount for t in transactions), Decimal("0"))
        ws.cell(row=row, column=1, value="Total").font = header_font
        ws.cell(row=row, column=2, value=len(transactions))
        ws.cell(row=row, column=3, value=grand_total).number_format = "#,##0.00"

        ws.column_dimensions["A"].width = 20
        ws.column_dimensions["B"].width = 10
        ws.column_dimensions["C"].width = 18

    def get_filename(
        self,
        format: ExportFormat,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> str:
        """
        Generate a filename for the export.

        Args:
            format: Export format
            start_date: Optional start date
            end_date: Optional end date

        Returns:
            Suggested filename
        """
        date_str = datetime.now().strftime("%Y%m%d")

        if start_date and end_date:
            date_range = (
                f"_{start_date.strftime('%Y%m%d')}-{end_date.strftime('%Y%m%d')}"
            )
        else:
            date_range = ""

        return f"{EXPORT_FILENAME_PREFIX}_{date_str}{date_range}.{format.value}"
