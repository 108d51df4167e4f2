"""
Excel report generator for reconciliation status and history.
Creates multi-sheet workbooks with formatted output.
"""

from pathlib import Path
from typing import Optional
import logging

from openpyxl import Workbook
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ReconConfig
from ..models.ledger import Account
from ..models.reconciliation import (
    ReconciliationSession,
    ReconciliationSummary,
    SessionStatus,
    Staleness,
)
from ..utils.exceptions import ReportGenerationError
from ..utils.money import from_cents

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
GOOD_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
WARNING_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
CRITICAL_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

STALENESS_FILLS = {
    Staleness.GOOD: GOOD_FILL,
    Staleness.WARNING: WARNING_FILL,
    Staleness.CRITICAL: CRITICAL_FILL,
}

STATUS_FILLS = {
    SessionStatus.COMPLETED: GOOD_FILL,
    SessionStatus.IN_PROGRESS: WARNING_FILL,
    SessionStatus.ABANDONED: CRITICAL_FILL,
}


def _money(cents: Optional[int]):
    return float(from_cents(cents)) if cents is not None else ""


class ExcelReportGenerator:
    """Generates Excel workbooks with account status and session history."""

    def __init__(self, config: ReconConfig):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config
        self.sheet_config = config.output.sheets

    def generate_report(
        self,
        accounts: list[Account],
        summaries: list[ReconciliationSummary],
        sessions: list[ReconciliationSession],
        output_path: Path,
    ) -> Path:
        """
        Generate the reconciliation report.

        Args:
            accounts: Accounts, used for names and currencies
            summaries: One summary per account to list
            sessions: Sessions to list in the history sheet
            output_path: Path for output file

        Returns:
            Path to generated report
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        names = {a.id: a.name or a.id for a in accounts}

        if self.sheet_config.summary.enabled:
            self._create_summary_sheet(wb, summaries, names)
        if self.sheet_config.history.enabled:
            self._create_history_sheet(wb, sessions, names)

        if not wb.worksheets:
            raise ReportGenerationError("All report sheets are disabled")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to save report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(
        self,
        wb: Workbook,
        summaries: list[ReconciliationSummary],
        names: dict[str, str],
    ) -> None:
        """Create the per-account staleness sheet."""
        ws = wb.create_sheet(self.sheet_config.summary.name)
        headers = [
            "Account",
            "Status",
            "Last Reconciled",
            "Days Since",
            "Unreconciled",
            "Uncleared",
            "In Progress",
        ]
        self._write_headers(ws, headers)

        for row_num, summary in enumerate(summaries, start=2):
            row_data = [
                names.get(summary.account_id, summary.account_id),
                summary.staleness.value,
                summary.last_reconciled.strftime("%Y-%m-%d") if summary.last_reconciled else "Never",
                (
                    summary.days_since_last_reconciliation
                    if summary.days_since_last_reconciliation is not None
                    else ""
                ),
                summary.unreconciled_transaction_count,
                summary.uncleared_transaction_count,
                "Yes" if summary.has_session_in_progress else "No",
            ]
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                if col == 2:
                    cell.fill = STALENESS_FILLS[summary.staleness]

        self._auto_fit_columns(ws)

    def _create_history_sheet(
        self,
        wb: Workbook,
        sessions: list[ReconciliationSession],
        names: dict[str, str],
    ) -> None:
        """Create the session history sheet, newest first."""
        ws = wb.create_sheet(self.sheet_config.history.name)
        headers = [
            "Session",
            "Account",
            "Statement",
            "Status",
            "Started",
            "Completed",
            "Starting Balance",
            "Statement Ending Balance",
            "Computed Balance",
            "Actual Ending Balance",
            "Difference",
            "Cleared Transactions",
        ]
        self._write_headers(ws, headers)

        ordered = sorted(sessions, key=lambda s: s.sort_date, reverse=True)
        for row_num, session in enumerate(ordered, start=2):
            row_data = [
                session.id,
                names.get(session.account_id, session.account_id),
                session.statement_id,
                session.status.value,
                session.start_date.strftime("%Y-%m-%d %H:%M"),
                session.completed_date.strftime("%Y-%m-%d %H:%M") if session.completed_date else "",
                _money(session.starting_balance_cents),
                _money(session.ending_balance_cents),
                _money(session.computed_balance_cents),
                _money(session.actual_ending_balance_cents),
                _money(session.difference_cents),
                len(session.cleared_transaction_ids),
            ]
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                if col == 4:
                    cell.fill = STATUS_FILLS[session.status]
                elif col == 11 and session.difference_cents:
                    cell.fill = WARNING_FILL

        self._auto_fit_columns(ws)

    def _write_headers(self, ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Size columns to their longest value."""
        for column_cells in ws.columns:
            max_length = max(len(str(cell.value or "")) for cell in column_cells)
            ws.column_dimensions[column_cells[0].column_letter].width = min(max_length + 2, 50)
