"""
CSV loaders for transactions and bank statements.
Reads exported CSV files and converts rows to ledger models.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional
import logging

import pandas as pd

from ..config import CsvInputConfig, ReconConfig
from ..models.ledger import Statement, Transaction, TransactionType
from ..utils.exceptions import ImportFileError, ValidationError
from ..utils.money import to_cents

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "yes", "y", "x", "c", "cleared"}


class CsvLoader:
    """
    Loader for transaction and statement CSV files.

    Rows that cannot be converted are logged and skipped; a file that
    cannot be read at all raises ``ImportFileError``.
    """

    def __init__(self, config: ReconConfig):
        """
        Initialize the loader with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config

    def load_transactions(
        self, file_path: Path, default_account_id: Optional[str] = None
    ) -> list[Transaction]:
        """
        Load transactions from a CSV file.

        Args:
            file_path: Path to the CSV file
            default_account_id: Account for rows without an account column

        Returns:
            List of transactions
        """
        settings = self.config.input.transactions
        df = self._read_csv(file_path, settings)

        transactions: list[Transaction] = []
        for idx, row in df.iterrows():
            try:
                txn = self._transaction_from_row(row, int(idx), settings, default_account_id)
            except (ValidationError, ValueError) as e:
                logger.warning(f"Row {idx}: {e}, skipping")
                continue
            transactions.append(txn)

        logger.info(f"Loaded {len(transactions)} transactions from {file_path}")
        return transactions

    def load_statements(self, file_path: Path) -> list[Statement]:
        """
        Load bank statements from a CSV file.

        Args:
            file_path: Path to the CSV file

        Returns:
            List of statements
        """
        settings = self.config.input.statements
        df = self._read_csv(file_path, settings)

        statements: list[Statement] = []
        for idx, row in df.iterrows():
            try:
                statement = self._statement_from_row(row, settings)
            except (ValidationError, ValueError) as e:
                logger.warning(f"Row {idx}: {e}, skipping")
                continue
            statements.append(statement)

        logger.info(f"Loaded {len(statements)} statements from {file_path}")
        return statements

    def _read_csv(self, file_path: Path, settings: CsvInputConfig) -> pd.DataFrame:
        logger.info(f"Reading CSV file: {file_path}")
        try:
            # Everything as text; amounts and dates are converted per row
            return pd.read_csv(
                file_path,
                encoding=settings.encoding,
                delimiter=settings.delimiter,
                dtype=str,
                keep_default_na=False,
            )
        except Exception as e:
            logger.error(f"Failed to read CSV file: {e}")
            raise ImportFileError(f"Failed to read CSV file {file_path}: {e}") from e

    def _transaction_from_row(
        self,
        row: pd.Series,
        idx: int,
        settings: CsvInputConfig,
        default_account_id: Optional[str],
    ) -> Transaction:
        columns = settings.column_mappings

        account_id = _text(row.get(columns.get("account_id", "Account"))) or default_account_id
        if not account_id:
            raise ValidationError("missing account")

        txn_date = _parse_date(row.get(columns.get("date", "Date")), settings.date_format)
        if txn_date is None:
            raise ValidationError("invalid date")

        raw_amount = _text(row.get(columns.get("amount", "Amount")))
        if not raw_amount:
            raise ValidationError("missing amount")
        amount = to_cents(raw_amount)

        txn_type = _parse_type(row.get(columns.get("type", "Type")), amount)
        # Exports often list expenses as positive numbers
        if txn_type is TransactionType.EXPENSE and amount > 0:
            amount = -amount

        return Transaction(
            id=_text(row.get(columns.get("id", "ID"))) or f"{account_id}-{idx + 1}",
            account_id=account_id,
            date=txn_date,
            amount_cents=amount,
            type=txn_type,
            description=_text(row.get(columns.get("description", "Description"))),
            is_cleared=_text(row.get(columns.get("cleared", "Cleared"))).lower() in TRUE_VALUES,
        )

    def _statement_from_row(self, row: pd.Series, settings: CsvInputConfig) -> Statement:
        columns = settings.column_mappings

        statement_id = _text(row.get(columns.get("id", "ID")))
        account_id = _text(row.get(columns.get("account_id", "Account")))
        if not statement_id or not account_id:
            raise ValidationError("missing statement or account id")

        period_start = _parse_date(
            row.get(columns.get("period_start", "Period_Start")), settings.date_format
        )
        period_end = _parse_date(
            row.get(columns.get("period_end", "Period_End")), settings.date_format
        )
        if period_start is None or period_end is None:
            raise ValidationError("invalid statement period")

        notes = _text(row.get(columns.get("notes", "Notes")))

        return Statement(
            id=statement_id,
            account_id=account_id,
            period_start=period_start,
            period_end=period_end,
            starting_balance_cents=to_cents(
                _text(row.get(columns.get("starting_balance", "Starting_Balance"))) or "0"
            ),
            ending_balance_cents=to_cents(
                _text(row.get(columns.get("ending_balance", "Ending_Balance"))) or "0"
            ),
            statement_date=_parse_date(
                row.get(columns.get("statement_date", "Statement_Date")), settings.date_format
            )
            or period_end,
            notes=notes or None,
        )


def _text(value: Any) -> str:
    if value is None or pd.isna(value):
        return ""
    return str(value).strip()


def _parse_date(value: Any, date_format: str) -> Optional[date]:
    """Parse a date with the configured format, falling back to ISO format."""
    text = _text(value)
    if not text:
        return None

    for fmt in (date_format, "%Y-%m-%d"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _parse_type(value: Any, amount_cents: int) -> TransactionType:
    """Read the transaction type column, inferring it from the sign when blank."""
    text = _text(value).lower()
    if not text:
        return TransactionType.INCOME if amount_cents > 0 else TransactionType.EXPENSE
    try:
        return TransactionType(text)
    except ValueError:
        raise ValidationError(f"unknown transaction type {text!r}") from None
