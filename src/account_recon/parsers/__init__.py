"""Loaders for transaction and statement CSV files."""

from .csv_loader import CsvLoader

__all__ = ["CsvLoader"]
