"""Utility functions for protracker."""

from protracker.utils.date_parser import parse_date
from protracker.utils.amount_parser import parse_amount, to_decimal
from protracker.utils.checksum import generate_checksum

__all__ = ["parse_date", "parse_amount", "to_decimal", "generate_checksum"]
