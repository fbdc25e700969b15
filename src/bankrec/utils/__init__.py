"""Utility functions for bankrec."""

from bankrec.utils.date_parser import parse_date, parse_statement_timestamp
from bankrec.utils.amount_parser import parse_amount, parse_statement_amount
from bankrec.utils.logging_config import get_logger, setup_logging

__all__ = [
    "parse_date",
    "parse_statement_timestamp",
    "parse_amount",
    "parse_statement_amount",
    "get_logger",
    "setup_logging",
]
