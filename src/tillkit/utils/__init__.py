"""Utility functions for tillkit."""

from tillkit.utils.date_parser import parse_date, parse_datetime
from tillkit.utils.amount_parser import parse_amount, quantize_money, format_money

__all__ = ["parse_date", "parse_datetime", "parse_amount", "quantize_money", "format_money"]
