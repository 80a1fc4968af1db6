"""
Display and export of reach estimate tables.
"""

from .data_exporter import DataExporter, format_table

__all__ = ["DataExporter", "format_table"]
