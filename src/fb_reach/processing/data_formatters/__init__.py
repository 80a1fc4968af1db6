"""
Formatters turning raw API responses into table rows.
"""

from .facebook_formatter import (
    ColumnValue,
    ResultRow,
    Scalar,
    ValueList,
    collapse_values,
    combine_rows,
    extract_users,
    flatten_targeting_spec,
    process_reach_response,
)

__all__ = [
    "ColumnValue",
    "ResultRow",
    "Scalar",
    "ValueList",
    "collapse_values",
    "combine_rows",
    "extract_users",
    "flatten_targeting_spec",
    "process_reach_response",
]
