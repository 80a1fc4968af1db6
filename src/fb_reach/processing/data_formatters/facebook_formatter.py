"""
Formats reach estimate responses into table rows.

Each row pairs the filter values of a targeting spec with the number of
users the API estimates it reaches. Entries of the ``geo_locations`` group
get their own columns; every other filter group is one column. Each column is
either a Scalar, when all of its values agree, or a ValueList of the distinct
values when they do not (e.g. a spec targeting two countries).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import pandas as pd
import requests

from fb_reach.config.constants import GEO_LOCATIONS_KEY, USERS_FIELD
from fb_reach.data_acquisition.targeting_specs import SpecLike, as_targeting_spec
from fb_reach.errors import MalformedResponseError, MissingEstimateError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scalar:
    """A column whose values all agree."""

    value: Any

    def to_cell(self) -> Any:
        return self.value


@dataclass(frozen=True)
class ValueList:
    """A column holding several distinct values, in first-seen order."""

    values: Tuple[Any, ...]

    def to_cell(self) -> List[Any]:
        return list(self.values)


ColumnValue = Union[Scalar, ValueList]


@dataclass(frozen=True)
class ResultRow:
    """One targeting spec joined with its reach estimate."""

    columns: Dict[str, ColumnValue]
    users: int

    def to_record(self) -> Dict[str, Any]:
        """Plain dict for a DataFrame row; ValueList columns become lists."""
        record = {name: column.to_cell() for name, column in self.columns.items()}
        record[USERS_FIELD] = self.users
        return record


def collapse_values(values: Iterable[Any]) -> ColumnValue:
    """Collapse a column to a Scalar if its values agree, else a ValueList."""
    unique: List[Any] = []
    seen: List[Tuple[type, Any]] = []
    for value in values:
        # Values can be unhashable (dicts), so compare rather than hash.
        # Keyed on type too, so 1, 1.0 and True stay distinct
        key = (type(value), value)
        if key not in seen:
            seen.append(key)
            unique.append(value)
    if len(unique) == 1:
        return Scalar(unique[0])
    return ValueList(tuple(unique))


def _expand(columns: Dict[str, List[Any]], name: str, value: Any):
    """Append the leaf values under ``value`` to their columns."""
    if isinstance(value, dict):
        for key, sub_value in value.items():
            _expand(columns, f"{name}.{key}" if name else key, sub_value)
    elif isinstance(value, list):
        if not value:
            columns.setdefault(name, [])
        for item in value:
            _expand(columns, name, item)
    else:
        columns.setdefault(name, []).append(value)


def flatten_targeting_spec(spec: SpecLike) -> Dict[str, ColumnValue]:
    """
    Flatten a targeting spec into named column values.

    ``{"geo_locations": {"countries": ["US", "GB"]}, "genders": [2]}`` becomes
    ``{"countries": ValueList(("US", "GB")), "genders": Scalar(2)}``. Objects
    inside lists are flattened into dotted names, so
    ``"regions": [{"key": "3890"}]`` becomes ``"regions.key": Scalar("3890")``.
    """
    parsed = as_targeting_spec(spec).parsed

    raw_columns: Dict[str, List[Any]] = {}
    for key, value in parsed.items():
        if key == GEO_LOCATIONS_KEY and isinstance(value, dict):
            _expand(raw_columns, "", value)
        else:
            _expand(raw_columns, key, value)

    return {name: collapse_values(values) for name, values in raw_columns.items()}


def parse_response_body(response: requests.Response) -> Any:
    """Decode a response body as JSON."""
    try:
        return response.json()
    except ValueError as e:
        raise MalformedResponseError(
            f"Reach estimate response (HTTP {response.status_code}) is not JSON: "
            f"{response.text[:200]!r}"
        ) from e


def extract_users(body: Any, status_code: Optional[int] = None) -> int:
    """
    Pull the ``data.users`` estimate out of a decoded response body.

    Raises:
        MissingEstimateError: the body has no estimate, typically because the
            API returned an ``error`` object instead of ``data``
    """
    data = body.get("data") if isinstance(body, dict) else None
    users = data.get(USERS_FIELD) if isinstance(data, dict) else None

    if users is None:
        api_error = body.get("error") if isinstance(body, dict) else None
        if not isinstance(api_error, dict):
            api_error = {}
        message = api_error.get("message") or "response has no data.users field"
        raise MissingEstimateError(
            f"No reach estimate in response: {message}",
            api_error=api_error,
            status_code=status_code,
        )
    if isinstance(users, bool):
        raise MalformedResponseError(f"Reach estimate users is not a number: {users!r}")
    try:
        return int(users)
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(
            f"Reach estimate users is not a number: {users!r}"
        ) from e


def process_reach_response(spec: SpecLike, response: requests.Response) -> ResultRow:
    """
    Combine a targeting spec and its response into one result row.

    Args:
        spec: The targeting spec the response was requested with
        response: The reach estimate response

    Returns:
        ResultRow of the flattened spec plus the users estimate
    """
    columns = flatten_targeting_spec(spec)
    body = parse_response_body(response)
    users = extract_users(body, status_code=response.status_code)
    logger.debug(f"Reach estimate of {users} users for columns {sorted(columns)}")
    return ResultRow(columns=columns, users=users)


def combine_rows(rows: Iterable[ResultRow]) -> pd.DataFrame:
    """
    Stack result rows into one table for side-by-side comparison.

    Columns are the union of the rows' columns in first-seen order, with
    ``users`` last. Cells a row has no value for are NaN.
    """
    records = [row.to_record() for row in rows]
    if not records:
        return pd.DataFrame(columns=[USERS_FIELD])

    table = pd.DataFrame(records)
    ordered = [column for column in table.columns if column != USERS_FIELD]
    return table[ordered + [USERS_FIELD]]
