"""
Exports reach estimate tables for display and further analysis.
"""

import json
import logging
from pathlib import Path
from typing import Any, Union

import pandas as pd

from fb_reach.errors import ExportError

logger = logging.getLogger(__name__)


def _list_cells_to_json(value: Any) -> Any:
    """Encode list cells as JSON arrays so CSV readers can parse them back."""
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value))
    return value


def format_table(table: pd.DataFrame) -> str:
    """Render a table for the terminal."""
    if table.empty:
        return "No reach estimates collected."
    return table.to_string(index=False)


class DataExporter:
    """Handles exporting reach estimate tables in various formats."""

    def __init__(self, output_dir: Union[str, Path] = "."):
        """
        Initialize data exporter.

        Args:
            output_dir: Directory relative filenames are written to
        """
        self.output_dir = Path(output_dir)

    def _output_path(self, filename: Union[str, Path]) -> Path:
        path = Path(filename)
        if not path.is_absolute():
            path = self.output_dir / path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportError(f"Could not create directory for {path}: {e}") from e
        return path

    def export_to_csv(
        self, table: pd.DataFrame, filename: Union[str, Path] = "reach_estimates.csv"
    ) -> Path:
        """
        Export a reach estimate table to CSV.

        Args:
            table: Table from combine_rows or ReachCollector.collect
            filename: Output filename

        Returns:
            Path to the exported CSV file
        """
        output_path = self._output_path(filename)
        encoded = table.apply(lambda column: column.map(_list_cells_to_json))
        try:
            encoded.to_csv(output_path, index=False)
        except OSError as e:
            raise ExportError(f"Could not write {output_path}: {e}") from e
        logger.info(f"Reach estimates exported to {output_path}")
        return output_path

    def export_to_json(
        self, table: pd.DataFrame, filename: Union[str, Path] = "reach_estimates.json"
    ) -> Path:
        """Export a reach estimate table to JSON, one object per row."""
        output_path = self._output_path(filename)
        try:
            table.to_json(output_path, orient="records", indent=2)
        except OSError as e:
            raise ExportError(f"Could not write {output_path}: {e}") from e
        logger.info(f"Reach estimates exported to {output_path}")
        return output_path
