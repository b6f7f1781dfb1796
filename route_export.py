"""
Route Book Exporter

This module saves the stops of a route book as CSV, Excel or JSON files,
and reads CSV files back into stops.

For Python beginners:
- CSV files are simple comma-separated text files
- Excel files get a second "Summary" sheet with a few counts
- JSON keeps every field plus some metadata about the export
"""

import csv
import json
import os
from pathlib import Path
from datetime import datetime
from typing import List, Dict, Any
import pandas as pd
from dotenv import load_dotenv

from config import EXPORT_SETTINGS, EXCEL_FORMATTING, CSV_FIELD_MAP, get_export_columns, get_field_for_column
from schemas import StopRecord


class RouteExporter:
    """
    Converts route stops to CSV, Excel and JSON files.

    This class handles:
    - Turning stops into a flat DataFrame with the route book columns
    - Writing CSV files (and reading them back)
    - Creating formatted Excel files
    - Writing JSON files with export metadata
    """

    def __init__(self, output_folder: str = None):
        """Initialize the exporter with configuration."""

        # Load environment variables
        load_dotenv()

        self.output_folder = output_folder or os.getenv('OUTPUT_FOLDER', 'output')
        self.csv_prefix = os.getenv('CSV_FILENAME_PREFIX', 'route_data')
        self.excel_prefix = os.getenv('EXCEL_FILENAME_PREFIX', 'route_data')
        self.json_prefix = os.getenv('JSON_FILENAME_PREFIX', 'route_data')

        # Ensure output folder exists
        Path(self.output_folder).mkdir(parents=True, exist_ok=True)

    def _output_path(self, filename: str, prefix: str, extension: str) -> Path:
        """Build the output path, generating a timestamped name when none is given."""

        if not filename:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"{prefix}_{timestamp}.{extension}"

        return Path(self.output_folder) / filename

    def to_dataframe(self, stops: List[StopRecord]) -> pd.DataFrame:
        """Convert stops to a DataFrame with one column per route book column."""

        rows = []
        for stop in stops:
            row = {}
            for column, field_name in CSV_FIELD_MAP.items():
                value = getattr(stop, field_name)
                row[column] = value if value is not None else ''
            rows.append(row)

        return pd.DataFrame(rows, columns=get_export_columns())

    def export_csv(self, stops: List[StopRecord], filename: str = None) -> str:
        """
        Create a CSV file from stops.

        Fields with commas or quotes are quoted, everything else is
        written as plain text. If any field holds a line break, every
        field is quoted so the file still reads back row for row.

        Args:
            stops: Stops to export, in route order
            filename: Optional custom filename

        Returns:
            Path to the created CSV file
        """

        output_path = self._output_path(filename, self.csv_prefix, "csv")

        df = self.to_dataframe(stops)
        has_line_breaks = any(
            "\r" in value or "\n" in value
            for row in df.itertuples(index=False)
            for value in row
        )

        df.to_csv(
            output_path,
            index=False,
            quoting=csv.QUOTE_ALL if has_line_breaks else csv.QUOTE_MINIMAL,
            encoding=EXPORT_SETTINGS["csv_encoding"],
            lineterminator=EXPORT_SETTINGS["csv_line_terminator"],
        )

        return str(output_path)

    def read_csv(self, csv_file) -> List[StopRecord]:
        """
        Read stops back from a CSV file written by export_csv.

        Args:
            csv_file: Path to the CSV file

        Returns:
            List of StopRecord objects
        """

        df = pd.read_csv(
            csv_file,
            dtype=str,
            keep_default_na=False,
            encoding=EXPORT_SETTINGS["csv_encoding"],
        )

        if list(df.columns) != get_export_columns():
            raise ValueError(f"Unexpected CSV header: {','.join(df.columns)}")

        stops = []
        for row in df.to_dict(orient='records'):
            values = {get_field_for_column(column): value for column, value in row.items()}
            if not values['additional_info']:
                values['additional_info'] = None
            stops.append(StopRecord(**values))

        return stops

    def export_excel(self, stops: List[StopRecord], filename: str = None) -> str:
        """
        Create a formatted Excel file from stops.

        Args:
            stops: Stops to export
            filename: Optional custom filename

        Returns:
            Path to created Excel file
        """

        output_path = self._output_path(filename, self.excel_prefix, "xlsx")

        df = self.to_dataframe(stops)
        stops_sheet = EXCEL_FORMATTING["stops_sheet_name"]
        summary_sheet = EXCEL_FORMATTING["summary_sheet_name"]

        with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
            # Write main data sheet
            df.to_excel(writer, sheet_name=stops_sheet, index=False)

            # Create summary sheet
            summary_df = pd.DataFrame(self._summary_rows(df))
            summary_df.to_excel(writer, sheet_name=summary_sheet, index=False)

            # Auto-adjust column widths
            main_sheet = writer.sheets[stops_sheet]
            for column in main_sheet.columns:
                column_letter = column[0].column_letter
                max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
                main_sheet.column_dimensions[column_letter].width = min(
                    max_length + 2, EXCEL_FORMATTING["max_column_width"]
                )

            # OCR text starting with "=" is data, not a formula
            for row in main_sheet.iter_rows(min_row=2):
                for cell in row:
                    if isinstance(cell.value, str) and cell.value.startswith("="):
                        cell.data_type = "s"

            if EXCEL_FORMATTING["freeze_header_row"]:
                main_sheet.freeze_panes = "A2"

            summary = writer.sheets[summary_sheet]
            summary.column_dimensions['A'].width = 25
            summary.column_dimensions['B'].width = 15

        return str(output_path)

    def _summary_rows(self, df: pd.DataFrame) -> Dict[str, List[Any]]:
        """Counts shown on the Summary sheet."""

        return {
            'Metric': [
                'Total Stops',
                'Unique Streets',
                'Stops With Unit',
                'Stops With Additional Info',
                'Stops Missing Address',
            ],
            'Value': [
                len(df),
                df.loc[df['Street Name'] != '', 'Street Name'].nunique(),
                int((df['Unit'] != '').sum()),
                int((df['Additional Info'] != '').sum()),
                int((df['Address'] == '').sum()),
            ],
        }

    def export_json(self, stops: List[StopRecord], filename: str = None) -> str:
        """
        Export stops to a JSON file with export metadata.

        Args:
            stops: Stops to export
            filename: Optional custom filename

        Returns:
            Path to the created JSON file
        """

        output_path = self._output_path(filename, self.json_prefix, "json")

        export_data = {
            "metadata": {
                "export_timestamp": datetime.now().isoformat(),
                "total_stops": len(stops),
                "unique_streets": len(set(stop.street_name for stop in stops if stop.street_name)),
            },
            "stops": [stop.model_dump() for stop in stops],
        }

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(export_data, f, indent=2, ensure_ascii=False)

        return str(output_path)

    def export(self, stops: List[StopRecord], export_format: str = None) -> List[str]:
        """
        Export stops in one format, or all of them with "all".

        Returns:
            Paths of the created files
        """

        export_format = export_format or EXPORT_SETTINGS["default_format"]
        exporters = {
            "csv": self.export_csv,
            "excel": self.export_excel,
            "json": self.export_json,
        }

        if export_format == "all":
            return [exporter(stops) for exporter in exporters.values()]

        if export_format not in exporters:
            raise ValueError(f"Unknown export format: {export_format}")

        return [exporters[export_format](stops)]
