"""
Export service for EasyHome
Serializes search results to CSV and JSON files
"""

import csv
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from easyhome.core.models import HouseListing, utcnow

EXPORT_FIELDS = [
    "id",
    "title",
    "address",
    "price",
    "area",
    "rooms",
    "decoration",
    "orientation",
    "year",
    "created_at",
    "updated_at",
]


class ExportFormat(str, Enum):
    """Supported export formats"""

    CSV = "csv"
    JSON = "json"


class ExportError(Exception):
    """Export error"""
    pass


class ExportService:
    """Service for exporting listings to files"""

    def __init__(self, clock=utcnow):
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def detect_format(output_path: Path) -> ExportFormat:
        """Pick the export format from the file suffix"""
        suffix = output_path.suffix.lower().lstrip(".")
        try:
            return ExportFormat(suffix)
        except ValueError:
            raise ExportError(f"Unsupported export format: .{suffix}")

    def export_listings(
        self,
        listings: Sequence[HouseListing],
        output_path: Path,
        format: Optional[ExportFormat] = None,
    ) -> int:
        """
        Export listings in their given order

        Args:
            listings: Listings to export
            output_path: Destination file
            format: Export format, detected from the suffix if omitted

        Returns:
            Number of listings exported
        """
        output_path = Path(output_path)
        format = format or self.detect_format(output_path)
        rows = [self._format_listing(listing) for listing in listings]

        output_path.parent.mkdir(parents=True, exist_ok=True)

        if format == ExportFormat.CSV:
            self._export_csv(rows, output_path)
        else:
            self._export_json(rows, output_path)

        self.logger.info(f"Exported {len(rows)} listings to {output_path}")
        return len(rows)

    @staticmethod
    def _format_listing(listing: HouseListing) -> Dict[str, Any]:
        """Flatten a listing into export columns"""
        data = listing.model_dump(mode="json")
        return {name: data.get(name) for name in EXPORT_FIELDS}

    def _export_csv(self, rows: List[Dict[str, Any]], output_path: Path) -> None:
        """Export rows to CSV file"""
        with open(output_path, "w", newline="", encoding="utf-8") as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=EXPORT_FIELDS)
            writer.writeheader()
            writer.writerows(rows)

    def _export_json(self, rows: List[Dict[str, Any]], output_path: Path) -> None:
        """Export rows to JSON file with metadata"""
        export_data = {
            "metadata": {
                "exported_at": self.clock().isoformat(),
                "listing_count": len(rows),
                "format_version": "1.0",
            },
            "listings": rows,
        }

        with open(output_path, "w", encoding="utf-8") as jsonfile:
            json.dump(export_data, jsonfile, indent=2, ensure_ascii=False, default=str)
