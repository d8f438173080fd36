"""
Tests for export service
"""

import csv
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from easyhome.config.parser import ConfigParser
from easyhome.core.models import HouseListing
from easyhome.exports.service import EXPORT_FIELDS, ExportError, ExportFormat, ExportService


@pytest.fixture
def export_service():
    """Export service with a fixed clock"""
    return ExportService(clock=lambda: datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def sample_listings():
    """Create sample listings for export"""
    return [
        HouseListing(
            id=2,
            title="Family Home",
            address="8 Lake Street",
            price=3200000,
            area=120.0,
            rooms="3室2厅",
            year=2016,
            created_at=datetime(2024, 1, 1),
        ),
        HouseListing(id=1, title="Sunny Flat", price=1500000),
    ]


class TestExportService:
    """Test ExportService"""

    def test_detect_format(self):
        """Formats come from the file suffix"""
        assert ExportService.detect_format(Path("out.csv")) == ExportFormat.CSV
        assert ExportService.detect_format(Path("out.JSON")) == ExportFormat.JSON

        with pytest.raises(ExportError, match="Unsupported export format"):
            ExportService.detect_format(Path("out.xlsx"))

    def test_export_csv(self, export_service, sample_listings, tmp_path):
        """Test CSV export keeps order and columns"""
        path = tmp_path / "results.csv"

        count = export_service.export_listings(sample_listings, path)

        assert count == 2
        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))

        assert list(rows[0].keys()) == EXPORT_FIELDS
        assert [row["id"] for row in rows] == ["2", "1"]
        assert rows[0]["rooms"] == "3室2厅"
        assert rows[0]["created_at"] == "2024-01-01T00:00:00Z"
        assert rows[1]["area"] == ""

    def test_export_json(self, export_service, sample_listings, tmp_path):
        """Test JSON export with metadata"""
        path = tmp_path / "nested" / "results.json"

        export_service.export_listings(sample_listings, path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["metadata"]["listing_count"] == 2
        assert data["metadata"]["exported_at"] == "2024-05-01T12:00:00+00:00"
        assert [item["title"] for item in data["listings"]] == ["Family Home", "Sunny Flat"]

    def test_json_export_reloads(self, export_service, sample_listings, tmp_path):
        """JSON exports can be imported again"""
        path = tmp_path / "results.json"
        export_service.export_listings(sample_listings, path)

        assert ConfigParser.load_listings(path) == sample_listings

    def test_explicit_format(self, export_service, sample_listings, tmp_path):
        """An explicit format overrides the suffix"""
        path = tmp_path / "results.txt"

        export_service.export_listings(sample_listings, path, format=ExportFormat.JSON)

        assert json.loads(path.read_text(encoding="utf-8"))["metadata"]["listing_count"] == 2

    def test_export_empty(self, export_service, tmp_path):
        """Empty results still produce a header"""
        path = tmp_path / "empty.csv"

        assert export_service.export_listings([], path) == 0
        assert path.read_text(encoding="utf-8").strip() == ",".join(EXPORT_FIELDS)
