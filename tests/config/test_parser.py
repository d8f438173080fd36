"""
Tests for configuration parser
"""

import json
from pathlib import Path

import pytest
import yaml

from easyhome.config.models import ConfigFormat, QueryFile, SavedQuery
from easyhome.config.parser import ConfigParser, ConfigParserError
from easyhome.core.models import SearchCriteria, SortBy


class TestConfigParser:
    """Test ConfigParser functionality"""

    def test_detect_yaml_format(self):
        """Test detecting YAML file format"""
        assert ConfigParser.detect_format(Path("queries.yaml")) == ConfigFormat.YAML
        assert ConfigParser.detect_format(Path("queries.YML")) == ConfigFormat.YAML

    def test_detect_json_format(self):
        """Test detecting JSON file format"""
        assert ConfigParser.detect_format(Path("queries.json")) == ConfigFormat.JSON

    def test_detect_unsupported_format(self):
        """Test detecting unsupported file format"""
        with pytest.raises(ConfigParserError, match="Unsupported file format"):
            ConfigParser.detect_format(Path("queries.txt"))

    def test_load_missing_file(self, tmp_path):
        """Test loading a file that does not exist"""
        with pytest.raises(ConfigParserError, match="not found"):
            ConfigParser.load_file(tmp_path / "missing.yaml")

    def test_load_invalid_yaml(self, tmp_path):
        """Test loading invalid YAML"""
        path = tmp_path / "broken.yaml"
        path.write_text("queries: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigParserError, match="Invalid YAML syntax"):
            ConfigParser.load_file(path)

    def test_load_invalid_json(self, tmp_path):
        """Test loading invalid JSON"""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigParserError, match="Invalid JSON syntax"):
            ConfigParser.load_file(path)

    def test_load_empty_yaml(self, tmp_path):
        """Empty YAML files load as an empty mapping"""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert ConfigParser.load_file(path) == {}


class TestCriteriaParsing:
    """Test parsing search criteria"""

    def test_parse_camel_case(self):
        """Request-style keys are accepted"""
        criteria = ConfigParser.parse_criteria(
            {"minPrice": 100, "maxArea": "90", "sortBy": "area-desc"}
        )

        assert criteria.min_price == 100
        assert criteria.max_area == 90.0
        assert criteria.sort_key() == SortBy.AREA_DESC

    def test_parse_invalid_criteria(self):
        """Invalid values raise ConfigParserError"""
        with pytest.raises(ConfigParserError, match="Invalid search criteria"):
            ConfigParser.parse_criteria({"min_year": "last year"})

    def test_parse_non_mapping(self):
        """Criteria must be a mapping"""
        with pytest.raises(ConfigParserError, match="must be a mapping"):
            ConfigParser.parse_criteria(["min_price", 1])


class TestQueryFiles:
    """Test saved-query files"""

    def test_parse_yaml_query_file(self, tmp_path):
        """Test parsing a YAML query file"""
        path = tmp_path / "queries.yaml"
        path.write_text(
            """
name: "Test queries"
queries:
  - name: cheap
    description: Cheapest first
    criteria:
      maxPrice: 1000000
      sortBy: price-asc
    limit: 5
  - name: modern
    criteria:
      min_year: 2010
""",
            encoding="utf-8",
        )

        query_file = ConfigParser.parse_query_file(path)

        assert query_file.name == "Test queries"
        assert [q.name for q in query_file.queries] == ["cheap", "modern"]
        assert query_file.queries[0].criteria.max_price == 1000000
        assert query_file.queries[0].limit == 5
        assert query_file.queries[1].criteria.min_year == 2010

    def test_parse_json_query_file(self, tmp_path):
        """Test parsing a JSON query file"""
        path = tmp_path / "queries.json"
        path.write_text(
            json.dumps({"queries": [{"name": "all"}]}), encoding="utf-8"
        )

        query_file = ConfigParser.parse_query_file(path)

        assert query_file.version == "1.0"
        assert query_file.queries[0].criteria == SearchCriteria()

    def test_missing_queries_section(self, tmp_path):
        """Query files need a queries section"""
        path = tmp_path / "queries.yaml"
        path.write_text("name: nothing\n", encoding="utf-8")

        with pytest.raises(ConfigParserError, match="missing 'queries'"):
            ConfigParser.parse_query_file(path)

    @pytest.mark.parametrize("content", ["queries:\n", "queries: cheap\n", "queries: {a: 1}\n"])
    def test_queries_not_a_list(self, tmp_path, content):
        """An empty or scalar queries section is a configuration error"""
        path = tmp_path / "queries.yaml"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigParserError, match="'queries' must be a list"):
            ConfigParser.parse_query_file(path)

    def test_invalid_query(self, tmp_path):
        """Errors name the failing query"""
        path = tmp_path / "queries.yaml"
        path.write_text(
            "queries:\n  - name: ok\n  - name: bad\n    criteria:\n      minPrice: lots\n",
            encoding="utf-8",
        )

        with pytest.raises(ConfigParserError, match="Error in query 2"):
            ConfigParser.parse_query_file(path)

    def test_duplicate_query_names(self, tmp_path):
        """Query names must be unique"""
        path = tmp_path / "queries.yaml"
        path.write_text("queries:\n  - name: a\n  - name: a\n", encoding="utf-8")

        with pytest.raises(ConfigParserError, match="Duplicate query names"):
            ConfigParser.parse_query_file(path)

    def test_load_query(self, tmp_path):
        """Test loading one named query"""
        path = tmp_path / "queries.yaml"
        ConfigParser.save_file(ConfigParser.create_template(), path)

        query = ConfigParser.load_query(path, "new_builds")

        assert query.criteria.min_year == 2015
        assert query.criteria.sort_key() == SortBy.YEAR_DESC

        with pytest.raises(ConfigParserError, match="not found"):
            ConfigParser.load_query(path, "missing")

    def test_template_roundtrip(self, tmp_path):
        """Saved templates parse back to the same queries"""
        template = ConfigParser.create_template()

        for name in ["queries.yaml", "queries.json"]:
            path = tmp_path / name
            ConfigParser.save_file(template, path)
            assert ConfigParser.parse_query_file(path) == template

    def test_save_yaml_keeps_unicode(self, tmp_path):
        """YAML output keeps non-ASCII text readable"""
        path = tmp_path / "out" / "queries.yaml"
        query_file = QueryFile(
            queries=[SavedQuery(name="south", criteria=SearchCriteria(orientation="南"))]
        )

        ConfigParser.save_file(query_file, path)

        content = path.read_text(encoding="utf-8")
        assert "南" in content
        assert yaml.safe_load(content)["queries"][0]["criteria"] == {"orientation": "南"}


class TestListingFiles:
    """Test loading listing files"""

    def test_load_list(self, tmp_path):
        """A top-level list of listings"""
        path = tmp_path / "listings.yaml"
        path.write_text(
            "- title: Flat\n  price: 100\n- title: House\n  price: 200\n  rooms: 3室2厅\n",
            encoding="utf-8",
        )

        listings = ConfigParser.load_listings(path)

        assert [l.title for l in listings] == ["Flat", "House"]
        assert listings[1].rooms == "3室2厅"

    def test_load_mapping(self, tmp_path):
        """A mapping with a listings key, as written by JSON export"""
        path = tmp_path / "listings.json"
        path.write_text(
            json.dumps({"metadata": {}, "listings": [{"title": "Flat", "area": 40}]}),
            encoding="utf-8",
        )

        listings = ConfigParser.load_listings(path)

        assert len(listings) == 1
        assert listings[0].area == 40.0

    def test_invalid_listing(self, tmp_path):
        """Invalid listings are reported by position"""
        path = tmp_path / "listings.json"
        path.write_text(json.dumps([{"price": 1}, {"price": "free"}]), encoding="utf-8")

        with pytest.raises(ConfigParserError, match="Invalid listing 2"):
            ConfigParser.load_listings(path)

    def test_not_a_list(self, tmp_path):
        """Scalars are rejected"""
        path = tmp_path / "listings.yaml"
        path.write_text("just text\n", encoding="utf-8")

        with pytest.raises(ConfigParserError, match="must contain a list"):
            ConfigParser.load_listings(path)
