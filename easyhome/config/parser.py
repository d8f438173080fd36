"""
Configuration file parser for EasyHome
Handles YAML and JSON query files and listing files with validation
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import BaseModel, ValidationError

from easyhome.core.models import HouseListing, SearchCriteria

from .models import ConfigFormat, QueryFile, SavedQuery


class ConfigParserError(Exception):
    """Configuration parsing error"""
    pass


class ConfigParser:
    """Parser for EasyHome configuration and data files"""

    @staticmethod
    def detect_format(file_path: Path) -> ConfigFormat:
        """Detect configuration file format from extension"""
        suffix = file_path.suffix.lower()

        if suffix in ['.yaml', '.yml']:
            return ConfigFormat.YAML
        elif suffix == '.json':
            return ConfigFormat.JSON
        else:
            raise ConfigParserError(f"Unsupported file format: {suffix}")

    @staticmethod
    def load_file(file_path: Path) -> Any:
        """Load configuration file content"""
        if not file_path.exists():
            raise ConfigParserError(f"Configuration file not found: {file_path}")

        format_type = ConfigParser.detect_format(file_path)

        try:
            content = file_path.read_text(encoding='utf-8')

            if format_type == ConfigFormat.YAML:
                data = yaml.safe_load(content)
                return {} if data is None else data
            return json.loads(content)

        except yaml.YAMLError as e:
            raise ConfigParserError(f"Invalid YAML syntax: {e}")
        except json.JSONDecodeError as e:
            raise ConfigParserError(f"Invalid JSON syntax: {e}")
        except OSError as e:
            raise ConfigParserError(f"Error reading file: {e}")

    @staticmethod
    def save_file(data: Union[BaseModel, Any], file_path: Path) -> None:
        """Save a model or plain data to a YAML or JSON file"""
        format_type = ConfigParser.detect_format(file_path)

        # Ensure parent directory exists
        file_path.parent.mkdir(parents=True, exist_ok=True)

        if isinstance(data, BaseModel):
            data = data.model_dump(exclude_none=True, mode='json')

        try:
            if format_type == ConfigFormat.YAML:
                content = yaml.dump(
                    data,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                    indent=2
                )
            else:
                content = json.dumps(data, indent=2, ensure_ascii=False)

            file_path.write_text(content, encoding='utf-8')

        except (OSError, TypeError, yaml.YAMLError) as e:
            raise ConfigParserError(f"Error saving file: {e}")

    @staticmethod
    def parse_criteria(data: Dict[str, Any]) -> SearchCriteria:
        """Parse SearchCriteria from dictionary data (snake_case or camelCase keys)"""
        if not isinstance(data, dict):
            raise ConfigParserError("Search criteria must be a mapping")
        try:
            return SearchCriteria.model_validate(data)
        except ValidationError as e:
            raise ConfigParserError(f"Invalid search criteria: {e}")

    @staticmethod
    def parse_query_file(file_path: Union[str, Path]) -> QueryFile:
        """
        Parse a saved-query file

        Args:
            file_path: Path to configuration file

        Returns:
            QueryFile instance

        Raises:
            ConfigParserError: If parsing fails
        """
        raw_data = ConfigParser.load_file(Path(file_path))

        if not isinstance(raw_data, dict) or 'queries' not in raw_data:
            raise ConfigParserError("Configuration missing 'queries' section")
        if not isinstance(raw_data['queries'], list):
            raise ConfigParserError("Configuration 'queries' must be a list")

        queries = []
        for i, query_data in enumerate(raw_data['queries']):
            try:
                criteria = ConfigParser.parse_criteria(query_data.get('criteria') or {})
                queries.append(SavedQuery(**{**query_data, 'criteria': criteria}))
            except (ConfigParserError, ValidationError, AttributeError) as e:
                raise ConfigParserError(f"Error in query {i + 1}: {e}")

        try:
            return QueryFile(**{**raw_data, 'queries': queries})
        except ValidationError as e:
            raise ConfigParserError(f"Configuration validation failed: {e}")

    @staticmethod
    def load_query(file_path: Union[str, Path], name: str) -> SavedQuery:
        """Load one named query from a saved-query file"""
        query_file = ConfigParser.parse_query_file(file_path)
        query = query_file.get_query(name)
        if query is None:
            available = ', '.join(q.name for q in query_file.queries) or 'none'
            raise ConfigParserError(f"Query '{name}' not found (available: {available})")
        return query

    @staticmethod
    def load_listings(file_path: Union[str, Path]) -> List[HouseListing]:
        """
        Load house listings from a YAML or JSON file

        The file holds either a list of listings or a mapping with a
        'listings' key.
        """
        raw_data = ConfigParser.load_file(Path(file_path))

        if isinstance(raw_data, dict):
            raw_data = raw_data.get('listings', [])
        if not isinstance(raw_data, list):
            raise ConfigParserError("Listing file must contain a list of listings")

        listings = []
        for i, item in enumerate(raw_data):
            try:
                listings.append(HouseListing.model_validate(item))
            except ValidationError as e:
                raise ConfigParserError(f"Invalid listing {i + 1}: {e}")
        return listings

    @staticmethod
    def create_template() -> QueryFile:
        """Create a template query file with examples"""
        return QueryFile(
            name="EasyHome saved queries",
            queries=[
                SavedQuery(
                    name="affordable_family",
                    description="Three-bedroom homes under budget, cheapest first",
                    criteria=SearchCriteria(
                        max_price=3000000,
                        min_area=90,
                        rooms="3室2厅",
                        sort_by="price-asc",
                    ),
                    limit=20,
                ),
                SavedQuery(
                    name="new_builds",
                    description="Recently built homes, newest first",
                    criteria=SearchCriteria(min_year=2015, sort_by="year-desc"),
                ),
            ],
        )
