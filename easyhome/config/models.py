"""
Configuration models for EasyHome
Saved queries in YAML/JSON files and environment settings
"""

import os
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from easyhome.core.db import DEFAULT_DATABASE_URL
from easyhome.core.models import SearchCriteria


class ConfigFormat(str, Enum):
    """Supported configuration file formats"""

    YAML = "yaml"
    JSON = "json"


class SavedQuery(BaseModel):
    """A named set of search criteria"""

    name: str = Field(
        ...,
        description="Query name",
        min_length=1
    )

    description: Optional[str] = Field(
        None,
        description="Query description"
    )

    criteria: SearchCriteria = Field(
        default_factory=SearchCriteria,
        description="Search criteria"
    )

    limit: Optional[int] = Field(
        None,
        description="Maximum number of results",
        ge=1
    )


class QueryFile(BaseModel):
    """A configuration file holding saved queries"""

    version: str = Field(
        "1.0",
        description="Configuration schema version"
    )

    name: Optional[str] = Field(
        None,
        description="Configuration name"
    )

    queries: List[SavedQuery] = Field(
        default_factory=list,
        description="Saved queries"
    )

    @field_validator('queries')
    def validate_unique_names(cls, v):
        """Ensure query names are unique"""
        names = [query.name for query in v]
        duplicates = {name for name in names if names.count(name) > 1}
        if duplicates:
            raise ValueError(f"Duplicate query names: {', '.join(sorted(duplicates))}")
        return v

    def get_query(self, name: str) -> Optional[SavedQuery]:
        """Get a saved query by name"""
        for query in self.queries:
            if query.name == name:
                return query
        return None


class Settings(BaseModel):
    """Runtime settings read from the environment"""

    database_url: str = Field(
        DEFAULT_DATABASE_URL,
        description="SQLAlchemy database URL"
    )

    log_level: str = Field(
        "WARNING",
        description="Logging level name"
    )

    @field_validator('log_level')
    def validate_log_level(cls, v):
        """Validate logging level name"""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from EASYHOME_* environment variables"""
        values = {}
        if os.getenv("EASYHOME_DATABASE_URL"):
            values["database_url"] = os.getenv("EASYHOME_DATABASE_URL")
        if os.getenv("EASYHOME_LOG_LEVEL"):
            values["log_level"] = os.getenv("EASYHOME_LOG_LEVEL")
        return cls(**values)
