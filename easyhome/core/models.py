"""
Core data models for EasyHome house listings and user accounts
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .security import hash_password


def utcnow() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC; aware ones are converted to UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SortBy(str, Enum):
    """Sort keys for listing search results"""

    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    AREA_ASC = "area-asc"
    AREA_DESC = "area-desc"
    YEAR_ASC = "year-asc"
    YEAR_DESC = "year-desc"

    @property
    def field(self) -> str:
        """Listing field this key orders by"""
        return self.value.split("-")[0]

    @property
    def descending(self) -> bool:
        return self.value.endswith("-desc")

    @classmethod
    def parse(cls, value) -> Optional["SortBy"]:
        """
        Parse a sort key, tolerating case and underscores

        Returns None for absent or unrecognized values
        """
        if value is None:
            return None
        if isinstance(value, cls):
            return value

        normalized = str(value).strip().lower().replace("_", "-")
        try:
            return cls(normalized)
        except ValueError:
            return None


class UserRole(str, Enum):
    """Account roles"""

    ADMIN = "admin"
    USER = "user"


class SearchCriteria(BaseModel):
    """
    Optional search criteria for house listings

    Every field is optional and None means "no constraint". Range bounds
    are independent and are not checked against each other here: a
    crossed range is a valid criteria object that matches nothing.
    Accepts the camelCase request parameter names (minPrice, sortBy, ...)
    as well as the field names. Text values are kept verbatim, so an
    empty string is a present constraint.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    # Text matching
    title: Optional[str] = Field(None, description="Case-insensitive title substring")
    address: Optional[str] = Field(
        None, description="Case-insensitive address substring"
    )

    # Ranges (inclusive)
    min_price: Optional[int] = Field(None, description="Minimum price")
    max_price: Optional[int] = Field(None, description="Maximum price")
    min_area: Optional[float] = Field(
        None, allow_inf_nan=False, description="Minimum area"
    )
    max_area: Optional[float] = Field(
        None, allow_inf_nan=False, description="Maximum area"
    )
    min_year: Optional[int] = Field(None, description="Earliest build year")
    max_year: Optional[int] = Field(None, description="Latest build year")

    # Exact matches
    rooms: Optional[str] = Field(None, description="Room layout, e.g. 3室2厅")
    decoration: Optional[str] = Field(None, description="Decoration type")
    orientation: Optional[str] = Field(None, description="Facing direction")

    # Ordering
    sort_by: Optional[str] = Field(
        None, description="One of the SortBy values; anything else keeps input order"
    )

    def sort_key(self) -> Optional[SortBy]:
        """Parsed sort key, or None when absent or unrecognized"""
        return SortBy.parse(self.sort_by)

    def ranges(self):
        """Yield (dimension, minimum, maximum) for every range dimension"""
        yield "price", self.min_price, self.max_price
        yield "area", self.min_area, self.max_area
        yield "year", self.min_year, self.max_year

    def crossed_ranges(self) -> List[str]:
        """Names of dimensions whose minimum exceeds their maximum"""
        return [
            name
            for name, low, high in self.ranges()
            if low is not None and high is not None and low > high
        ]

    def is_empty(self) -> bool:
        """True when no filter or sort field is set"""
        return not self.model_dump(exclude_none=True)


class HouseListing(BaseModel):
    """A house listing as stored and returned by searches"""

    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    id: Optional[int] = Field(None, description="Database identifier")

    title: Optional[str] = Field(None, description="Listing title")
    address: Optional[str] = Field(None, description="Street address")
    price: Optional[int] = Field(None, description="Asking price")
    area: Optional[float] = Field(None, description="Floor area in square metres")
    rooms: Optional[str] = Field(None, description="Room layout descriptor")
    decoration: Optional[str] = Field(None, description="Decoration type")
    orientation: Optional[str] = Field(None, description="Facing direction")
    year: Optional[int] = Field(None, description="Build year")

    # Audit timestamps in UTC, set by Database.save_house
    created_at: Optional[datetime] = Field(None, description="Insert timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    @field_validator("created_at", "updated_at")
    @classmethod
    def validate_timestamp(cls, v):
        return as_utc(v)


class UserAccount(BaseModel):
    """System user account"""

    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    id: Optional[int] = Field(None, description="Database identifier")
    username: str = Field(..., min_length=1, description="Login name")
    password_hash: str = Field(..., description="Hashed password")
    role: UserRole = Field(UserRole.USER, description="Account role")
    phone: Optional[str] = Field(None, description="Contact phone number")
    email: Optional[str] = Field(None, description="Contact email address")
    is_enable: bool = Field(True, description="Whether the account is enabled")

    created_at: Optional[datetime] = Field(None, description="Insert timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    @field_validator("created_at", "updated_at")
    @classmethod
    def validate_timestamp(cls, v):
        return as_utc(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        """Light sanity check on email addresses"""
        if v is None or v == "":
            return None
        if "@" not in v:
            raise ValueError(f"Invalid email address: {v}")
        return v.lower()

    @classmethod
    def create(
        cls,
        username: str,
        password: str,
        role: UserRole = UserRole.USER,
        phone: Optional[str] = None,
        email: Optional[str] = None,
    ) -> "UserAccount":
        """
        Create an account from a plain-text password

        Args:
            username: Login name
            password: Plain-text password, stored hashed
            role: Account role
            phone: Contact phone number
            email: Contact email address

        Returns:
            UserAccount instance (not yet saved)
        """
        return cls(
            username=username,
            password_hash=hash_password(password),
            role=role,
            phone=phone,
            email=email,
        )
