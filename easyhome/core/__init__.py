"""
Core data models, filtering and database functionality for EasyHome
"""

from .db import Database, House, SysUser, init_db
from .filtering import ListingFilter, apply_filter, listing_filter
from .models import HouseListing, SearchCriteria, SortBy, UserAccount, UserRole
from .security import hash_password, verify_password

__all__ = [
    # Models
    "HouseListing",
    "SearchCriteria",
    "SortBy",
    "UserAccount",
    "UserRole",
    # Filtering
    "ListingFilter",
    "apply_filter",
    "listing_filter",
    # Credentials
    "hash_password",
    "verify_password",
    # Database
    "Database",
    "House",
    "SysUser",
    "init_db",
]
