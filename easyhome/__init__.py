"""
EasyHome: House Listing Search & Account Records

Search criteria, listing filtering and persistence for a house listing
service, with a CLI for importing, searching and managing accounts.
"""

__version__ = "0.1.0"

from .core.db import Database
from .core.filtering import ListingFilter, apply_filter
from .core.models import HouseListing, SearchCriteria, SortBy, UserAccount

__all__ = [
    "HouseListing",
    "SearchCriteria",
    "SortBy",
    "UserAccount",
    "ListingFilter",
    "apply_filter",
    "Database",
]
