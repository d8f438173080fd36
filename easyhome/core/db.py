"""
Database models and connection management for EasyHome
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import Field, Session, SQLModel, col, create_engine, func, select

from .models import (
    HouseListing,
    SearchCriteria,
    UserAccount,
    UserRole,
    as_utc,
    utcnow,
)

DEFAULT_DATABASE_URL = "sqlite:///easyhome.db"

HOUSE_FIELDS = (
    "title",
    "address",
    "price",
    "area",
    "rooms",
    "decoration",
    "orientation",
    "year",
)
USER_FIELDS = ("username", "password_hash", "role", "phone", "email", "is_enable")


def _like_pattern(text: str) -> str:
    """Build a LIKE substring pattern with wildcards in the text escaped"""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class House(SQLModel, table=True):
    """
    House listing table
    """

    id: Optional[int] = Field(default=None, primary_key=True)

    title: Optional[str] = Field(None, description="Listing title")
    address: Optional[str] = Field(None, description="Street address")
    price: Optional[int] = Field(None, index=True, description="Asking price")
    area: Optional[float] = Field(None, index=True, description="Floor area")
    rooms: Optional[str] = Field(None, index=True, description="Room layout")
    decoration: Optional[str] = Field(None, description="Decoration type")
    orientation: Optional[str] = Field(None, description="Facing direction")
    year: Optional[int] = Field(None, index=True, description="Build year")

    created_at: Optional[datetime] = Field(None, description="Insert timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    @classmethod
    def from_listing(cls, listing: HouseListing) -> "House":
        """Create database record from HouseListing model"""
        return cls(**listing.model_dump())

    def to_listing(self) -> HouseListing:
        """Convert database record to HouseListing model"""
        return HouseListing.model_validate(self, from_attributes=True)


class SysUser(SQLModel, table=True):
    """
    System user account table
    """

    __tablename__ = "sys_user"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True, description="Login name")
    password_hash: str = Field(description="Hashed password")
    role: UserRole = Field(default=UserRole.USER, description="Account role")
    phone: Optional[str] = Field(None, description="Contact phone number")
    email: Optional[str] = Field(None, description="Contact email address")
    is_enable: bool = Field(default=True, index=True, description="Account enabled")

    created_at: Optional[datetime] = Field(None, description="Insert timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    @classmethod
    def from_account(cls, account: UserAccount) -> "SysUser":
        """Create database record from UserAccount model"""
        return cls(**account.model_dump())

    def to_account(self) -> UserAccount:
        """Convert database record to UserAccount model"""
        return UserAccount.model_validate(self, from_attributes=True)


class Database:
    """
    Database connection and operations manager

    Timestamps are never filled implicitly: every save takes an explicit
    `now`, falling back to the injected clock. Naive values are taken
    as UTC and stored timezone-aware.
    """

    def __init__(
        self,
        database_url: str = DEFAULT_DATABASE_URL,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.database_url = database_url
        self.clock = clock
        self.engine = create_engine(database_url, echo=False)
        self.async_engine = create_async_engine(
            database_url.replace("sqlite:///", "sqlite+aiosqlite:///"), echo=False
        )
        self.async_session = sessionmaker(
            self.async_engine, class_=AsyncSession, expire_on_commit=False
        )
        self.logger = logging.getLogger(__name__)

    def create_tables(self):
        """Create all database tables"""
        SQLModel.metadata.create_all(self.engine)
        self.logger.info("Database tables created")

    async def create_tables_async(self):
        """Create all database tables asynchronously"""
        async with self.async_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        self.logger.info("Database tables created asynchronously")

    def get_session(self) -> Session:
        """Get synchronous database session"""
        return Session(self.engine)

    async def save_house(
        self, listing: HouseListing, now: Optional[datetime] = None
    ) -> Optional[HouseListing]:
        """
        Insert or update a house listing

        A listing without an id is inserted with created_at and updated_at
        set to `now`; a listing with an id updates that row, keeping its
        created_at and setting updated_at. The argument is not modified.

        Args:
            listing: Listing to save
            now: Save timestamp, defaults to the database clock

        Returns:
            The stored listing, or None if saving failed
        """
        now = as_utc(now or self.clock())

        try:
            async with self.async_session() as session:
                if listing.id is None:
                    row = House.from_listing(listing)
                    row.created_at = now
                    row.updated_at = now
                    session.add(row)
                else:
                    row = await session.get(House, listing.id)
                    if row is None:
                        self.logger.error(f"House {listing.id} does not exist")
                        return None

                    for name in HOUSE_FIELDS:
                        setattr(row, name, getattr(listing, name))
                    row.created_at = row.created_at or now
                    row.updated_at = now

                await session.commit()
                await session.refresh(row)
                self.logger.info(f"Saved house {row.id}")
                return row.to_listing()

        except Exception as e:
            self.logger.error(f"Error saving house {listing.id}: {e}")
            return None

    async def get_house(self, house_id: int) -> Optional[HouseListing]:
        """Get a house listing by id"""
        try:
            async with self.async_session() as session:
                row = await session.get(House, house_id)
                return row.to_listing() if row else None

        except Exception as e:
            self.logger.error(f"Error getting house {house_id}: {e}")
            return None

    async def search_houses(
        self, criteria: SearchCriteria, limit: Optional[int] = None
    ) -> List[HouseListing]:
        """
        Search house listings with the same semantics as ListingFilter

        Title and address use ILIKE. On SQLite that only folds ASCII case,
        so non-ASCII letters match case-sensitively here while
        ListingFilter uses str.casefold().

        Args:
            criteria: Search criteria; absent fields impose no constraint
            limit: Maximum results to return; None for no limit, 0 for none

        Returns:
            Matching listings in the requested order, insertion order on ties
        """
        crossed = criteria.crossed_ranges()
        if crossed:
            self.logger.info(f"Crossed range on {', '.join(crossed)}; skipping query")
            return []

        query = select(House)

        if criteria.title is not None:
            query = query.where(
                col(House.title).ilike(_like_pattern(criteria.title), escape="\\")
            )
        if criteria.address is not None:
            query = query.where(
                col(House.address).ilike(_like_pattern(criteria.address), escape="\\")
            )

        if criteria.min_price is not None:
            query = query.where(col(House.price) >= criteria.min_price)
        if criteria.max_price is not None:
            query = query.where(col(House.price) <= criteria.max_price)
        if criteria.min_area is not None:
            query = query.where(col(House.area) >= criteria.min_area)
        if criteria.max_area is not None:
            query = query.where(col(House.area) <= criteria.max_area)
        if criteria.min_year is not None:
            query = query.where(col(House.year) >= criteria.min_year)
        if criteria.max_year is not None:
            query = query.where(col(House.year) <= criteria.max_year)

        if criteria.rooms is not None:
            query = query.where(col(House.rooms) == criteria.rooms)
        if criteria.decoration is not None:
            query = query.where(col(House.decoration) == criteria.decoration)
        if criteria.orientation is not None:
            query = query.where(col(House.orientation) == criteria.orientation)

        sort_key = criteria.sort_key()
        if sort_key is not None:
            column = col(getattr(House, sort_key.field))
            # Missing values last in both directions
            query = query.order_by(
                column.is_(None),
                column.desc() if sort_key.descending else column.asc(),
                col(House.id),
            )
        else:
            query = query.order_by(col(House.id))

        if limit is not None:
            query = query.limit(limit)

        try:
            async with self.async_session() as session:
                result = await session.execute(query)
                return [row.to_listing() for row in result.scalars().all()]

        except Exception as e:
            self.logger.error(f"Error searching houses: {e}")
            return []

    async def save_user(
        self, account: UserAccount, now: Optional[datetime] = None
    ) -> Optional[UserAccount]:
        """
        Insert or update a user account

        Follows the same timestamp rules as save_house. Usernames are
        unique; saving a duplicate fails.

        Args:
            account: Account to save
            now: Save timestamp, defaults to the database clock

        Returns:
            The stored account, or None if saving failed
        """
        now = as_utc(now or self.clock())

        try:
            async with self.async_session() as session:
                if account.id is None:
                    row = SysUser.from_account(account)
                    row.created_at = now
                    row.updated_at = now
                    session.add(row)
                else:
                    row = await session.get(SysUser, account.id)
                    if row is None:
                        self.logger.error(f"User {account.id} does not exist")
                        return None

                    for name in USER_FIELDS:
                        setattr(row, name, getattr(account, name))
                    row.created_at = row.created_at or now
                    row.updated_at = now

                await session.commit()
                await session.refresh(row)
                self.logger.info(f"Saved user {row.username}")
                return row.to_account()

        except IntegrityError:
            self.logger.error(f"User {account.username} already exists")
            return None
        except Exception as e:
            self.logger.error(f"Error saving user {account.username}: {e}")
            return None

    async def get_user(self, username: str) -> Optional[UserAccount]:
        """Get a user account by username"""
        try:
            async with self.async_session() as session:
                result = await session.execute(
                    select(SysUser).where(SysUser.username == username)
                )
                row = result.scalar_one_or_none()
                return row.to_account() if row else None

        except Exception as e:
            self.logger.error(f"Error getting user {username}: {e}")
            return None

    async def set_user_enabled(
        self, username: str, enabled: bool, now: Optional[datetime] = None
    ) -> bool:
        """
        Enable or disable a user account

        Returns:
            True if the account exists and was updated, False otherwise
        """
        now = as_utc(now or self.clock())

        try:
            async with self.async_session() as session:
                result = await session.execute(
                    select(SysUser).where(SysUser.username == username)
                )
                row = result.scalar_one_or_none()
                if row is None:
                    self.logger.warning(f"User {username} does not exist")
                    return False

                row.is_enable = enabled
                row.updated_at = now
                await session.commit()
                self.logger.info(
                    f"{'Enabled' if enabled else 'Disabled'} user {username}"
                )
                return True

        except Exception as e:
            self.logger.error(f"Error updating user {username}: {e}")
            return False

    async def get_statistics(self) -> Dict[str, Any]:
        """Get database statistics"""
        try:
            async with self.async_session() as session:
                house_stats = await session.execute(
                    select(
                        func.count(House.id).label("total"),
                        func.min(House.price).label("min_price"),
                        func.max(House.price).label("max_price"),
                        func.avg(House.price).label("avg_price"),
                    )
                )
                user_count = await session.execute(select(func.count(SysUser.id)))
                enabled_count = await session.execute(
                    select(func.count(SysUser.id)).where(SysUser.is_enable == True)
                )

                total, min_price, max_price, avg_price = house_stats.one()
                users = user_count.scalar()
                enabled = enabled_count.scalar()

                return {
                    "houses": total,
                    "price_stats": {
                        "min_price": min_price,
                        "max_price": max_price,
                        "avg_price": avg_price,
                    },
                    "users": users,
                    "enabled_users": enabled,
                    "last_updated": as_utc(self.clock()).isoformat(),
                }

        except Exception as e:
            self.logger.error(f"Error getting statistics: {e}")
            return {}

    async def close(self):
        """Close database connections"""
        await self.async_engine.dispose()
        self.engine.dispose()


async def init_db(database_url: str = DEFAULT_DATABASE_URL) -> Database:
    """Initialize database with tables"""
    db = Database(database_url)
    await db.create_tables_async()
    return db
