"""
Page and feed data models.

A page is a named, persisted feed mix. Feeds are shared between pages and
identified by a hash of their URL.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lightfeed.models.base import Base

# Page-Feed junction table (many-to-many)
page_feeds = Table(
    "page_feeds",
    Base.metadata,
    Column("page_id", String(64), ForeignKey("pages.id", ondelete="CASCADE"), primary_key=True),
    Column("feed_id", String(64), ForeignKey("feeds.id", ondelete="CASCADE"), primary_key=True),
    Index("ix_page_feeds_feed_id", "feed_id"),
)


class PageModel(Base):
    """SQLAlchemy ORM model for Page."""

    __tablename__ = "pages"

    __table_args__ = (
        Index("ix_pages_sort_order", "sort_order", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_homepage: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    feeds: Mapped[list["FeedModel"]] = relationship(
        "FeedModel",
        secondary=page_feeds,
        back_populates="pages",
    )

    def __repr__(self) -> str:
        return f"<PageModel(id='{self.id}', name='{self.name}', is_homepage={self.is_homepage})>"


class FeedModel(Base):
    """SQLAlchemy ORM model for Feed."""

    __tablename__ = "feeds"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    url: Mapped[str] = mapped_column(String(2048), unique=True, nullable=False, index=True)
    title: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    pages: Mapped[list["PageModel"]] = relationship(
        "PageModel",
        secondary=page_feeds,
        back_populates="feeds",
    )

    def __repr__(self) -> str:
        return f"<FeedModel(id='{self.id}', url='{self.url}', title='{self.title}')>"


# Pydantic models for API


class FeedInput(BaseModel):
    """A feed of a page payload."""

    url: Optional[str] = Field(None, max_length=2048, description="Feed URL")
    title: Optional[str] = Field(None, max_length=500, description="Display title")


class PageCreate(BaseModel):
    """Schema for creating a page."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, max_length=64, description="Requested page id (slugified)")
    name: Optional[str] = Field(None, max_length=200, description="Page name")
    is_homepage: bool = Field(False, alias="isHomepage", description="Make this the homepage")
    feeds: list[FeedInput] = Field(default_factory=list, description="Feed mix")


class PageUpdate(BaseModel):
    """Schema for updating a page.

    Only the fields present in the payload are applied.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, max_length=200)
    is_homepage: Optional[bool] = Field(None, alias="isHomepage")
    feeds: Optional[list[FeedInput]] = None
