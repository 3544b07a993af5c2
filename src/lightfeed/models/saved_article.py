"""
Saved article data model.

Snapshot of a blended article kept for later reading, unique by link.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from lightfeed.models.base import Base


class SavedArticleModel(Base):
    """SQLAlchemy ORM model for SavedArticle."""

    __tablename__ = "saved_articles"

    __table_args__ = (
        Index("ix_saved_articles_saved_at", "saved_at"),
    )

    id: Mapped[str] = mapped_column(String(24), primary_key=True)
    article_id: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    title: Mapped[str] = mapped_column(String(1000), nullable=False)
    link: Mapped[str] = mapped_column(String(2048), unique=True, nullable=False)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)

    # Originating feed
    source_feed_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    source_title: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    source_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)

    published_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    published_label: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Page the article was saved from
    page_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    page_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    saved_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<SavedArticleModel(id='{self.id}', link='{self.link}')>"


# Pydantic models for API


class SavedArticleCreate(BaseModel):
    """Schema for saving an article snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    article_id: Optional[str] = Field(None, alias="id")
    title: Optional[str] = None
    link: Optional[str] = None
    summary: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    source_feed_id: Optional[str] = Field(None, alias="sourceFeedId")
    source_title: Optional[str] = Field(None, alias="sourceTitle")
    source_url: Optional[str] = Field(None, alias="sourceUrl")
    published_at: Optional[str] = Field(None, alias="publishedAt")
    published_label: Optional[str] = Field(None, alias="publishedLabel")
    page_id: Optional[str] = None
    page_name: Optional[str] = None
