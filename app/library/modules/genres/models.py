from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.library.models import Base

if TYPE_CHECKING:
    from app.library.modules.books.models import Book


class Genre(Base):
    __tablename__ = "genres"
    __table_args__ = (
        Index("idx_genres_name", "name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)  # e.g. "Science Fiction"

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    books: Mapped[list["Book"]] = relationship(
        secondary="book_genres",
        back_populates="genres",
        lazy="select",
    )

    @property
    def url(self) -> str:
        return f"/catalog/genre/{self.id}"
