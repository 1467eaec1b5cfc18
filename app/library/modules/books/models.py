from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.library.models import Base

if TYPE_CHECKING:
    from app.library.modules.authors.models import Author
    from app.library.modules.book_instances.models import BookInstance
    from app.library.modules.genres.models import Genre


class BookGenre(Base):
    __tablename__ = "book_genres"
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id", ondelete="CASCADE"), primary_key=True)
    genre_id: Mapped[int] = mapped_column(ForeignKey("genres.id", ondelete="RESTRICT"), primary_key=True)


class Book(Base):
    __tablename__ = "books"
    __table_args__ = (
        Index("idx_books_title", "title"),
        Index("idx_books_author", "author_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author_id: Mapped[int] = mapped_column(ForeignKey("authors.id", ondelete="RESTRICT"), nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    isbn: Mapped[str] = mapped_column(String(32), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    author: Mapped["Author"] = relationship("Author", back_populates="books", lazy="joined")
    genres: Mapped[list["Genre"]] = relationship(
        secondary="book_genres",
        back_populates="books",
        lazy="selectin",
        order_by="Genre.name",
    )
    instances: Mapped[list["BookInstance"]] = relationship(
        "BookInstance",
        back_populates="book",
        lazy="select",
    )

    @property
    def url(self) -> str:
        return f"/catalog/book/{self.id}"
