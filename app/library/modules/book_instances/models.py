from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.library.models import Base
from app.library.utils import format_date_med

if TYPE_CHECKING:
    from app.library.modules.books.models import Book


class BookInstance(Base):
    __tablename__ = "book_instances"
    __table_args__ = (
        Index("idx_book_instances_book", "book_id"),
        Index("idx_book_instances_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    book_id: Mapped[int] = mapped_column(ForeignKey("books.id", ondelete="RESTRICT"), nullable=False)
    imprint: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="Maintenance")  # Available, Maintenance, Loaned, Reserved
    due_back: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    book: Mapped["Book"] = relationship("Book", back_populates="instances", lazy="joined")

    @property
    def url(self) -> str:
        return f"/catalog/bookinstance/{self.id}"

    @property
    def due_back_formatted(self) -> str:
        return format_date_med(self.due_back)
