from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.library.models import Base
from app.library.utils import format_date_med

if TYPE_CHECKING:
    from app.library.modules.books.models import Book


class Author(Base):
    __tablename__ = "authors"
    __table_args__ = (
        Index("idx_authors_family_name", "family_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    family_name: Mapped[str] = mapped_column(String(100), nullable=False)

    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    date_of_death: Mapped[date | None] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    books: Mapped[list["Book"]] = relationship("Book", back_populates="author", lazy="select")

    @property
    def name(self) -> str:
        # Either part missing means there is no sensible display name.
        if not self.first_name or not self.family_name:
            return ""
        return f"{self.family_name}, {self.first_name}"

    @property
    def url(self) -> str:
        return f"/catalog/author/{self.id}"

    @property
    def date_of_birth_formatted(self) -> str:
        return format_date_med(self.date_of_birth)

    @property
    def date_of_death_formatted(self) -> str:
        return format_date_med(self.date_of_death)

    @property
    def lifespan(self) -> str:
        if not self.date_of_birth and not self.date_of_death:
            return ""
        return f"{self.date_of_birth_formatted} - {self.date_of_death_formatted}"
