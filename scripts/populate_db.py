"""
Populate the catalog with a small sample library.

Idempotent: authors, genres and books that already exist (matched by name/title)
are reused, and copies are only added to books created in this run.

Usage:
  python scripts/populate_db.py
  DATABASE_URL=postgresql://... python scripts/populate_db.py
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scripts._db_utils import script_session  # noqa: E402

logger = logging.getLogger("populate_db")

AUTHORS = [
    {"first_name": "Patrick", "family_name": "Rothfuss", "date_of_birth": "1973-06-06"},
    {"first_name": "Ben", "family_name": "Bova", "date_of_birth": "1932-11-08"},
    {"first_name": "Isaac", "family_name": "Asimov", "date_of_birth": "1920-01-02", "date_of_death": "1992-04-06"},
    {"first_name": "Bob", "family_name": "Billings"},
    {"first_name": "Jim", "family_name": "Jones", "date_of_birth": "1971-12-16"},
]

GENRES = ["Fantasy", "Science Fiction", "French Poetry"]

# (title, summary, isbn, author family name, genre names, copies as (imprint, status, due_back))
BOOKS = [
    (
        "The Name of the Wind (The Kingkiller Chronicle, #1)",
        "The tale of Kvothe, from his childhood in a troupe of traveling players to his years "
        "as a near-feral orphan and his daring admission to a legendary school of magic.",
        "9781473211896",
        "Rothfuss",
        ["Fantasy"],
        [("London Gollancz, 2014.", "Available", None)],
    ),
    (
        "The Wise Man's Fear (The Kingkiller Chronicle, #2)",
        "Kvothe continues the story of his life, pursuing the truth about the Chandrian "
        "beyond the walls of the University.",
        "9788401352836",
        "Rothfuss",
        ["Fantasy"],
        [(" Gollancz, 2011.", "Loaned", None)],
    ),
    (
        "The Slow Regard of Silent Things (Kingkiller Chronicle)",
        "A brief, bittersweet look at the life of Auri, one of the mysterious figures "
        "of the Kingkiller Chronicle.",
        "9780756411336",
        "Rothfuss",
        ["Fantasy"],
        [("Gollancz, 2015.", None, None)],
    ),
    (
        "Apes and Angels",
        "Humankind's ventures out into the Milky Way meet a wave of deadly radiation "
        "expanding from the galactic core.",
        "9780765379528",
        "Bova",
        ["Science Fiction"],
        [
            ("New York Tom Doherty Associates, 2016.", "Available", None),
            ("New York Tom Doherty Associates, 2016.", "Available", None),
        ],
    ),
    (
        "Death Wave",
        "Ben Bova's grand saga of humanity's expansion continues as Jordan Kell races to "
        "warn an unbelieving Earth of the approaching death wave.",
        "9780765379504",
        "Bova",
        ["Science Fiction"],
        [
            ("New York, NY Tom Doherty Associates, LLC, 2015.", "Available", None),
            ("New York, NY Tom Doherty Associates, LLC, 2015.", "Maintenance", None),
            ("New York, NY Tom Doherty Associates, LLC, 2015.", "Loaned", None),
        ],
    ),
    ("Test Book 1", "Summary of test book 1", "ISBN111111", "Billings", ["Fantasy", "Science Fiction"], [("Imprint XXX2", None, None)]),
    ("Test Book 2", "Summary of test book 2", "ISBN222222", "Billings", [], [("Imprint XXX3", None, None)]),
]


def populate(*, database_url: str | None = None) -> dict[str, int]:
    """Insert the sample library. Returns how many records of each kind were created."""
    from app.library.modules.authors.models import Author
    from app.library.modules.authors.service import create_author
    from app.library.modules.book_instances.service import create_book_instance
    from app.library.modules.books.models import Book
    from app.library.modules.books.service import create_book
    from app.library.modules.genres.service import create_genre, find_genre_by_name

    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///locallibrary.db").strip()
    created = {"authors": 0, "genres": 0, "books": 0, "book_instances": 0}

    with script_session(db_url) as s:
        authors: dict[str, Author] = {}
        for payload in AUTHORS:
            author = (
                s.query(Author)
                .filter(Author.first_name == payload["first_name"], Author.family_name == payload["family_name"])
                .one_or_none()
            )
            if not author:
                author = create_author(s, payload)
                created["authors"] += 1
            authors[payload["family_name"]] = author

        genre_ids: dict[str, int] = {}
        for name in GENRES:
            genre = find_genre_by_name(s, name)
            if not genre:
                genre = create_genre(s, {"name": name})
                created["genres"] += 1
            genre_ids[name] = genre.id

        for title, summary, isbn, family_name, genre_names, copies in BOOKS:
            if s.query(Book).filter(Book.title == title).first():
                continue
            book = create_book(
                s,
                {
                    "title": title,
                    "summary": summary,
                    "isbn": isbn,
                    "author": str(authors[family_name].id),
                    "genre": [str(genre_ids[n]) for n in genre_names],
                },
            )
            created["books"] += 1
            for imprint, status, due_back in copies:
                create_book_instance(
                    s,
                    {"book": str(book.id), "imprint": imprint, "status": status, "due_back": due_back},
                )
                created["book_instances"] += 1

    logger.info("Populated catalog: %s", created)
    return created


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    populate(database_url=None)


if __name__ == "__main__":
    main()
