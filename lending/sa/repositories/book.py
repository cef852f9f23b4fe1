from typing import Optional, List, Iterable
from sqlalchemy import select, func
from sqlalchemy.orm import Session, joinedload
from ..models import Book, BookAuthor, BookCategory, Borrowing


class BookRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, book_id: int) -> Optional[Book]:
        """Get a book by its ID"""
        return self.session.query(Book).filter(Book.id == book_id).first()

    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        """Get a book by ISBN"""
        return self.session.query(Book).filter(Book.isbn == isbn).first()

    def get_with_links(self, book_id: int) -> Optional[Book]:
        """Get a book with its authors and categories loaded.

        Args:
            book_id: The ID of the book

        Returns:
            Book object with authors and categories loaded, or None if not found
        """
        return (
            self.session.query(Book)
            .filter(Book.id == book_id)
            .options(
                joinedload(Book.authors),
                joinedload(Book.categories)
            )
            .first()
        )

    def lock(self, book_id: int) -> Optional[int]:
        """Take the row lock on a book and return its id, or None if absent.

        Row-locking backends serialize here (SELECT ... FOR UPDATE). SQLite
        ignores FOR UPDATE; there the first write of the unit takes the
        database lock instead.
        """
        return self.session.execute(
            select(Book.id).where(Book.id == book_id).with_for_update()
        ).scalar_one_or_none()

    def create(self, title: str, publication_year: Optional[int], isbn: Optional[str],
               copies_available: int) -> Book:
        """Insert a book row and flush so it gets an id"""
        book = Book(
            title=title,
            publication_year=publication_year,
            isbn=isbn,
            copies_available=copies_available
        )
        self.session.add(book)
        self.session.flush()
        return book

    def update_fields(self, book: Book, **fields) -> Book:
        """Apply metadata fields. copies_available is not accepted here."""
        for name, value in fields.items():
            setattr(book, name, value)
        self.session.flush()
        return book

    def get_author_ids(self, book_id: int) -> List[int]:
        return list(self.session.scalars(
            select(BookAuthor.author_id).where(BookAuthor.book_id == book_id).order_by(BookAuthor.author_id)
        ))

    def get_category_ids(self, book_id: int) -> List[int]:
        return list(self.session.scalars(
            select(BookCategory.category_id).where(BookCategory.book_id == book_id).order_by(BookCategory.category_id)
        ))

    def replace_authors(self, book_id: int, author_ids: Iterable[int]) -> None:
        """Replace the book's author link set wholesale"""
        self.session.query(BookAuthor).filter(BookAuthor.book_id == book_id).delete()
        self.session.add_all(BookAuthor(book_id=book_id, author_id=author_id) for author_id in author_ids)
        self.session.flush()

    def replace_categories(self, book_id: int, category_ids: Iterable[int]) -> None:
        """Replace the book's category link set wholesale"""
        self.session.query(BookCategory).filter(BookCategory.book_id == book_id).delete()
        self.session.add_all(BookCategory(book_id=book_id, category_id=category_id) for category_id in category_ids)
        self.session.flush()

    def delete_links(self, book_id: int) -> int:
        """Remove every author and category link of a book"""
        removed = self.session.query(BookCategory).filter(
            BookCategory.book_id == book_id
        ).delete(synchronize_session=False)
        removed += self.session.query(BookAuthor).filter(
            BookAuthor.book_id == book_id
        ).delete(synchronize_session=False)
        return removed

    def delete(self, book_id: int) -> bool:
        """Delete the book row itself. Dependents must already be gone."""
        result = self.session.query(Book).filter(Book.id == book_id).delete(synchronize_session=False)
        return result > 0

    def count_borrowings(self, book_id: int) -> int:
        """Total loans ever recorded for a book (active and returned)"""
        return self.session.scalar(
            select(func.count(Borrowing.id)).where(Borrowing.book_id == book_id)
        ) or 0

    def get_copies_available(self, book_id: int) -> Optional[int]:
        """Read the stored counter, bypassing the identity map"""
        return self.session.execute(
            select(Book.copies_available).where(Book.id == book_id)
        ).scalar_one_or_none()
