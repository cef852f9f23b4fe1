import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lending.exceptions import NotFound, InvalidReference, ValidationError
from lending.sa.database import Database
from lending.sa.models import Book, Author, Category, Member, Librarian, CartEntry, AuditAction
from lending.sa.repositories import (
    BookRepository, AuthorRepository, CategoryRepository, MemberRepository, CartRepository
)
from lending.services.audit import AuditRecorder, snapshot
from lending.services.inventory import InventoryGuard
from lending.utils.validators import (
    require_id, require_id_list, require_text, optional_text, optional_year
)

logger = logging.getLogger(__name__)

EDITABLE_BOOK_FIELDS = ('title', 'publication_year', 'isbn')


@dataclass(frozen=True)
class BookView:
    """Read-only projection of a book for display layers"""
    book_id: int
    title: str
    isbn: Optional[str]
    publication_year: Optional[int]
    copies_available: int
    times_borrowed: int
    author_ids: List[int] = field(default_factory=list)
    authors: List[str] = field(default_factory=list)
    category_ids: List[int] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)


class CatalogService:
    """Catalog edits: books with their link sets, authors, categories, members.

    Book metadata and both link sets are written in one unit of work, so an
    edit is never visible half-applied.
    """

    def __init__(self, database: Database, inventory: Optional[InventoryGuard] = None,
                 audit: Optional[AuditRecorder] = None):
        self.database = database
        self.audit = audit
        self.inventory = inventory or InventoryGuard(database, audit)

    # Books

    def create_book(self, title: str, publication_year: Optional[int], isbn: Optional[str],
                    initial_copies: int, author_ids: Sequence[int], category_ids: Sequence[int],
                    actor: Optional[int] = None) -> Book:
        """Create a book with its authors and categories.

        Raises:
            ValidationError: Malformed fields, empty author list or duplicate ISBN
            InvalidReference: Unknown author or category id
        """
        title = require_text(title, 'title', 255)
        publication_year = optional_year(publication_year)
        isbn = optional_text(isbn, 'isbn', 20)
        if isinstance(initial_copies, bool) or not isinstance(initial_copies, int) or initial_copies < 0:
            raise ValidationError(f"initial_copies must be a non-negative integer, got {initial_copies!r}")
        author_ids = require_id_list(author_ids, 'author_ids', allow_empty=False)
        category_ids = require_id_list(category_ids, 'category_ids')

        with self.database.get_db() as session:
            books = BookRepository(session)
            self._check_references(session, author_ids, category_ids)
            if isbn and books.get_by_isbn(isbn):
                raise ValidationError(f"A book with ISBN '{isbn}' already exists")

            try:
                book = books.create(title, publication_year, isbn, copies_available=0)
            except IntegrityError as e:
                raise ValidationError(f"A book with ISBN '{isbn}' already exists") from e
            if initial_copies:
                self.inventory.adjust(session, book.id, initial_copies)
            books.replace_authors(book.id, author_ids)
            books.replace_categories(book.id, category_ids)
            book = books.get_with_links(book.id)

        logger.info(f"Created book {book.id} '{book.title}' with {initial_copies} copies")
        self._audit('book', AuditAction.INSERT, book.id, actor,
                    {'title': book.title, 'isbn': book.isbn, 'copies': book.copies_available})
        return book

    def update_book(self, book_id: int, author_ids: Sequence[int], category_ids: Sequence[int],
                    actor: Optional[int] = None, **fields) -> Book:
        """Edit book metadata and replace both link sets.

        Args:
            book_id: ID of the book
            author_ids: Complete new author list (replaces the old one)
            category_ids: Complete new category list (replaces the old one)
            actor: Librarian making the change, for the audit log
            fields: Any of title, publication_year, isbn

        Raises:
            NotFound: If the book does not exist
            ValidationError: Unknown field, malformed value or duplicate ISBN
            InvalidReference: Unknown author or category id
        """
        book_id = require_id(book_id, 'book_id')
        unknown = set(fields) - set(EDITABLE_BOOK_FIELDS)
        if 'copies_available' in unknown:
            raise ValidationError("copies_available cannot be edited directly; use restock")
        if unknown:
            raise ValidationError(f"Unknown book fields: {', '.join(sorted(unknown))}")
        if 'title' in fields:
            fields['title'] = require_text(fields['title'], 'title', 255)
        if 'publication_year' in fields:
            fields['publication_year'] = optional_year(fields['publication_year'])
        if 'isbn' in fields:
            fields['isbn'] = optional_text(fields['isbn'], 'isbn', 20)
        author_ids = require_id_list(author_ids, 'author_ids', allow_empty=False)
        category_ids = require_id_list(category_ids, 'category_ids')

        with self.database.get_db() as session:
            books = BookRepository(session)
            if books.lock(book_id) is None:
                raise NotFound(f"Book {book_id} does not exist")
            book = books.get_by_id(book_id)
            self._check_references(session, author_ids, category_ids)
            isbn = fields.get('isbn')
            if isbn:
                existing = books.get_by_isbn(isbn)
                if existing is not None and existing.id != book_id:
                    raise ValidationError(f"A book with ISBN '{isbn}' already exists")

            try:
                books.update_fields(book, **fields)
            except IntegrityError as e:
                raise ValidationError(f"A book with ISBN '{isbn}' already exists") from e
            books.replace_authors(book_id, author_ids)
            books.replace_categories(book_id, category_ids)
            session.expire(book)
            book = books.get_with_links(book_id)

        logger.info(f"Updated book {book_id}: fields={sorted(fields)} authors={author_ids} categories={category_ids}")
        payload = snapshot(book, EDITABLE_BOOK_FIELDS)
        payload.update(author_ids=author_ids, category_ids=category_ids)
        self._audit('book', AuditAction.UPDATE, book_id, actor, payload)
        return book

    def get_book(self, book_id: int) -> Book:
        book_id = require_id(book_id, 'book_id')
        with self.database.get_db() as session:
            book = BookRepository(session).get_with_links(book_id)
        if book is None:
            raise NotFound(f"Book {book_id} does not exist")
        return book

    def book_view(self, book_id: int) -> BookView:
        """Counter, link sets and loan count, read from the committed state"""
        book_id = require_id(book_id, 'book_id')
        with self.database.get_db() as session:
            books = BookRepository(session)
            book = books.get_by_id(book_id)
            if book is None:
                raise NotFound(f"Book {book_id} does not exist")
            authors = AuthorRepository(session).get_authors_by_book(book_id)
            categories = CategoryRepository(session).get_categories_by_book(book_id)
            return BookView(
                book_id=book.id,
                title=book.title,
                isbn=book.isbn,
                publication_year=book.publication_year,
                copies_available=book.copies_available,
                times_borrowed=books.count_borrowings(book_id),
                author_ids=[a.id for a in authors],
                authors=[a.full_name for a in authors],
                category_ids=[c.id for c in categories],
                categories=[c.display_name for c in categories],
            )

    # Authors and categories

    def create_author(self, first_name: str, last_name: str, actor: Optional[int] = None) -> Author:
        first_name = require_text(first_name, 'first_name', 100)
        last_name = require_text(last_name, 'last_name', 100)
        with self.database.get_db() as session:
            author = AuthorRepository(session).create(first_name, last_name)
        logger.info(f"Created author {author.id} {author.full_name}")
        self._audit('author', AuditAction.INSERT, author.id, actor, snapshot(author, ('first_name', 'last_name')))
        return author

    def update_author(self, author_id: int, first_name: str, last_name: str,
                      actor: Optional[int] = None) -> Author:
        author_id = require_id(author_id, 'author_id')
        first_name = require_text(first_name, 'first_name', 100)
        last_name = require_text(last_name, 'last_name', 100)
        with self.database.get_db() as session:
            authors = AuthorRepository(session)
            author = authors.get_by_id(author_id)
            if author is None:
                raise NotFound(f"Author {author_id} does not exist")
            authors.update(author, first_name, last_name)
        logger.info(f"Updated author {author_id} to {author.full_name}")
        self._audit('author', AuditAction.UPDATE, author_id, actor, snapshot(author, ('first_name', 'last_name')))
        return author

    def create_category(self, name: str, actor: Optional[int] = None) -> Category:
        name = require_text(name, 'name', 100)
        with self.database.get_db() as session:
            categories = CategoryRepository(session)
            if categories.get_by_name(name):
                raise ValidationError(f"Category '{name}' already exists")
            try:
                category = categories.create(name)
            except IntegrityError as e:
                raise ValidationError(f"Category '{name}' already exists") from e
        logger.info(f"Created category {category.id} '{name}'")
        self._audit('category', AuditAction.INSERT, category.id, actor, {'name': name})
        return category

    def update_category(self, category_id: int, name: str, actor: Optional[int] = None) -> Category:
        category_id = require_id(category_id, 'category_id')
        name = require_text(name, 'name', 100)
        with self.database.get_db() as session:
            categories = CategoryRepository(session)
            category = categories.get_by_id(category_id)
            if category is None:
                raise NotFound(f"Category {category_id} does not exist")
            existing = categories.get_by_name(name)
            if existing is not None and existing.id != category_id:
                raise ValidationError(f"Category '{name}' already exists")
            categories.rename(category, name)
        logger.info(f"Renamed category {category_id} to '{name}'")
        self._audit('category', AuditAction.UPDATE, category_id, actor, {'name': name})
        return category

    # Members

    def create_member(self, first_name: str, last_name: str, email: str,
                      phone_number: Optional[str] = None, address: Optional[str] = None,
                      actor: Optional[int] = None) -> Member:
        first_name = require_text(first_name, 'first_name', 100)
        last_name = require_text(last_name, 'last_name', 100)
        email = require_text(email, 'email', 255)
        phone_number = optional_text(phone_number, 'phone_number', 20)
        address = optional_text(address, 'address')
        with self.database.get_db() as session:
            member = MemberRepository(session).create(first_name, last_name, email, phone_number, address)
        logger.info(f"Created member {member.id} {member.full_name}")
        self._audit('member', AuditAction.INSERT, member.id, actor,
                    snapshot(member, ('first_name', 'last_name', 'email')))
        return member

    def create_librarian(self, first_name: str, last_name: str, email: str) -> Librarian:
        first_name = require_text(first_name, 'first_name', 100)
        last_name = require_text(last_name, 'last_name', 100)
        email = require_text(email, 'email', 255)
        with self.database.get_db() as session:
            librarian = MemberRepository(session).create_librarian(first_name, last_name, email)
        logger.info(f"Created librarian {librarian.id} {librarian.full_name}")
        self._audit('librarian', AuditAction.INSERT, librarian.id, None,
                    snapshot(librarian, ('first_name', 'last_name', 'email')))
        return librarian

    # Cart

    def add_to_cart(self, member_id: int, book_id: int) -> CartEntry:
        member_id = require_id(member_id, 'member_id')
        book_id = require_id(book_id, 'book_id')
        with self.database.get_db() as session:
            if MemberRepository(session).get_by_id(member_id) is None:
                raise NotFound(f"Member {member_id} does not exist")
            if BookRepository(session).get_by_id(book_id) is None:
                raise NotFound(f"Book {book_id} does not exist")
            return CartRepository(session).add(member_id, book_id)

    def remove_from_cart(self, member_id: int, book_id: int) -> int:
        member_id = require_id(member_id, 'member_id')
        book_id = require_id(book_id, 'book_id')
        with self.database.get_db() as session:
            return CartRepository(session).remove(member_id, book_id)

    def _check_references(self, session: Session, author_ids: List[int], category_ids: List[int]) -> None:
        missing_authors = AuthorRepository(session).find_missing_ids(author_ids)
        if missing_authors:
            raise InvalidReference(f"Unknown author ids: {missing_authors}")
        missing_categories = CategoryRepository(session).find_missing_ids(category_ids)
        if missing_categories:
            raise InvalidReference(f"Unknown category ids: {missing_categories}")

    def _audit(self, table: str, action: AuditAction, record_id: int,
               actor: Optional[int], payload: dict) -> None:
        if self.audit:
            self.audit.record(table, action, record_id, actor, payload)
