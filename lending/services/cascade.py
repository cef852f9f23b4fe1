import logging
from dataclasses import dataclass
from typing import Optional

from lending.exceptions import NotFound
from lending.sa.database import Database
from lending.sa.models import AuditAction
from lending.sa.repositories import (
    BookRepository, AuthorRepository, CategoryRepository,
    MemberRepository, CartRepository, BorrowingRepository
)
from lending.services.audit import AuditRecorder
from lending.services.inventory import InventoryGuard
from lending.utils.validators import require_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ack:
    entity: str
    entity_id: int
    message: str


class CascadeCoordinator:
    """Deletes an entity together with every row that references it.

    Each delete is a single unit of work: if any step raises, the rollback in
    Database.get_db restores every row already removed.
    """

    def __init__(self, database: Database, inventory: Optional[InventoryGuard] = None,
                 audit: Optional[AuditRecorder] = None):
        self.database = database
        self.audit = audit
        self.inventory = inventory or InventoryGuard(database, audit)

    def delete_book(self, book_id: int, actor: Optional[int] = None) -> Ack:
        """Remove a book, its cart entries, loan history and link rows.

        Raises:
            NotFound: If the book does not exist
        """
        book_id = require_id(book_id, 'book_id')
        with self.database.get_db() as session:
            books = BookRepository(session)
            # Book row first, same lock order as borrow and return
            if books.lock(book_id) is None:
                raise NotFound(f"Book {book_id} does not exist")

            removed_cart = CartRepository(session).delete_for_book(book_id)
            removed_loans = BorrowingRepository(session).delete_for_book(book_id)
            removed_links = books.delete_links(book_id)
            if not books.delete(book_id):
                # Deleted by a concurrent unit after our existence check
                raise NotFound(f"Book {book_id} does not exist")

        logger.info(
            f"Deleted book {book_id} with {removed_cart} cart entries, "
            f"{removed_loans} borrowings and {removed_links} links"
        )
        self._audit('book', book_id, actor, {
            'cart_entries': removed_cart, 'borrowings': removed_loans, 'links': removed_links
        })
        return Ack('book', book_id, f"Book ID {book_id} has been successfully deleted")

    def delete_author(self, author_id: int, actor: Optional[int] = None) -> Ack:
        """Remove an author and its book links. Loans and carts are untouched."""
        author_id = require_id(author_id, 'author_id')
        with self.database.get_db() as session:
            authors = AuthorRepository(session)
            if authors.get_by_id(author_id) is None:
                raise NotFound(f"Author {author_id} does not exist")
            removed_links = authors.delete_links(author_id)
            if not authors.delete(author_id):
                raise NotFound(f"Author {author_id} does not exist")

        logger.info(f"Deleted author {author_id} and {removed_links} book links")
        self._audit('author', author_id, actor, {'links': removed_links})
        return Ack('author', author_id, f"Author ID {author_id} has been successfully deleted")

    def delete_category(self, category_id: int, actor: Optional[int] = None) -> Ack:
        """Remove a category and its book links. Loans and carts are untouched."""
        category_id = require_id(category_id, 'category_id')
        with self.database.get_db() as session:
            categories = CategoryRepository(session)
            if categories.get_by_id(category_id) is None:
                raise NotFound(f"Category {category_id} does not exist")
            removed_links = categories.delete_links(category_id)
            if not categories.delete(category_id):
                raise NotFound(f"Category {category_id} does not exist")

        logger.info(f"Deleted category {category_id} and {removed_links} book links")
        self._audit('category', category_id, actor, {'links': removed_links})
        return Ack('category', category_id, f"Category ID {category_id} has been successfully deleted")

    def delete_member(self, member_id: int, actor: Optional[int] = None) -> Ack:
        """Remove a member, their cart and loan history.

        Copies still out on active loans are put back through the
        InventoryGuard so each book's counter keeps matching its active loans.
        """
        member_id = require_id(member_id, 'member_id')
        with self.database.get_db() as session:
            members = MemberRepository(session)
            if members.get_by_id(member_id) is None:
                raise NotFound(f"Member {member_id} does not exist")

            removed_cart = CartRepository(session).delete_for_member(member_id)

            loans = BorrowingRepository(session)
            books = BookRepository(session)
            for book_id in sorted({b.book_id for b in loans.get_active_for_member(member_id)}):
                books.lock(book_id)
            # Re-read under the book locks; a return may have landed in between
            active_book_ids = sorted(b.book_id for b in loans.get_active_for_member(member_id))
            for book_id in active_book_ids:
                self.inventory.adjust(session, book_id, +1)

            removed_loans = loans.delete_for_member(member_id)
            if not members.delete(member_id):
                raise NotFound(f"Member {member_id} does not exist")

        logger.info(
            f"Deleted member {member_id} with {removed_cart} cart entries and "
            f"{removed_loans} borrowings ({len(active_book_ids)} copies restored)"
        )
        self._audit('member', member_id, actor, {
            'cart_entries': removed_cart, 'borrowings': removed_loans,
            'restored_book_ids': active_book_ids
        })
        return Ack('member', member_id, f"Member ID {member_id} has been successfully deleted")

    def _audit(self, table: str, record_id: int, actor: Optional[int], payload: dict) -> None:
        if self.audit:
            self.audit.record(table, AuditAction.DELETE, record_id, actor, payload)
