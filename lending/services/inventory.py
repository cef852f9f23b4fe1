import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from lending.exceptions import NotFound, InsufficientInventory, ValidationError
from lending.sa.database import Database
from lending.sa.models import Book, AuditAction
from lending.sa.repositories import BookRepository
from lending.services.audit import AuditRecorder
from lending.utils.validators import require_id

logger = logging.getLogger(__name__)


class InventoryGuard:
    """Sole writer of Book.copies_available.

    Every change is one conditional UPDATE, so the bounds check and the write
    happen in a single statement under the row (or database) write lock. Two
    callers can never read the same pre-adjustment value, and the counter
    never goes below zero.
    """

    def __init__(self, database: Database, audit: Optional[AuditRecorder] = None):
        self.database = database
        self.audit = audit

    def adjust(self, session: Session, book_id: int, delta: int) -> int:
        """Atomically add delta to a book's counter inside the caller's unit of work.

        Args:
            session: Session of the enclosing unit of work
            book_id: ID of the book
            delta: Non-zero change to apply

        Returns:
            The new copies_available value

        Raises:
            NotFound: If the book does not exist
            InsufficientInventory: If the result would be negative (counter unchanged)
        """
        book_id = require_id(book_id, 'book_id')
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            raise ValidationError(f"delta must be a non-zero integer, got {delta!r}")

        result = session.execute(
            update(Book)
            .where(Book.id == book_id, Book.copies_available + delta >= 0)
            .values(copies_available=Book.copies_available + delta)
            .execution_options(synchronize_session=False)
        )
        books = BookRepository(session)
        if result.rowcount == 0:
            current = books.get_copies_available(book_id)
            if current is None:
                raise NotFound(f"Book {book_id} does not exist")
            logger.warning(f"Book {book_id}: refused {delta:+d}, only {current} copies available")
            raise InsufficientInventory(
                f"Book {book_id} has {current} copies available, cannot apply {delta:+d}"
            )

        # Keep any loaded Book instance in step with the stored counter
        instance = session.identity_map.get(session.identity_key(Book, book_id))
        if instance is not None:
            session.expire(instance, ['copies_available', 'updated_at'])

        new_count = books.get_copies_available(book_id)
        logger.debug(f"Book {book_id} copies_available {delta:+d} -> {new_count}")
        return new_count

    def restock(self, book_id: int, delta: int, actor: Optional[int] = None) -> int:
        """Provision (positive delta) or withdraw (negative delta) physical copies.

        Runs as its own unit of work. Withdrawing more copies than are on the
        shelf fails with InsufficientInventory.
        """
        book_id = require_id(book_id, 'book_id')
        with self.database.get_db() as session:
            new_count = self.adjust(session, book_id, delta)

        logger.info(f"Restocked book {book_id} by {delta:+d}, now {new_count} available")
        if self.audit:
            self.audit.record('book', AuditAction.UPDATE, book_id, actor,
                              {'copies_delta': delta, 'copies_available': new_count})
        return new_count

    def available(self, book_id: int) -> int:
        """Current stored counter for a book"""
        book_id = require_id(book_id, 'book_id')
        with self.database.get_db() as session:
            count = BookRepository(session).get_copies_available(book_id)
        if count is None:
            raise NotFound(f"Book {book_id} does not exist")
        return count
