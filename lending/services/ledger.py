import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from lending.config import Config
from lending.exceptions import (
    NotFound, AlreadyReturned, DuplicateActiveBorrowing
)
from lending.sa.database import Database
from lending.sa.models import Borrowing, AuditAction, utcnow
from lending.sa.repositories import BookRepository, BorrowingRepository, MemberRepository
from lending.services.audit import AuditRecorder, snapshot
from lending.services.inventory import InventoryGuard
from lending.utils.validators import require_id

logger = logging.getLogger(__name__)

BORROWING_AUDIT_FIELDS = ('member_id', 'book_id', 'borrowed_at', 'due_date', 'returned_at', 'status', 'librarian_id')


class BorrowingLedger:
    """Issues and closes loans.

    A loan is active while returned_at is NULL and terminal once returned.
    Overdue is not stored by this class; readers derive it from due_date via
    Borrowing.current_status.
    """

    def __init__(self, database: Database, inventory: Optional[InventoryGuard] = None,
                 audit: Optional[AuditRecorder] = None, loan_period_days: int = Config.LOAN_PERIOD_DAYS):
        self.database = database
        self.audit = audit
        self.inventory = inventory or InventoryGuard(database, audit)
        self.loan_period = timedelta(days=loan_period_days)

    def borrow(self, member_id: int, book_id: int) -> Borrowing:
        """Issue one copy of a book to a member.

        The counter decrement and the loan insert commit together or not at
        all.

        Raises:
            ValidationError: If an id is malformed
            NotFound: If the member or book does not exist
            DuplicateActiveBorrowing: If the member already holds this book
            InsufficientInventory: If no copy is available
        """
        member_id = require_id(member_id, 'member_id')
        book_id = require_id(book_id, 'book_id')

        with self.database.get_db() as session:
            if MemberRepository(session).get_by_id(member_id) is None:
                raise NotFound(f"Member {member_id} does not exist")

            loans = BorrowingRepository(session)
            if loans.get_active(member_id, book_id) is not None:
                logger.warning(f"Member {member_id} tried to borrow book {book_id} twice")
                raise DuplicateActiveBorrowing(
                    f"Member {member_id} already has an active loan of book {book_id}"
                )

            # Takes the write lock; everything below runs serialized per book
            self.inventory.adjust(session, book_id, -1)

            if loans.get_active(member_id, book_id) is not None:
                raise DuplicateActiveBorrowing(
                    f"Member {member_id} already has an active loan of book {book_id}"
                )

            borrowed_at = utcnow()
            try:
                borrowing = loans.create(member_id, book_id, borrowed_at, borrowed_at + self.loan_period)
            except IntegrityError as e:
                raise DuplicateActiveBorrowing(
                    f"Member {member_id} already has an active loan of book {book_id}"
                ) from e

        logger.info(f"Borrowing {borrowing.id}: member {member_id} took book {book_id}, due {borrowing.due_date:%Y-%m-%d}")
        self._audit(AuditAction.INSERT, borrowing)
        return borrowing

    def return_book(self, borrowing_id: int, librarian_id: Optional[int] = None) -> Borrowing:
        """Close a loan and put the copy back on the shelf.

        Raises:
            NotFound: If the loan (or its book) does not exist
            AlreadyReturned: If the loan is already closed
        """
        borrowing_id = require_id(borrowing_id, 'borrowing_id')
        if librarian_id is not None:
            librarian_id = require_id(librarian_id, 'librarian_id')

        with self.database.get_db() as session:
            loans = BorrowingRepository(session)
            book_id = loans.get_book_id(borrowing_id)
            if book_id is None:
                raise NotFound(f"Borrowing {borrowing_id} does not exist")

            if librarian_id is not None and MemberRepository(session).get_librarian(librarian_id) is None:
                raise NotFound(f"Librarian {librarian_id} does not exist")

            # Book row first, same order as borrow and delete_book
            if BookRepository(session).lock(book_id) is None:
                raise NotFound(f"Book {book_id} of borrowing {borrowing_id} does not exist")

            if not loans.mark_returned(borrowing_id, utcnow(), librarian_id):
                if loans.get_by_id(borrowing_id) is None:
                    raise NotFound(f"Borrowing {borrowing_id} does not exist")
                logger.warning(f"Borrowing {borrowing_id}: return refused, already closed")
                raise AlreadyReturned(f"Borrowing {borrowing_id} was already returned")

            self.inventory.adjust(session, book_id, +1)
            borrowing = loans.get_by_id(borrowing_id)

        logger.info(f"Borrowing {borrowing_id}: book {book_id} returned")
        self._audit(AuditAction.UPDATE, borrowing, actor=librarian_id)
        return borrowing

    def get_borrowing(self, borrowing_id: int) -> Borrowing:
        borrowing_id = require_id(borrowing_id, 'borrowing_id')
        with self.database.get_db() as session:
            borrowing = BorrowingRepository(session).get_by_id(borrowing_id)
        if borrowing is None:
            raise NotFound(f"Borrowing {borrowing_id} does not exist")
        return borrowing

    def member_active_loans(self, member_id: int) -> List[Borrowing]:
        """Unreturned loans of one member; use current_status() for overdue"""
        member_id = require_id(member_id, 'member_id')
        with self.database.get_db() as session:
            if MemberRepository(session).get_by_id(member_id) is None:
                raise NotFound(f"Member {member_id} does not exist")
            return BorrowingRepository(session).get_active_for_member(member_id)

    def overdue_loans(self, now: Optional[datetime] = None) -> List[Borrowing]:
        with self.database.get_db() as session:
            return BorrowingRepository(session).get_overdue(now)

    def _audit(self, action: AuditAction, borrowing: Borrowing, actor: Optional[int] = None) -> None:
        if self.audit:
            self.audit.record('borrowing', action, borrowing.id, actor,
                              snapshot(borrowing, BORROWING_AUDIT_FIELDS))
