from typing import List, Optional
from datetime import datetime
from sqlalchemy import update, select
from sqlalchemy.orm import Session
from lending.sa.models import Borrowing, BorrowingStatus, utcnow


class BorrowingRepository:
    """Repository for loan records."""

    def __init__(self, session: Session):
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get_by_id(self, borrowing_id: int) -> Optional[Borrowing]:
        """Get a loan by its ID"""
        return self.session.query(Borrowing).filter(Borrowing.id == borrowing_id).first()

    def get_book_id(self, borrowing_id: int) -> Optional[int]:
        return self.session.execute(
            select(Borrowing.book_id).where(Borrowing.id == borrowing_id)
        ).scalar_one_or_none()

    def get_active(self, member_id: int, book_id: int) -> Optional[Borrowing]:
        """Get the unreturned loan for a (member, book) pair, if any"""
        return (
            self.session.query(Borrowing)
            .filter(
                Borrowing.member_id == member_id,
                Borrowing.book_id == book_id,
                Borrowing.returned_at.is_(None)
            )
            .first()
        )

    def create(self, member_id: int, book_id: int, borrowed_at: datetime, due_date: datetime) -> Borrowing:
        """Insert an active loan and flush.

        The flush is where the partial unique index on active loans fires, so
        callers can map IntegrityError to a duplicate-loan error.
        """
        borrowing = Borrowing(
            member_id=member_id,
            book_id=book_id,
            borrowed_at=borrowed_at,
            due_date=due_date,
            status=BorrowingStatus.BORROWED.value
        )
        self.session.add(borrowing)
        self.session.flush()
        return borrowing

    def mark_returned(self, borrowing_id: int, returned_at: datetime,
                      librarian_id: Optional[int] = None) -> bool:
        """Close an active loan.

        Conditional on returned_at still being NULL, so two concurrent returns
        cannot both succeed.

        Returns:
            True if this call closed the loan, False if it was missing or already closed
        """
        result = self.session.execute(
            update(Borrowing)
            .where(Borrowing.id == borrowing_id, Borrowing.returned_at.is_(None))
            .values(
                returned_at=returned_at,
                status=BorrowingStatus.RETURNED.value,
                librarian_id=librarian_id
            )
            .execution_options(synchronize_session=False)
        )
        instance = self.session.identity_map.get(self.session.identity_key(Borrowing, borrowing_id))
        if instance is not None:
            self.session.expire(instance)
        return result.rowcount > 0

    def get_active_for_member(self, member_id: int) -> List[Borrowing]:
        """Get a member's unreturned loans, oldest due first"""
        return (
            self.session.query(Borrowing)
            .filter(
                Borrowing.member_id == member_id,
                Borrowing.returned_at.is_(None)
            )
            .order_by(Borrowing.due_date, Borrowing.id)
            .all()
        )

    def get_overdue(self, now: Optional[datetime] = None) -> List[Borrowing]:
        """Get active loans whose due date has passed.

        Overdue is computed here from due_date; the stored status column is
        not consulted.
        """
        now = now or utcnow()
        return (
            self.session.query(Borrowing)
            .filter(
                Borrowing.returned_at.is_(None),
                Borrowing.due_date < now
            )
            .order_by(Borrowing.due_date, Borrowing.id)
            .all()
        )

    def count_active_for_book(self, book_id: int) -> int:
        return (
            self.session.query(Borrowing)
            .filter(Borrowing.book_id == book_id, Borrowing.returned_at.is_(None))
            .count()
        )

    def delete_for_book(self, book_id: int) -> int:
        return self.session.query(Borrowing).filter(
            Borrowing.book_id == book_id
        ).delete(synchronize_session=False)

    def delete_for_member(self, member_id: int) -> int:
        return self.session.query(Borrowing).filter(
            Borrowing.member_id == member_id
        ).delete(synchronize_session=False)
