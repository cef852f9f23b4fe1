from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import Integer, String, ForeignKey, Index, text
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, UTCDateTime, utcnow


class BorrowingStatus(str, Enum):
    BORROWED = "borrowed"   # active, stored
    RETURNED = "returned"   # terminal, stored
    OVERDUE = "overdue"     # derived at read time, never written by the engine


class Borrowing(Base):
    __tablename__ = 'borrowing'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    member_id: Mapped[int] = mapped_column(ForeignKey('member.id'), nullable=False)
    book_id: Mapped[int] = mapped_column(ForeignKey('book.id'), nullable=False)
    borrowed_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    due_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    returned_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=BorrowingStatus.BORROWED.value)
    librarian_id: Mapped[int | None] = mapped_column(ForeignKey('librarian.id'), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    member = relationship('Member', back_populates='borrowings')
    book = relationship('Book', back_populates='borrowings')
    librarian = relationship('Librarian')

    __table_args__ = (
        # At most one unreturned loan per (member, book)
        Index(
            'uix_borrowing_active_member_book', 'member_id', 'book_id',
            unique=True,
            sqlite_where=text('returned_at IS NULL'),
            postgresql_where=text('returned_at IS NULL'),
        ),
        Index('idx_borrowing_book_id', 'book_id'),
        Index('idx_borrowing_due_date', 'due_date'),
    )

    @property
    def is_active(self) -> bool:
        return self.returned_at is None

    def current_status(self, now: Optional[datetime] = None) -> BorrowingStatus:
        """Status as seen by readers; overdue is derived from due_date."""
        if self.returned_at is not None:
            return BorrowingStatus.RETURNED
        now = now or utcnow()
        if self.due_date < now:
            return BorrowingStatus.OVERDUE
        return BorrowingStatus.BORROWED
