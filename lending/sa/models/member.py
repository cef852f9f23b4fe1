from datetime import datetime
from sqlalchemy import Integer, String, Text, ForeignKey, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, PersonNameMixin, UTCDateTime, utcnow


class Member(Base, TimestampMixin, PersonNameMixin):
    __tablename__ = 'member'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    borrowings = relationship('Borrowing', back_populates='member')
    cart_entries = relationship('CartEntry', back_populates='member')


class Librarian(Base, PersonNameMixin):
    __tablename__ = 'librarian'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


class CartEntry(Base):
    """Books a member saved for later. No coupling to inventory."""
    __tablename__ = 'book_cart'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    member_id: Mapped[int] = mapped_column(ForeignKey('member.id'), nullable=False)
    book_id: Mapped[int] = mapped_column(ForeignKey('book.id'), nullable=False)
    added_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    # Relationships
    member = relationship('Member', back_populates='cart_entries')
    book = relationship('Book', back_populates='cart_entries')

    __table_args__ = (
        Index('idx_book_cart_member_id', 'member_id'),
        Index('idx_book_cart_book_id', 'book_id'),
    )
