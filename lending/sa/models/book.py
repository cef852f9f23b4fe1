from sqlalchemy import String, Integer, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin


class BookAuthor(Base):
    __tablename__ = 'book_author'

    book_id: Mapped[int] = mapped_column(ForeignKey('book.id'), primary_key=True)
    author_id: Mapped[int] = mapped_column(ForeignKey('author.id'), primary_key=True)

    # Relationships
    book = relationship('Book', back_populates='book_authors')
    author = relationship('Author', back_populates='book_authors')

    __table_args__ = (
        Index('idx_book_author_author_id', 'author_id'),
    )


class BookCategory(Base):
    __tablename__ = 'book_category'

    book_id: Mapped[int] = mapped_column(ForeignKey('book.id'), primary_key=True)
    category_id: Mapped[int] = mapped_column(ForeignKey('category.id'), primary_key=True)

    # Relationships
    book = relationship('Book', back_populates='book_categories')
    category = relationship('Category', back_populates='book_categories')

    __table_args__ = (
        Index('idx_book_category_category_id', 'category_id'),
    )


class Book(Base, TimestampMixin):
    __tablename__ = 'book'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    isbn: Mapped[str | None] = mapped_column(String(20), unique=True, nullable=True)
    publication_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Written only through InventoryGuard.adjust
    copies_available: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    book_authors = relationship('BookAuthor', back_populates='book')
    book_categories = relationship('BookCategory', back_populates='book')
    borrowings = relationship('Borrowing', back_populates='book')
    cart_entries = relationship('CartEntry', back_populates='book')

    # Convenience relationships
    authors = relationship('Author', secondary='book_author', viewonly=True)
    categories = relationship('Category', secondary='book_category', viewonly=True)

    __table_args__ = (
        CheckConstraint('copies_available >= 0', name='ck_book_copies_available_non_negative'),
        Index('idx_book_title', 'title'),
    )
