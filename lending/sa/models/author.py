from sqlalchemy import Integer, String, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, PersonNameMixin


class Author(Base, TimestampMixin, PersonNameMixin):
    __tablename__ = 'author'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Relationships
    book_authors = relationship('BookAuthor', back_populates='author')

    # Convenience relationship
    books = relationship('Book', secondary='book_author', viewonly=True)

    __table_args__ = (
        # Search index
        Index('idx_author_name', 'first_name', 'last_name'),
    )
