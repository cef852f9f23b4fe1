from sqlalchemy import Integer, String
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin


class Category(Base, TimestampMixin):
    __tablename__ = 'category'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    # Relationships
    book_categories = relationship('BookCategory', back_populates='category')

    # Convenience relationship
    books = relationship('Book', secondary='book_category', viewonly=True)

    @property
    def display_name(self) -> str:
        return self.name
