# lending/sa/repositories/category.py

from typing import List, Optional, Iterable
from sqlalchemy import select
from sqlalchemy.orm import Session
from lending.sa.models import Category, Book, BookCategory


class CategoryRepository:
    """Repository for managing Category entities."""

    def __init__(self, session: Session):
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get_by_id(self, category_id: int) -> Optional[Category]:
        """Get a category by its ID.

        Args:
            category_id: The ID of the category to retrieve

        Returns:
            The Category object if found, None otherwise
        """
        return self.session.query(Category).filter(Category.id == category_id).first()

    def get_by_name(self, name: str) -> Optional[Category]:
        """Get a category by its name.

        Args:
            name: The name of the category to retrieve

        Returns:
            The Category object if found, None otherwise
        """
        return self.session.query(Category).filter(Category.name == name).first()

    def get_categories_by_book(self, book_id: int) -> List[Category]:
        """Get all categories associated with a specific book.

        Args:
            book_id: The ID of the book

        Returns:
            List of Category objects associated with the book, ordered by name
        """
        return (
            self.session.query(Category)
            .join(Category.book_categories)
            .join(BookCategory.book)
            .filter(Book.id == book_id)
            .order_by(Category.name)
            .all()
        )

    def find_missing_ids(self, category_ids: Iterable[int]) -> List[int]:
        """Return the ids in category_ids that have no category row.

        Args:
            category_ids: Candidate category IDs

        Returns:
            The unknown IDs, in input order
        """
        wanted = list(category_ids)
        if not wanted:
            return []
        found = set(self.session.scalars(select(Category.id).where(Category.id.in_(wanted))))
        return [category_id for category_id in wanted if category_id not in found]

    def create(self, name: str) -> Category:
        category = Category(name=name)
        self.session.add(category)
        self.session.flush()
        return category

    def rename(self, category: Category, name: str) -> Category:
        category.name = name
        self.session.flush()
        return category

    def delete_links(self, category_id: int) -> int:
        """Remove the category from every book's link set.

        Returns:
            Number of link rows removed
        """
        return self.session.query(BookCategory).filter(
            BookCategory.category_id == category_id
        ).delete(synchronize_session=False)

    def delete(self, category_id: int) -> bool:
        result = self.session.query(Category).filter(Category.id == category_id).delete(synchronize_session=False)
        return result > 0
