from typing import Optional, List, Iterable
from sqlalchemy import select
from sqlalchemy.orm import Session
from ..models import Author, Book, BookAuthor


class AuthorRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, author_id: int) -> Optional[Author]:
        """Get an author by ID"""
        return self.session.query(Author).filter(Author.id == author_id).first()

    def get_authors_by_book(self, book_id: int) -> List[Author]:
        """Get all authors for a specific book"""
        return self.session.query(Author).join(
            Author.books
        ).filter(
            Book.id == book_id
        ).order_by(Author.last_name, Author.first_name).all()

    def find_missing_ids(self, author_ids: Iterable[int]) -> List[int]:
        """Return the ids in author_ids that have no author row"""
        wanted = list(author_ids)
        if not wanted:
            return []
        found = set(self.session.scalars(select(Author.id).where(Author.id.in_(wanted))))
        return [author_id for author_id in wanted if author_id not in found]

    def create(self, first_name: str, last_name: str) -> Author:
        author = Author(first_name=first_name, last_name=last_name)
        self.session.add(author)
        self.session.flush()
        return author

    def update(self, author: Author, first_name: str, last_name: str) -> Author:
        author.first_name = first_name
        author.last_name = last_name
        self.session.flush()
        return author

    def delete_links(self, author_id: int) -> int:
        """Remove the author from every book's link set"""
        return self.session.query(BookAuthor).filter(
            BookAuthor.author_id == author_id
        ).delete(synchronize_session=False)

    def delete(self, author_id: int) -> bool:
        result = self.session.query(Author).filter(Author.id == author_id).delete(synchronize_session=False)
        return result > 0
