from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from lending.exceptions import ValidationError
from lending.sa.models import Member, Librarian, CartEntry


class MemberRepository:
    """Repository for managing Member and Librarian entities."""

    def __init__(self, session: Session):
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get_by_id(self, member_id: int) -> Optional[Member]:
        """Get a member by ID"""
        return self.session.query(Member).filter(Member.id == member_id).first()

    def get_by_email(self, email: str) -> Optional[Member]:
        return self.session.query(Member).filter(Member.email == email).first()

    def create(self, first_name: str, last_name: str, email: str,
               phone_number: Optional[str] = None, address: Optional[str] = None) -> Member:
        """Create a new member.

        Raises:
            ValidationError: If a member with the given email already exists
        """
        if self.get_by_email(email):
            raise ValidationError(f"Member with email '{email}' already exists")

        member = Member(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone_number=phone_number,
            address=address
        )
        self.session.add(member)
        try:
            self.session.flush()
        except IntegrityError:
            raise ValidationError(f"Member with email '{email}' already exists")
        return member

    def delete(self, member_id: int) -> bool:
        result = self.session.query(Member).filter(Member.id == member_id).delete(synchronize_session=False)
        return result > 0

    def get_librarian(self, librarian_id: int) -> Optional[Librarian]:
        return self.session.query(Librarian).filter(Librarian.id == librarian_id).first()

    def create_librarian(self, first_name: str, last_name: str, email: str) -> Librarian:
        """Create a new librarian.

        Raises:
            ValidationError: If a librarian with the given email already exists
        """
        existing = self.session.query(Librarian).filter(Librarian.email == email).first()
        if existing:
            raise ValidationError(f"Librarian with email '{email}' already exists")

        librarian = Librarian(first_name=first_name, last_name=last_name, email=email)
        self.session.add(librarian)
        self.session.flush()
        return librarian


class CartRepository:
    """Member wishlists. Entries never touch inventory."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, member_id: int, book_id: int) -> CartEntry:
        entry = CartEntry(member_id=member_id, book_id=book_id)
        self.session.add(entry)
        self.session.flush()
        return entry

    def remove(self, member_id: int, book_id: int) -> int:
        """Remove a book from a member's cart. Missing entries are not an error."""
        return self.session.query(CartEntry).filter(
            CartEntry.member_id == member_id,
            CartEntry.book_id == book_id
        ).delete(synchronize_session=False)

    def get_for_member(self, member_id: int) -> List[CartEntry]:
        return (
            self.session.query(CartEntry)
            .filter(CartEntry.member_id == member_id)
            .order_by(CartEntry.added_at, CartEntry.id)
            .all()
        )

    def delete_for_book(self, book_id: int) -> int:
        return self.session.query(CartEntry).filter(
            CartEntry.book_id == book_id
        ).delete(synchronize_session=False)

    def delete_for_member(self, member_id: int) -> int:
        return self.session.query(CartEntry).filter(
            CartEntry.member_id == member_id
        ).delete(synchronize_session=False)
