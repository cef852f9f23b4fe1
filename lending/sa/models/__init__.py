from .base import Base, TimestampMixin, PersonNameMixin, UTCDateTime, utcnow
from .author import Author
from .category import Category
from .book import Book, BookAuthor, BookCategory
from .member import Member, Librarian, CartEntry
from .borrowing import Borrowing, BorrowingStatus
from .audit import AuditLogEntry, AuditAction

__all__ = [
    'Base',
    'TimestampMixin',
    'PersonNameMixin',
    'UTCDateTime',
    'utcnow',
    'Book',
    'BookAuthor',
    'BookCategory',
    'Author',
    'Category',
    'Member',
    'Librarian',
    'CartEntry',
    'Borrowing',
    'BorrowingStatus',
    'AuditLogEntry',
    'AuditAction'
]
