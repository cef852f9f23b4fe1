from .database import Database
from .models import (
    Base, Book, Author, Category, Member, Librarian,
    BookAuthor, BookCategory, CartEntry, Borrowing,
    BorrowingStatus, AuditLogEntry, AuditAction
)

__all__ = [
    'Database',
    'Base',
    'Book',
    'Author',
    'Category',
    'Member',
    'Librarian',
    'BookAuthor',
    'BookCategory',
    'CartEntry',
    'Borrowing',
    'BorrowingStatus',
    'AuditLogEntry',
    'AuditAction'
]
