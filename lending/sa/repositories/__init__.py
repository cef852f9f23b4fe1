from .book import BookRepository
from .author import AuthorRepository
from .category import CategoryRepository
from .member import MemberRepository, CartRepository
from .borrowing import BorrowingRepository

__all__ = [
    'BookRepository',
    'AuthorRepository',
    'CategoryRepository',
    'MemberRepository',
    'CartRepository',
    'BorrowingRepository'
]
