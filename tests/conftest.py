import os
import sys
import pytest
from pathlib import Path
from sqlalchemy import select, func

# Add project root to Python path
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from lending.engine import LendingEngine
from lending.sa.database import Database
from lending.sa.models import (
    Base, Book, Author, Category, Member, Librarian,
    BookAuthor, BookCategory, Borrowing
)


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory):
    """Create a temporary directory for the test database."""
    test_dir = tmp_path_factory.mktemp("test_db")
    return str(test_dir / "test_library.db")


@pytest.fixture(scope="session")
def database(test_db_path):
    """Create a test database instance backed by a SQLite file"""
    db = Database(f"sqlite:///{test_db_path}")

    # Drop all tables and recreate schema
    Base.metadata.drop_all(db.engine)
    Base.metadata.create_all(db.engine)

    yield db

    db.dispose()
    try:
        os.remove(test_db_path)
    except OSError:
        pass  # Ignore errors if file doesn't exist


@pytest.fixture(autouse=True)
def cleanup_db(database):
    """Clean up database tables before each test"""
    # Children before parents so foreign keys hold
    with database.engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


@pytest.fixture(scope="function")
def db_session(database):
    """Create a new database session for a test"""
    session = database.get_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def engine(database):
    """Fully wired services over the test database"""
    return LendingEngine(database)


@pytest.fixture
def copies_of(db_session):
    """Read a book's stored counter straight from the table"""
    def _copies_of(book_id: int):
        return db_session.scalar(select(Book.copies_available).where(Book.id == book_id))
    return _copies_of


@pytest.fixture
def active_loans_of(db_session):
    """Count unreturned loans of a book straight from the table"""
    def _active_loans_of(book_id: int) -> int:
        return db_session.scalar(
            select(func.count(Borrowing.id)).where(
                Borrowing.book_id == book_id, Borrowing.returned_at.is_(None)
            )
        )
    return _active_loans_of


@pytest.fixture
def sample_author(db_session):
    """Create a sample author for testing."""
    author = Author(first_name="George", last_name="Orwell")
    db_session.add(author)
    db_session.commit()
    return author


@pytest.fixture
def second_author(db_session):
    author = Author(first_name="Aldous", last_name="Huxley")
    db_session.add(author)
    db_session.commit()
    return author


@pytest.fixture
def sample_category(db_session):
    """Create a sample category for testing."""
    category = Category(name="Fiction")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture
def second_category(db_session):
    category = Category(name="Dystopia")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture
def sample_member(db_session):
    """Create a sample member for testing."""
    member = Member(first_name="Ada", last_name="Lovelace", email="ada@example.com")
    db_session.add(member)
    db_session.commit()
    return member


@pytest.fixture
def second_member(db_session):
    member = Member(first_name="Alan", last_name="Turing", email="alan@example.com")
    db_session.add(member)
    db_session.commit()
    return member


@pytest.fixture
def sample_librarian(db_session):
    librarian = Librarian(first_name="Melvil", last_name="Dewey", email="melvil@example.com")
    db_session.add(librarian)
    db_session.commit()
    return librarian


@pytest.fixture
def make_book(db_session):
    """Factory for books with a given number of provisioned copies"""
    def _make_book(title: str = "Test Book", copies: int = 1, isbn=None,
                   authors=(), categories=()) -> Book:
        book = Book(title=title, isbn=isbn, publication_year=1949, copies_available=copies)
        db_session.add(book)
        db_session.flush()
        for author in authors:
            db_session.add(BookAuthor(book_id=book.id, author_id=author.id))
        for category in categories:
            db_session.add(BookCategory(book_id=book.id, category_id=category.id))
        db_session.commit()
        return book
    return _make_book


@pytest.fixture
def sample_book(make_book, sample_author, sample_category):
    """Create a sample book with two copies, one author and one category."""
    return make_book(
        title="Nineteen Eighty-Four",
        copies=2,
        isbn="9780451524935",
        authors=[sample_author],
        categories=[sample_category]
    )


@pytest.fixture
def make_members(db_session):
    """Factory for n distinct members"""
    def _make_members(n: int):
        members = [
            Member(first_name=f"Member{i}", last_name="Test", email=f"member{i}@example.com")
            for i in range(n)
        ]
        db_session.add_all(members)
        db_session.commit()
        return members
    return _make_members
