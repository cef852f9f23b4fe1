import pytest
from lending.sa.models import Book, BookAuthor, BookCategory
from lending.sa.repositories import BookRepository, AuthorRepository, CategoryRepository


@pytest.fixture
def book_repo(db_session):
    """Fixture to create a BookRepository instance"""
    return BookRepository(db_session)


def test_get_by_id(book_repo, sample_book):
    """Test fetching a book by ID"""
    fetched = book_repo.get_by_id(sample_book.id)
    assert fetched is not None
    assert fetched.title == "Nineteen Eighty-Four"


def test_get_by_nonexistent_id(book_repo):
    assert book_repo.get_by_id(999999) is None


def test_get_by_isbn(book_repo, sample_book):
    assert book_repo.get_by_isbn("9780451524935").id == sample_book.id
    assert book_repo.get_by_isbn("0000000000") is None


def test_create_flushes_id(book_repo, db_session):
    book = book_repo.create("Brave New World", 1932, None, copies_available=0)
    assert book.id is not None
    db_session.commit()
    assert book_repo.get_copies_available(book.id) == 0


def test_replace_authors_is_wholesale(book_repo, db_session, sample_book, sample_author, second_author):
    """Test that the old link set is dropped, not merged"""
    book_repo.replace_authors(sample_book.id, [second_author.id])
    db_session.commit()
    assert book_repo.get_author_ids(sample_book.id) == [second_author.id]

    book_repo.replace_authors(sample_book.id, [sample_author.id, second_author.id])
    db_session.commit()
    assert book_repo.get_author_ids(sample_book.id) == sorted([sample_author.id, second_author.id])


def test_replace_categories_with_empty_list(book_repo, db_session, sample_book):
    book_repo.replace_categories(sample_book.id, [])
    db_session.commit()
    assert book_repo.get_category_ids(sample_book.id) == []


def test_delete_links(book_repo, db_session, sample_book):
    removed = book_repo.delete_links(sample_book.id)
    db_session.commit()
    assert removed == 2
    assert db_session.query(BookAuthor).filter_by(book_id=sample_book.id).count() == 0
    assert db_session.query(BookCategory).filter_by(book_id=sample_book.id).count() == 0


def test_delete_after_links_removed(book_repo, db_session, sample_book):
    book_repo.delete_links(sample_book.id)
    assert book_repo.delete(sample_book.id) is True
    db_session.commit()
    assert db_session.query(Book).filter_by(id=sample_book.id).count() == 0


def test_delete_nonexistent(book_repo):
    assert book_repo.delete(999999) is False


def test_lock_returns_id_or_none(book_repo, sample_book):
    assert book_repo.lock(sample_book.id) == sample_book.id
    assert book_repo.lock(999999) is None


def test_find_missing_author_and_category_ids(db_session, sample_author, sample_category):
    """Test validation lookups used by link-set replacement"""
    authors = AuthorRepository(db_session)
    categories = CategoryRepository(db_session)
    assert authors.find_missing_ids([sample_author.id]) == []
    assert authors.find_missing_ids([sample_author.id, 424242]) == [424242]
    assert authors.find_missing_ids([]) == []
    assert categories.find_missing_ids([sample_category.id, 777]) == [777]


def test_get_authors_and_categories_by_book(db_session, sample_book, sample_author, sample_category):
    assert [a.id for a in AuthorRepository(db_session).get_authors_by_book(sample_book.id)] == [sample_author.id]
    assert [c.name for c in CategoryRepository(db_session).get_categories_by_book(sample_book.id)] == ["Fiction"]
    assert AuthorRepository(db_session).get_authors_by_book(999999) == []
