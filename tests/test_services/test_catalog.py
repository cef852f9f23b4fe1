import pytest
import logging
from unittest.mock import patch
from lending.exceptions import NotFound, InvalidReference, ValidationError
from lending.sa.models import Book, BookAuthor, BookCategory
from lending.sa.repositories import BookRepository


def test_create_book_with_links(engine, sample_author, sample_category, copies_of):
    """Test that a new book carries its counter and both link sets"""
    book = engine.catalog.create_book(
        title="Animal Farm",
        publication_year=1945,
        isbn="9780451526342",
        initial_copies=3,
        author_ids=[sample_author.id],
        category_ids=[sample_category.id]
    )

    assert book.id is not None
    assert book.copies_available == 3
    assert [a.id for a in book.authors] == [sample_author.id]
    assert [c.id for c in book.categories] == [sample_category.id]
    assert copies_of(book.id) == 3


def test_create_book_with_zero_copies_and_no_categories(engine, sample_author, copies_of):
    book = engine.catalog.create_book("Homage to Catalonia", None, None, 0, [sample_author.id], [])
    assert copies_of(book.id) == 0
    assert book.categories == []


def test_create_book_requires_an_author(engine, sample_category, db_session):
    with pytest.raises(ValidationError):
        engine.catalog.create_book("Orphan", 2000, None, 1, [], [sample_category.id])
    assert db_session.query(Book).count() == 0


def test_create_book_unknown_reference(engine, sample_author, db_session):
    """Test that an unknown link id creates nothing"""
    with pytest.raises(InvalidReference):
        engine.catalog.create_book("Ghost", 2000, None, 1, [sample_author.id], [424242])
    assert db_session.query(Book).count() == 0
    assert db_session.query(BookAuthor).count() == 0


def test_create_book_duplicate_isbn(engine, sample_book, sample_author):
    with pytest.raises(ValidationError):
        engine.catalog.create_book("Copycat", 2000, "9780451524935", 1, [sample_author.id], [])


@pytest.mark.parametrize("kwargs", [
    {'title': "  "},
    {'initial_copies': -1},
    {'publication_year': "1949"},
])
def test_create_book_rejects_bad_fields(engine, sample_author, kwargs):
    values = {'title': "Valid", 'publication_year': 1949, 'isbn': None, 'initial_copies': 1}
    values.update(kwargs)
    with pytest.raises(ValidationError):
        engine.catalog.create_book(author_ids=[sample_author.id], category_ids=[], **values)


def test_update_book_replaces_link_sets(engine, db_session, sample_book, second_author,
                                        sample_category, second_category, copies_of):
    """Test that an edit swaps fields and both link sets in one step"""
    book = engine.catalog.update_book(
        sample_book.id,
        author_ids=[second_author.id],
        category_ids=[second_category.id, sample_category.id],
        title="1984",
        publication_year=1950
    )

    assert book.title == "1984"
    assert book.publication_year == 1950
    assert book.isbn == "9780451524935"
    books = BookRepository(db_session)
    assert books.get_author_ids(sample_book.id) == [second_author.id]
    assert books.get_category_ids(sample_book.id) == sorted([sample_category.id, second_category.id])
    assert copies_of(sample_book.id) == 2


def test_update_book_invalid_reference_changes_nothing(engine, db_session, sample_book,
                                                       sample_author, sample_category):
    """Test that a bad category id leaves title and links as they were"""
    with pytest.raises(InvalidReference):
        engine.catalog.update_book(
            sample_book.id, author_ids=[sample_author.id], category_ids=[999999], title="Changed"
        )

    db_session.expire_all()
    book = db_session.get(Book, sample_book.id)
    assert book.title == "Nineteen Eighty-Four"
    assert BookRepository(db_session).get_category_ids(sample_book.id) == [sample_category.id]


def test_update_book_cannot_touch_copies(engine, sample_book, sample_author, copies_of):
    with pytest.raises(ValidationError, match="restock"):
        engine.catalog.update_book(sample_book.id, [sample_author.id], [], copies_available=10)
    assert copies_of(sample_book.id) == 2


def test_update_book_unknown_field(engine, sample_book, sample_author):
    with pytest.raises(ValidationError):
        engine.catalog.update_book(sample_book.id, [sample_author.id], [], pages=300)


def test_update_book_not_found(engine, sample_author):
    with pytest.raises(NotFound):
        engine.catalog.update_book(999999, [sample_author.id], [], title="Nope")


def test_update_book_isbn_taken(engine, sample_book, sample_author, make_book):
    other = make_book(title="Other", isbn="1111111111")
    with pytest.raises(ValidationError):
        engine.catalog.update_book(other.id, [sample_author.id], [], isbn="9780451524935")


def test_book_view(engine, sample_book, sample_member, sample_author, sample_category):
    """Test the read projection of a book"""
    borrowing = engine.ledger.borrow(sample_member.id, sample_book.id)
    engine.ledger.return_book(borrowing.id)
    engine.ledger.borrow(sample_member.id, sample_book.id)

    view = engine.catalog.book_view(sample_book.id)
    assert view.title == "Nineteen Eighty-Four"
    assert view.copies_available == 1
    assert view.times_borrowed == 2
    assert view.author_ids == [sample_author.id]
    assert view.authors == ["George Orwell"]
    assert view.categories == ["Fiction"]

    with pytest.raises(NotFound):
        engine.catalog.book_view(999999)


def test_author_create_and_update(engine):
    author = engine.catalog.create_author("Eric", "Blair")
    updated = engine.catalog.update_author(author.id, "George", "Orwell")
    assert updated.full_name == "George Orwell"

    with pytest.raises(NotFound):
        engine.catalog.update_author(999999, "No", "One")


def test_category_names_are_unique(engine, sample_category):
    with pytest.raises(ValidationError):
        engine.catalog.create_category("Fiction")

    other = engine.catalog.create_category("Satire")
    with pytest.raises(ValidationError):
        engine.catalog.update_category(other.id, "Fiction")
    assert engine.catalog.update_category(other.id, "Political Satire").name == "Political Satire"


def test_member_emails_are_unique(engine, sample_member):
    with pytest.raises(ValidationError):
        engine.catalog.create_member("Other", "Ada", "ada@example.com")

    member = engine.catalog.create_member("Grace", "Hopper", "grace@example.com", phone_number="555-0100")
    assert member.phone_number == "555-0100"


def test_cart_does_not_touch_inventory(engine, sample_member, sample_book, copies_of):
    """Test that cart entries are independent of the counter"""
    entry = engine.catalog.add_to_cart(sample_member.id, sample_book.id)
    assert entry.book_id == sample_book.id
    assert copies_of(sample_book.id) == 2

    assert engine.catalog.remove_from_cart(sample_member.id, sample_book.id) == 1
    assert engine.catalog.remove_from_cart(sample_member.id, sample_book.id) == 0

    with pytest.raises(NotFound):
        engine.catalog.add_to_cart(sample_member.id, 999999)


def test_update_book_failure_mid_edit_changes_nothing(engine, db_session, sample_book, second_author,
                                                      sample_author, sample_category):
    """Test that a failure after the fields and authors were written rolls them back"""
    with patch.object(BookRepository, 'replace_categories', side_effect=RuntimeError("lost connection")):
        with pytest.raises(RuntimeError):
            engine.catalog.update_book(
                sample_book.id, author_ids=[second_author.id], category_ids=[], title="Changed"
            )

    db_session.expire_all()
    assert db_session.get(Book, sample_book.id).title == "Nineteen Eighty-Four"
    books = BookRepository(db_session)
    assert books.get_author_ids(sample_book.id) == [sample_author.id]
    assert books.get_category_ids(sample_book.id) == [sample_category.id]


def test_oversized_ids_are_rejected(engine, sample_member, sample_book):
    with pytest.raises(ValidationError):
        engine.catalog.book_view(2**70)
    with pytest.raises(ValidationError):
        engine.catalog.remove_from_cart(sample_member.id, 2**63)
    with pytest.raises(ValidationError):
        engine.catalog.update_book(sample_book.id, [2**64], [])


def test_catalog_edits_are_logged(engine, sample_author, sample_category, caplog):
    with caplog.at_level(logging.INFO, logger='lending.services.catalog'):
        engine.catalog.update_author(sample_author.id, "Eric", "Blair")
        engine.catalog.update_category(sample_category.id, "Classics")
        engine.catalog.create_librarian("Melvil", "Dewey", "melvil@example.com")

    messages = [r.getMessage() for r in caplog.records if r.name == 'lending.services.catalog']
    assert f"Updated author {sample_author.id} to Eric Blair" in messages
    assert f"Renamed category {sample_category.id} to 'Classics'" in messages
    assert any(m.startswith("Created librarian") for m in messages)


def test_get_book_loads_links(engine, sample_book, sample_author):
    book = engine.catalog.get_book(sample_book.id)
    assert [a.full_name for a in book.authors] == ["George Orwell"]
    assert [c.name for c in book.categories] == ["Fiction"]

    with pytest.raises(NotFound):
        engine.catalog.get_book(999999)
