import pytest
from lending.exceptions import NotFound, InsufficientInventory, ValidationError
from lending.sa.models import Book, AuditLogEntry


def test_adjust_decrements_and_increments(engine, database, sample_book, copies_of):
    """Test that adjust applies the delta and returns the new counter"""
    with database.get_db() as session:
        assert engine.inventory.adjust(session, sample_book.id, -1) == 1
    assert copies_of(sample_book.id) == 1

    with database.get_db() as session:
        assert engine.inventory.adjust(session, sample_book.id, +3) == 4
    assert copies_of(sample_book.id) == 4


def test_adjust_refuses_to_go_negative(engine, database, make_book, copies_of):
    """Test that a failing adjustment leaves the counter untouched"""
    book = make_book(copies=1)
    with pytest.raises(InsufficientInventory) as exc_info:
        with database.get_db() as session:
            engine.inventory.adjust(session, book.id, -2)
    assert exc_info.value.kind == 'InsufficientInventory'
    assert copies_of(book.id) == 1


def test_adjust_at_zero(engine, database, make_book, copies_of):
    book = make_book(copies=0)
    with pytest.raises(InsufficientInventory):
        with database.get_db() as session:
            engine.inventory.adjust(session, book.id, -1)
    assert copies_of(book.id) == 0


def test_adjust_unknown_book(engine, database):
    with pytest.raises(NotFound):
        with database.get_db() as session:
            engine.inventory.adjust(session, 999999, -1)


@pytest.mark.parametrize("delta", [0, True, 1.5, "1"])
def test_adjust_rejects_bad_delta(engine, database, sample_book, delta, copies_of):
    with pytest.raises(ValidationError):
        with database.get_db() as session:
            engine.inventory.adjust(session, sample_book.id, delta)
    assert copies_of(sample_book.id) == 2


def test_adjust_keeps_loaded_book_in_step(engine, database, sample_book):
    """Test that a Book already in the session sees the new counter"""
    with database.get_db() as session:
        book = session.get(Book, sample_book.id)
        assert book.copies_available == 2
        engine.inventory.adjust(session, sample_book.id, -1)
        assert book.copies_available == 1


def test_adjust_rolls_back_with_enclosing_unit(engine, database, sample_book, copies_of):
    """Test that adjust has no effect when the caller's unit fails later"""
    with pytest.raises(RuntimeError):
        with database.get_db() as session:
            engine.inventory.adjust(session, sample_book.id, -1)
            raise RuntimeError("later step failed")
    assert copies_of(sample_book.id) == 2


def test_restock_and_withdraw(engine, sample_book, copies_of, db_session):
    """Test restock as its own unit of work, with an audit row"""
    assert engine.inventory.restock(sample_book.id, 3) == 5
    assert engine.inventory.restock(sample_book.id, -4) == 1
    assert copies_of(sample_book.id) == 1

    with pytest.raises(InsufficientInventory):
        engine.inventory.restock(sample_book.id, -2)
    assert engine.inventory.available(sample_book.id) == 1

    entries = db_session.query(AuditLogEntry).filter_by(table_name='book', record_id=sample_book.id).order_by(AuditLogEntry.id).all()
    assert [e.details['copies_delta'] for e in entries] == [3, -4]


def test_available_unknown_book(engine):
    with pytest.raises(NotFound):
        engine.inventory.available(999999)
