import click
from typing import Optional, Tuple
from lending.engine import LendingEngine
from ..utils import handle_errors, print_success, print_field, optional_int


@click.group()
def book():
    """Book catalog and inventory commands"""
    pass


@book.command()
@click.option('--title', required=True, help='Book title')
@click.option('--year', type=int, default=None, help='Publication year')
@click.option('--isbn', default=None, help='ISBN (must be unique)')
@click.option('--copies', type=int, default=0, show_default=True, help='Copies provisioned on creation')
@click.option('--author', 'author_ids', type=int, multiple=True, required=True, help='Author ID (repeatable)')
@click.option('--category', 'category_ids', type=int, multiple=True, help='Category ID (repeatable)')
@click.option('--actor', type=int, default=None, help='Librarian ID recorded in the audit log')
@click.pass_obj
@handle_errors
def add(engine: LendingEngine, title: str, year: Optional[int], isbn: Optional[str], copies: int,
        author_ids: Tuple[int, ...], category_ids: Tuple[int, ...], actor: Optional[int]):
    """Add a book with its authors and categories

    Example:
        cli book add --title 1984 --year 1949 --copies 5 --author 1 --category 1 --category 5
    """
    created = engine.catalog.create_book(title, year, isbn, copies, list(author_ids), list(category_ids), actor=actor)
    print_success(f"Created book {created.id}: {created.title} ({created.copies_available} copies)")


@book.command()
@click.argument('book_id', type=int)
@click.option('--title', default=None, help='New title')
@click.option('--year', type=int, default=None, help='New publication year')
@click.option('--isbn', default=None, help='New ISBN')
@click.option('--author', 'author_ids', type=int, multiple=True, required=True,
              help='Author ID (repeatable); replaces the current author list')
@click.option('--category', 'category_ids', type=int, multiple=True,
              help='Category ID (repeatable); replaces the current category list')
@click.option('--actor', type=int, default=None, help='Librarian ID recorded in the audit log')
@click.pass_obj
@handle_errors
def edit(engine: LendingEngine, book_id: int, title: Optional[str], year: Optional[int], isbn: Optional[str],
         author_ids: Tuple[int, ...], category_ids: Tuple[int, ...], actor: Optional[int]):
    """Edit book details; author and category lists are replaced wholesale"""
    fields = {}
    if title is not None:
        fields['title'] = title
    if year is not None:
        fields['publication_year'] = year
    if isbn is not None:
        fields['isbn'] = isbn
    updated = engine.catalog.update_book(book_id, list(author_ids), list(category_ids), actor=actor, **fields)
    print_success(f"Updated book {updated.id}: {updated.title}")


@book.command()
@click.argument('book_id', type=int)
@click.argument('count', type=click.IntRange(min=1))
@click.option('--withdraw', is_flag=True, default=False, help='Remove copies instead of adding them')
@click.option('--actor', type=int, default=None, help='Librarian ID recorded in the audit log')
@click.pass_obj
@handle_errors
def restock(engine: LendingEngine, book_id: int, count: int, withdraw: bool, actor: Optional[int]):
    """Provision COUNT more copies of a book (or withdraw them)"""
    delta = -count if withdraw else count
    available = engine.inventory.restock(book_id, delta, actor=actor)
    print_success(f"Book {book_id} now has {available} copies available")


@book.command()
@click.argument('book_id', type=int)
@click.pass_obj
@handle_errors
def show(engine: LendingEngine, book_id: int):
    """Show a book with its availability and link sets"""
    view = engine.catalog.book_view(book_id)
    click.echo("\n" + click.style(view.title, fg='blue', bold=True))
    print_field("ID", view.book_id)
    print_field("ISBN", view.isbn or '-')
    print_field("Year", optional_int(view.publication_year))
    print_field("Available", view.copies_available, 'green' if view.copies_available else 'red')
    print_field("Times borrowed", view.times_borrowed)
    print_field("Authors", ', '.join(view.authors) or '-')
    print_field("Categories", ', '.join(view.categories) or '-')


@book.command()
@click.argument('book_id', type=int)
@click.option('--actor', type=int, default=None, help='Librarian ID recorded in the audit log')
@click.confirmation_option(prompt='This removes the book with its loans, cart entries and links. Continue?')
@click.pass_obj
@handle_errors
def delete(engine: LendingEngine, book_id: int, actor: Optional[int]):
    """Delete a book and everything that references it"""
    ack = engine.cascade.delete_book(book_id, actor=actor)
    print_success(ack.message)
