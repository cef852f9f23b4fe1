import click
from typing import Optional
from lending.engine import LendingEngine
from ..utils import handle_errors, print_success, format_borrowing


@click.group()
def loan():
    """Borrow and return commands"""
    pass


@loan.command()
@click.argument('member_id', type=int)
@click.argument('book_id', type=int)
@click.pass_obj
@handle_errors
def borrow(engine: LendingEngine, member_id: int, book_id: int):
    """Lend one copy of BOOK_ID to MEMBER_ID for the loan period"""
    borrowing = engine.ledger.borrow(member_id, book_id)
    print_success(f"Borrowing {borrowing.id} created, due {borrowing.due_date:%Y-%m-%d}")


@loan.command(name='return')
@click.argument('borrowing_id', type=int)
@click.option('--librarian', 'librarian_id', type=int, default=None, help='Librarian processing the return')
@click.pass_obj
@handle_errors
def return_(engine: LendingEngine, borrowing_id: int, librarian_id: Optional[int]):
    """Return the copy held on BORROWING_ID"""
    borrowing = engine.ledger.return_book(borrowing_id, librarian_id=librarian_id)
    print_success(f"Borrowing {borrowing.id} returned")


@loan.command(name='member')
@click.argument('member_id', type=int)
@click.pass_obj
@handle_errors
def member_loans(engine: LendingEngine, member_id: int):
    """List a member's unreturned loans"""
    loans = engine.ledger.member_active_loans(member_id)
    if not loans:
        click.echo(f"\nMember {member_id} has no active loans.")
        return
    click.echo(f"\nActive loans for member {member_id}:")
    for borrowing in loans:
        click.echo(" - " + format_borrowing(borrowing))


@loan.command()
@click.pass_obj
@handle_errors
def overdue(engine: LendingEngine):
    """List every active loan past its due date"""
    loans = engine.ledger.overdue_loans()
    if not loans:
        click.echo("\nNo overdue loans.")
        return
    click.echo(click.style(f"\n{len(loans)} overdue loans:", fg='red'))
    for borrowing in loans:
        click.echo(" - " + format_borrowing(borrowing))
