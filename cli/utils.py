import click
import functools
import logging
from typing import Optional

from lending.exceptions import LendingError
from lending.sa.models import Borrowing

logger = logging.getLogger(__name__)


def handle_errors(func):
    """Print lending errors as 'Kind: message' in red and exit with status 1"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except LendingError as e:
            logger.debug(f"Command failed: {e}")
            click.echo(click.style(str(e), fg='red'), err=True)
            click.get_current_context().exit(1)
    return wrapper


def print_success(message: str) -> None:
    click.echo(click.style(message, fg='green'))


def print_field(label: str, value, color: str = 'cyan') -> None:
    click.echo(click.style(f"{label}: ", fg='blue') + click.style(str(value), fg=color))


def format_borrowing(borrowing: Borrowing, now=None) -> str:
    """One-line summary of a loan with its derived status"""
    status = borrowing.current_status(now)
    color = {'borrowed': 'cyan', 'overdue': 'red', 'returned': 'green'}[status.value]
    return (
        click.style(f"#{borrowing.id}", fg='blue') +
        f" member {borrowing.member_id} book {borrowing.book_id} "
        f"due {borrowing.due_date:%Y-%m-%d} " +
        click.style(status.value, fg=color)
    )


def optional_int(value: Optional[int]) -> str:
    return '-' if value is None else str(value)
