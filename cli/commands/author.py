import click
from typing import Optional
from lending.engine import LendingEngine
from ..utils import handle_errors, print_success


@click.group()
def author():
    """Author management commands"""
    pass


@author.command()
@click.argument('first_name')
@click.argument('last_name')
@click.option('--actor', type=int, default=None, help='Librarian ID recorded in the audit log')
@click.pass_obj
@handle_errors
def add(engine: LendingEngine, first_name: str, last_name: str, actor: Optional[int]):
    """Add an author

    Example:
        cli author add George Orwell
    """
    created = engine.catalog.create_author(first_name, last_name, actor=actor)
    print_success(f"Author {created.full_name} added with ID {created.id}")


@author.command()
@click.argument('author_id', type=int)
@click.argument('first_name')
@click.argument('last_name')
@click.option('--actor', type=int, default=None, help='Librarian ID recorded in the audit log')
@click.pass_obj
@handle_errors
def edit(engine: LendingEngine, author_id: int, first_name: str, last_name: str, actor: Optional[int]):
    """Rename an author"""
    engine.catalog.update_author(author_id, first_name, last_name, actor=actor)
    print_success(f"Author ID {author_id} has been successfully updated")


@author.command()
@click.argument('author_id', type=int)
@click.option('--actor', type=int, default=None, help='Librarian ID recorded in the audit log')
@click.pass_obj
@handle_errors
def delete(engine: LendingEngine, author_id: int, actor: Optional[int]):
    """Delete an author and its book links"""
    ack = engine.cascade.delete_author(author_id, actor=actor)
    print_success(ack.message)
