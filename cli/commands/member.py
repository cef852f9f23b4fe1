import click
from typing import Optional
from lending.engine import LendingEngine
from ..utils import handle_errors, print_success


@click.group()
def member():
    """Member management commands"""
    pass


@member.command()
@click.option('--first-name', required=True)
@click.option('--last-name', required=True)
@click.option('--email', required=True)
@click.option('--phone', default=None)
@click.option('--address', default=None)
@click.pass_obj
@handle_errors
def add(engine: LendingEngine, first_name: str, last_name: str, email: str,
        phone: Optional[str], address: Optional[str]):
    """Register a library member"""
    created = engine.catalog.create_member(first_name, last_name, email, phone, address)
    print_success(f"Member {created.full_name} registered with ID {created.id}")


@member.command(name='add-librarian')
@click.option('--first-name', required=True)
@click.option('--last-name', required=True)
@click.option('--email', required=True)
@click.pass_obj
@handle_errors
def add_librarian(engine: LendingEngine, first_name: str, last_name: str, email: str):
    """Register a librarian"""
    created = engine.catalog.create_librarian(first_name, last_name, email)
    print_success(f"Librarian {created.full_name} registered with ID {created.id}")


@member.command()
@click.argument('member_id', type=int)
@click.option('--actor', type=int, default=None, help='Librarian ID recorded in the audit log')
@click.confirmation_option(prompt='This removes the member with their loans and cart. Continue?')
@click.pass_obj
@handle_errors
def delete(engine: LendingEngine, member_id: int, actor: Optional[int]):
    """Delete a member; copies on active loans go back to the shelf"""
    ack = engine.cascade.delete_member(member_id, actor=actor)
    print_success(ack.message)
