import click
from typing import Optional
from lending.engine import LendingEngine
from ..utils import handle_errors, print_success


@click.group()
def category():
    """Category management commands"""
    pass


@category.command()
@click.argument('name')
@click.option('--actor', type=int, default=None, help='Librarian ID recorded in the audit log')
@click.pass_obj
@handle_errors
def add(engine: LendingEngine, name: str, actor: Optional[int]):
    """Add a category"""
    created = engine.catalog.create_category(name, actor=actor)
    print_success(f"Category '{created.name}' added with ID {created.id}")


@category.command()
@click.argument('category_id', type=int)
@click.argument('name')
@click.option('--actor', type=int, default=None, help='Librarian ID recorded in the audit log')
@click.pass_obj
@handle_errors
def edit(engine: LendingEngine, category_id: int, name: str, actor: Optional[int]):
    """Rename a category"""
    engine.catalog.update_category(category_id, name, actor=actor)
    print_success(f"Category ID {category_id} has been successfully updated")


@category.command()
@click.argument('category_id', type=int)
@click.option('--actor', type=int, default=None, help='Librarian ID recorded in the audit log')
@click.pass_obj
@handle_errors
def delete(engine: LendingEngine, category_id: int, actor: Optional[int]):
    """Delete a category and its book links"""
    ack = engine.cascade.delete_category(category_id, actor=actor)
    print_success(ack.message)
