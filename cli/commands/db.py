import click
from lending.engine import LendingEngine
from ..utils import print_success


@click.group()
def db():
    """Database management commands"""
    pass


@db.command()
@click.pass_obj
def init(engine: LendingEngine):
    """Create all tables if they don't exist"""
    engine.database.init_db()
    print_success("Database initialized")
