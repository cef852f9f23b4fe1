import click
import logging
from lending.config import Config
from lending.engine import LendingEngine
from lending.sa.database import Database
from .commands.db import db
from .commands.book import book
from .commands.author import author
from .commands.category import category
from .commands.member import member
from .commands.loan import loan


@click.group()
@click.option('--database-url', envvar='LENDING_DATABASE_URL', default=None,
              help='SQLAlchemy database URL (default: sqlite:///library.db)')
@click.option('--verbose/--no-verbose', default=False, help='Log debug output')
@click.pass_context
def cli(ctx: click.Context, database_url: str, verbose: bool):
    """Library lending CLI"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else Config.LOG_LEVEL,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )
    if ctx.obj is None:
        ctx.obj = LendingEngine(Database(database_url))


cli.add_command(db)
cli.add_command(book)
cli.add_command(author)
cli.add_command(category)
cli.add_command(member)
cli.add_command(loan)


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
