"""Click building blocks shared by the dbmeta commands.

``DbmCommand`` / ``DbmGroup`` take an ``examples`` text shown by an eager
``--examples`` flag, keeping ``--help`` short. The option decorators
below are reused wherever commands take the same argument.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import click

_F = TypeVar("_F", bound=Callable[..., Any])


def _examples_option(examples: str) -> click.Option:
    def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if value:
            click.echo(f"Examples for '{ctx.command_path}':\n\n{examples}")
            ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=show,
        help="Show usage examples.",
    )


class DbmCommand(click.Command):
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option(examples))


class DbmGroup(click.Group):
    """Group whose subcommands are :class:`DbmCommand` unless told otherwise."""

    command_class = DbmCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option(examples))


def connection_option(role: str) -> Callable[[_F], _F]:
    """``--connection-string``; falls back to ``[connection] url`` when omitted."""
    return click.option(
        "--connection-string",
        default=None,
        help=f"SQLAlchemy URL of the {role} database (default: [connection] url).",
    )


def directory_option(name: str, help_text: str) -> Callable[[_F], _F]:
    return click.option(name, required=True, type=click.Path(file_okay=False), help=help_text)


scripts_dir_option = directory_option(
    "--scripts-dir", "Directory containing the .sql script to apply."
)
