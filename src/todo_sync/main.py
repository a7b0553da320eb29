"""CLI entrypoint for todo-sync."""

import logging
from collections.abc import Callable
from pathlib import Path

import rich_click as click

from todo_sync import __version__
from todo_sync.controllers import (
    CreateOrUpdateCommand,
    ListsCommand,
    TasksCommand,
    TodoCliController,
)
from todo_sync.models import OutputFormat
from todo_sync.service.base import ServiceError
from todo_sync.sync import SyncError

click.rich_click.USE_MARKDOWN = True
CONTROLLER = TodoCliController()

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="JSON config file with username, password and email. Defaults to ./config.json.",
)
_format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice([item.value for item in OutputFormat], case_sensitive=False),
    default=OutputFormat.CONSOLE.value,
    show_default=True,
    help="Render results as console lines or markdown checklist items.",
)


@click.group()
@click.version_option(version=__version__, prog_name="todo-sync")
@click.option(
    "--verbose/--quiet",
    default=False,
    show_default=True,
    help="Log sync decisions to stderr.",
)
def todo_sync(verbose: bool) -> None:
    """Manipulate Exchange tasks and task lists."""

    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


@todo_sync.command("lists")
@_config_option
@_format_option
@click.option(
    "--show-ids/--no-show-ids",
    default=False,
    show_default=True,
    help="Print each list id next to its name.",
)
def lists(config_path: Path | None, output_format: str, show_ids: bool) -> None:
    """Show all task lists."""

    _emit_lines(
        _run(
            lambda: CONTROLLER.lists(
                ListsCommand(
                    config_path=config_path,
                    output_format=OutputFormat(output_format.lower()),
                    show_ids=show_ids,
                ),
            ),
        ),
    )


@todo_sync.command("tasks")
@_config_option
@_format_option
@click.option(
    "--list",
    "list_ref",
    required=True,
    help="List id or part of its name. Empty string selects the main Tasks folder.",
)
def tasks(config_path: Path | None, output_format: str, list_ref: str) -> None:
    """Show all tasks in a list."""

    _emit_lines(
        _run(
            lambda: CONTROLLER.tasks(
                TasksCommand(
                    config_path=config_path,
                    output_format=OutputFormat(output_format.lower()),
                    list_ref=list_ref,
                ),
            ),
        ),
    )


@todo_sync.command("create-or-update")
@_config_option
@_format_option
@click.option(
    "--list",
    "list_ref",
    required=True,
    help="List id or part of its name. Falls back to the main Tasks folder when nothing matches.",
)
@click.option("--name", required=True, help="Task subject.")
@click.option(
    "--key",
    default=None,
    help=(
        "Part of the task name used to find the task to update. "
        "Without it an existing incomplete task with the same name is reported as duplicate."
    ),
)
@click.option("--body", default=None, help="Task body text.")
@click.option(
    "--important/--not-important",
    default=None,
    help="Set task importance. Left unchanged on update when omitted.",
)
@click.option(
    "--complete/--incomplete",
    default=None,
    help="Set task completion. Left unchanged on update when omitted.",
)
def create_or_update(  # noqa: PLR0913
    config_path: Path | None,
    output_format: str,
    list_ref: str,
    name: str,
    key: str | None,
    body: str | None,
    important: bool | None,
    complete: bool | None,
) -> None:
    """Create a task, or update the task matching --key."""

    _emit_lines(
        _run(
            lambda: CONTROLLER.create_or_update(
                CreateOrUpdateCommand(
                    config_path=config_path,
                    output_format=OutputFormat(output_format.lower()),
                    list_ref=list_ref,
                    name=name,
                    key=key or None,
                    body=body,
                    important=important,
                    complete=complete,
                ),
            ),
        ),
    )


def _run(action: Callable[[], list[str]]) -> list[str]:
    try:
        return action()
    except (SyncError, ServiceError, ValueError) as error:
        raise click.ClickException(str(error)) from error


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    todo_sync()
