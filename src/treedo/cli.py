"""
Command Line Interface for treedo.

``td`` with no arguments opens the interactive UI; ``td -a "text"`` adds a
single task without it.
"""

import sys

import click
from pydantic import ValidationError

from .art import ArtGallery
from .config import AppConfig
from .data import YAMLStore
from .engine import Engine
from .inline import describe, parse_task_input
from .logs import get_logger, setup_logging
from .recovery import FatalError, RecoverableError
from .version import version_banner

log = get_logger("cli")


def _load_config() -> AppConfig:
    try:
        return AppConfig.from_env()
    except ValidationError as e:
        click.echo(f"❌ Invalid configuration: {e}", err=True)
        sys.exit(1)


def _open_store(config: AppConfig) -> YAMLStore:
    try:
        return YAMLStore.open(config.store_path)
    except FatalError as e:
        log.critical(f"Store unavailable: {e}")
        click.echo(f"❌ Failed to open store: {e}", err=True)
        sys.exit(1)


def add_task(store: YAMLStore, text: str) -> str:
    """Add one task to the first workspace, creating ``Default`` if there is none.

    Returns:
        The ``Added: ...`` summary line

    Raises:
        click.UsageError: the text has no title once tags, dates and priority are removed
        RecoverableError: the store rejected the write
    """
    parsed = parse_task_input(text)
    if not parsed.title:
        raise click.UsageError("task title is empty")

    workspaces = store.list_workspaces()
    if workspaces:
        workspace_id = workspaces[0].id
    else:
        workspace_id = store.create_workspace("Default")
        log.info("Created Default workspace for command-line add")

    store.create_task(workspace_id, parsed.title, tags=parsed.tags,
                      due_date=parsed.due_date, priority=parsed.priority)
    return describe(parsed)


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.version_option(version_banner(), '--version', message='%(version)s')
@click.option('-a', '--add', 'add_text', metavar='TEXT',
              help='Add a task: "title #tag @date !priority"')
def main(add_text):
    """
    td - a keyboard-driven terminal task tree.

    Run without options to open the interactive view.
    """
    config = _load_config()
    store = _open_store(config)

    if add_text is not None:
        setup_logging(console=True)
        try:
            click.echo(add_task(store, add_text))
        except click.UsageError as e:
            click.echo(f"❌ {e.message}", err=True)
            sys.exit(1)
        except RecoverableError as e:
            log.error(f"Command-line add failed: {e}")
            click.echo(f"❌ Failed to add task: {e}", err=True)
            sys.exit(1)
        return

    # Deferred so that `td -a` never pays for the UI stack.
    from .tui import run_app

    engine = Engine(store, config, ArtGallery.load(config.ascii_dir))
    try:
        engine.start()
        code = run_app(engine)
    except FatalError as e:
        log.critical(f"Interactive session aborted: {e}")
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)
    if code:
        click.echo("❌ The interactive view exited with an error", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
