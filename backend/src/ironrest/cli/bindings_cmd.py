"""Bindings CLI commands: validate and list."""

from pathlib import Path

import click

from ironrest.bindings import BindingsError, BindingsLoader
from ironrest.hooks import import_hook_modules
from ironrest.types import Action, HookPoint

_hooks_option = click.option(
    "--hooks",
    "hook_modules",
    default=None,
    help="Comma-separated modules to import so their hooks are registered.",
)


def _load(path: Path, hook_modules: str | None):
    try:
        import_hook_modules(hook_modules)
    except ImportError as e:
        click.echo(click.style(f"Cannot import hook module: {e}", fg="red"), err=True)
        raise SystemExit(1)

    try:
        return BindingsLoader(path).load()
    except BindingsError as e:
        click.echo(click.style(str(e), fg="red"), err=True)
        raise SystemExit(1)


def _describe_permission(value) -> str:
    if callable(value):
        return getattr(value, "__name__", "predicate")
    return "yes" if value is True else "no"


@click.group()
def bindings():
    """Bindings file commands."""
    pass


@bindings.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_hooks_option
def validate(path: Path, hook_modules: str | None):
    """Check that a bindings file loads and all hook names resolve."""
    definitions = _load(path, hook_modules)
    click.echo(f"Loaded {len(definitions)} collection(s):")
    for definition in definitions:
        click.echo(f"  ✓ {definition.name} -> {definition.collection}")
    click.echo(click.style("\nBindings are valid.", fg="green", bold=True))


@bindings.command("list")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_hooks_option
def list_cmd(path: Path, hook_modules: str | None):
    """Show permissions and hooks of each binding."""
    definitions = _load(path, hook_modules)
    if not definitions:
        click.echo("No collections defined.")
        return

    for definition in definitions:
        config = definition.config
        click.echo(click.style(definition.name, bold=True) + f" (store: {definition.collection})")
        perms = ", ".join(
            f"{action.value}={_describe_permission(config.permission(action))}"
            for action in Action
        )
        click.echo(f"  permissions: {perms}")
        hooks = [point.value for point in HookPoint if config.hook(point) is not None]
        click.echo(f"  hooks: {', '.join(hooks) if hooks else '-'}")
        if config.collection_filters:
            click.echo(f"  filters: {config.collection_filters}")
        if config.check_document_permissions:
            click.echo("  document-scope permission checks: on")
