"""Command line interface for treesync."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any, Callable, NoReturn

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.tree import Tree

from treesync import paths
from treesync.config import ConfigError, ConfigManager, TreesyncConfig, resolve_with_precedence
from treesync.errors import ReconciliationCancelled, ReconciliationError, StoreUpdateError
from treesync.hierarchy import Node
from treesync.logs import configure_logging
from treesync.mutation import MutationResult
from treesync.service import HierarchySession
from treesync.state import CatalogRecordStore, StateRepository

console = Console()

ROOT_LABEL = "Root folder"


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> NoReturn:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool) -> None:
    """Print CLI output unless quiet mode suppresses it.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, or `warning`).
        quiet: Whether quiet mode is active.
    """

    if quiet and mode == "detail":
        return
    console.print(message)


def _relative_argument(value: str) -> str:
    """Translate a folder argument into a relative path; `.` and `/` mean the root."""
    if value.strip() in {"", ".", "/", "\\"}:
        return ""
    return paths.normalize(value)


def _node_label(node: Node) -> str:
    label = escape(node.name) if node.name else ROOT_LABEL
    if node.has_data:
        label = f"[bold]{label}[/bold] [cyan](data)[/cyan]"
    if not node.folder_exists:
        label = f"[dim]{label} (missing)[/dim]"
    return label


def _render_tree(root: Node, *, show_missing: bool) -> Tree:
    """Convert a folder tree into a Rich tree renderable.

    Args:
        root: Root node of the folder tree.
        show_missing: Whether folders absent from disk are rendered.

    Returns:
        Tree: Renderable mirroring the folder hierarchy.
    """

    rendered = Tree(_node_label(root))

    def _attach(parent: Tree, node: Node) -> None:
        for child in node.children.values():
            if not show_missing and not child.folder_exists and not child.has_data:
                continue
            _attach(parent.add(_node_label(child)), child)

    _attach(rendered, root)
    return rendered


def _load_config(root: Path, *, json_output: bool) -> TreesyncConfig:
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        return manager.load(collection_dir=StateRepository().state_dir(root))
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)


def _open_session(root: str, *, json_output: bool) -> HierarchySession:
    """Load configuration, configure logging, and reconcile the collection root.

    Args:
        root: Collection root given on the command line.
        json_output: Indicates whether JSON mode is active.

    Returns:
        HierarchySession: Loaded session for the root.
    """

    root_path = Path(root).expanduser().resolve()
    config = _load_config(root_path, json_output=json_output)
    configure_logging(config.logging, StateRepository().state_dir(root_path))

    session = HierarchySession(root_path, config)
    try:
        session.load()
    except ReconciliationCancelled as exc:
        _handle_cli_error(str(exc), code="reconciliation_cancelled", json_output=json_output, original=exc)
    except ReconciliationError as exc:
        _handle_cli_error(str(exc), code="reconciliation_failed", json_output=json_output, original=exc)
    return session


def _run_mutation(
    root: str,
    action: Callable[[HierarchySession], MutationResult],
    *,
    json_output: bool,
    quiet: bool,
) -> None:
    """Apply a mutation to a freshly loaded collection and report the outcome."""

    session = _open_session(root, json_output=json_output)
    result = action(session)
    quiet = quiet or session.config.cli.quiet_default
    tree = session.engine.tree or session.engine.rebuild()
    show_missing = session.config.cli.show_missing

    if json_output:
        payload: dict[str, Any] = {
            "result": result.model_dump(mode="json"),
            "tree": tree.to_dict(),
        }
        if not result.ok:
            payload["error"] = {"code": result.outcome.value, "message": result.message}
        console.print_json(data=payload)
        if not result.ok:
            raise SystemExit(1)
        return

    if result.diverged:
        _emit_message(
            f"[yellow]{escape(result.message)}[/yellow]", mode="warning", quiet=quiet
        )
        _emit_message(_render_tree(tree, show_missing=show_missing), mode="detail", quiet=quiet)
        raise click.ClickException(f"{result.kind} finished with {result.outcome.value}.")
    if not result.ok:
        _handle_cli_error(result.message, code=result.outcome.value, json_output=False)

    _emit_message(f"[green]{escape(result.message)}[/green]", mode="summary", quiet=quiet)
    _emit_message(_render_tree(tree, show_missing=show_missing), mode="detail", quiet=quiet)


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a nested value within a dictionary for a dotted path.

    Raises:
        ConfigError: If a non-mapping value is encountered along the path.
    """

    node = target
    for segment in path[:-1]:
        existing = node.setdefault(segment, {})
        if not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


json_option = click.option("--json", "json_output", is_flag=True, help="Emit JSON output.")
quiet_option = click.option("--quiet", is_flag=True, help="Suppress the rendered tree.")
root_argument = click.argument(
    "root", type=click.Path(exists=True, file_okay=False, path_type=str)
)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="treesync")
def cli() -> None:
    """treesync keeps a folder hierarchy, its disk layout, and its catalog in step."""


@cli.command()
@root_argument
@json_option
def tree(root: str, json_output: bool) -> None:
    """Reconcile ROOT and display its folder hierarchy."""
    session = _open_session(root, json_output=json_output)
    built = session.engine.tree or session.engine.rebuild()
    if json_output:
        console.print_json(data=built.to_dict())
        return
    console.print(_render_tree(built, show_missing=session.config.cli.show_missing))


@cli.command()
@root_argument
@click.argument("target")
@click.argument("new_name")
@json_option
@quiet_option
def rename(root: str, target: str, new_name: str, json_output: bool, quiet: bool) -> None:
    """Rename the folder TARGET (relative to ROOT) to NEW_NAME."""
    relative = _relative_argument(target)
    _run_mutation(
        root,
        lambda session: session.engine.rename(relative, new_name),
        json_output=json_output,
        quiet=quiet,
    )


@cli.command()
@root_argument
@click.argument("source")
@click.argument("destination")
@click.option("--name", type=str, help="Folder name to use at the destination.")
@json_option
@quiet_option
def mv(
    root: str,
    source: str,
    destination: str,
    name: str | None,
    json_output: bool,
    quiet: bool,
) -> None:
    """Move the folder SOURCE into the folder DESTINATION."""
    relative_source = _relative_argument(source)
    relative_destination = _relative_argument(destination)
    source_name = name or paths.name_of(relative_source)
    _run_mutation(
        root,
        lambda session: session.engine.move(relative_source, source_name, relative_destination),
        json_output=json_output,
        quiet=quiet,
    )


@cli.command()
@root_argument
@click.argument("parent", default=".")
@click.option("--name", type=str, help="Preferred name for the new folder.")
@json_option
@quiet_option
def mkdir(root: str, parent: str, name: str | None, json_output: bool, quiet: bool) -> None:
    """Create a new subfolder inside PARENT (defaults to ROOT itself)."""
    relative = _relative_argument(parent)
    _run_mutation(
        root,
        lambda session: session.engine.create_child(relative, name),
        json_output=json_output,
        quiet=quiet,
    )


@cli.command()
@root_argument
@click.argument("target")
@json_option
@quiet_option
def rmdir(root: str, target: str, json_output: bool, quiet: bool) -> None:
    """Delete the empty folder TARGET, which must own no data."""
    relative = _relative_argument(target)
    _run_mutation(
        root,
        lambda session: session.engine.delete(relative),
        json_output=json_output,
        quiet=quiet,
    )


@cli.command()
@root_argument
@click.argument("source", default=".")
@json_option
@quiet_option
def extract(root: str, source: str, json_output: bool, quiet: bool) -> None:
    """Move the media files of SOURCE into a new subfolder."""
    relative = _relative_argument(source)
    _run_mutation(
        root,
        lambda session: session.engine.extract_files(relative),
        json_output=json_output,
        quiet=quiet,
    )


@cli.command()
@root_argument
@json_option
@quiet_option
def index(root: str, json_output: bool, quiet: bool) -> None:
    """Catalog every media file found under ROOT by its folder."""
    session = _open_session(root, json_output=json_output)
    record_store = session.record_store
    quiet = quiet or session.config.cli.quiet_default
    if not isinstance(record_store, CatalogRecordStore):
        _handle_cli_error(
            "The configured record store does not support indexing.",
            code="unsupported",
            json_output=json_output,
        )

    added: dict[str, int] = {}
    folders = [""]
    folders.extend(session.filesystem.enumerate_subfolders(session.config.scan.excluded_folders))
    try:
        for folder in folders:
            count = record_store.register(folder, session.filesystem.enumerate_media_files(folder))
            if count:
                added[folder] = count
    except StoreUpdateError as exc:
        _handle_cli_error(str(exc), code="store_update_failed", json_output=json_output, original=exc)

    built = session.load()
    if json_output:
        console.print_json(data={"added": added, "tree": built.to_dict()})
        return
    total = sum(added.values())
    _emit_message(
        f"[green]Catalogued {total} file(s) across {len(added)} folder(s).[/green]",
        mode="summary",
        quiet=quiet,
    )
    _emit_message(
        _render_tree(built, show_missing=session.config.cli.show_missing),
        mode="detail",
        quiet=quiet,
    )


@cli.group()
def config() -> None:
    """Manage treesync configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException(
            "KEY must specify a dotted path such as 'naming.new_folder_name'."
        )

    try:
        parsed_value = yaml.safe_load(value)
        file_data = manager.load_file_overrides()
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=TreesyncConfig(), file_overrides=file_data)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = [
        line
        for line in difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        if "Last updated:" not in line
    ]
    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None or edited == original:
        console.print("[yellow]No changes applied.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=TreesyncConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
