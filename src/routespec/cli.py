"""CLI entry point for routespec."""

import logging
from pathlib import Path

import click

from routespec.config import DocsConfig, load_config
from routespec.docpass import DocumentationPass
from routespec.document.merge import merge, to_partial
from routespec.document.model import Document, PartialDocument
from routespec.document.writer import dump_partial, load_document, load_partial, write_document
from routespec.errors import ConfigError, SourceError
from routespec.graph.loader import load_source

logger = logging.getLogger(__name__)


def _load_partials(paths: list[Path]) -> list[PartialDocument]:
    partials = []
    for path in paths:
        if not path.exists():
            logger.warning("Partial spec %s not found; skipped", path)
            continue
        partials.append(load_partial(path))
    return partials


def _run_pass(source: Path, config: DocsConfig) -> DocumentationPass:
    graph, types = load_source(source)
    return DocumentationPass(config, graph, types).run()


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity.",
)
def main(log_level: str):
    """routespec: generate OpenAPI documents from route declaration dumps."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("source", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML config file.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file (defaults to the configured file_path).")
@click.option("--format", "fmt", default=None, type=click.Choice(["json", "yaml"]), help="Output format (defaults to the configured format).")
def generate(source: Path, config_path: Path | None, output: Path | None, fmt: str | None):
    """Generate an OpenAPI document (or a partial spec) from SOURCE."""
    try:
        config = load_config(config_path)
        if not config.enabled:
            click.echo("Documentation generation is disabled in the config; nothing to do.")
            return

        click.echo(f"Reading declarations from {source}...")
        docpass = _run_pass(source, config)
        document = docpass.document()
        click.echo(f"Found {len(document.paths)} paths, {len(document.components.schemas)} schemas.")

        if config.is_contributor:
            output = output or Path(f"{config.module_id}.openapi.partial.json")
            dump_partial(to_partial(document, config.module_id), output)
            click.echo(f"Partial spec for module {config.module_id} saved to {output}")
            return

        if config.is_aggregator:
            partials = _load_partials([Path(p) for p in config.partial_spec_paths])
            click.echo(f"Merging {len(partials)} partial specs...")
            document = merge(partials, document)

        output = output or Path(config.file_path)
        write_document(document, output, fmt or config.format)
        click.echo(f"OpenAPI document saved to {output}")
    except (ConfigError, SourceError) as e:
        raise click.ClickException(str(e)) from e


@main.command("merge")
@click.argument("partial_paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--local", "local_path", default=None, type=click.Path(exists=True, path_type=Path), help="Local document that wins every collision.")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the merged document.")
@click.option("--format", "fmt", default="yaml", type=click.Choice(["json", "yaml"]), help="Output format.")
def merge_cmd(partial_paths: tuple[Path, ...], local_path: Path | None, output: Path, fmt: str):
    """Merge contributor partial specs (and an optional local document)."""
    try:
        partials = _load_partials(list(partial_paths))
        local: Document | None = load_document(local_path) if local_path else None
    except SourceError as e:
        raise click.ClickException(str(e)) from e

    conflicts: list[str] = []
    document = merge(partials, local, conflicts)
    write_document(document, output, fmt)
    click.echo(f"Merged {len(partials)} partial specs into {output} ({len(conflicts)} conflicts)")


@main.command()
@click.argument("source", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML config file.")
def inspect(source: Path, config_path: Path | None):
    """List the operations declared in SOURCE."""
    try:
        docpass = _run_pass(source, load_config(config_path))
    except (ConfigError, SourceError) as e:
        raise click.ClickException(str(e)) from e

    document = docpass.document()
    for path, methods in document.paths.items():
        for method in methods:
            click.echo(f"{method.upper():7} {path}")
    click.echo(f"{sum(len(m) for m in document.paths.values())} operations")
