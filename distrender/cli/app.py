"""Main CLI application."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

import typer
from jinja2 import TemplateError
from pydantic import ValidationError
from typing_extensions import Annotated

from ..core.manifest import ManifestError, load_manifest
from ..core.models import BuildManifest, DistMetadata, TemplateConfig
from ..core.settings import Settings
from ..dist.distribution import Distribution, DuplicateFileError, UnknownFinderError
from ..dist.roles import run_phases
from ..plugins.template import TemplatePlugin
from ..rendering.context import build_context
from ..rendering.engine import render_file
from .parsers import parse_finder, parse_template_config

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="distrender",
    help="Render tiny templates into a distribution tree.",
)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def _resolve_manifest(source: Path, manifest: str) -> BuildManifest | None:
    if manifest:
        path = Path(manifest)
    else:
        path = get_settings().manifest_path
        if not path.is_absolute():
            path = source / path
        if not path.exists():
            logger.debug(f"No manifest at {path}")
            return None

    try:
        return load_manifest(path)
    except (ManifestError, ValidationError) as e:
        raise typer.BadParameter(str(e), param_hint="--manifest") from e


@app.command()
def build(
    source: Annotated[
        Path,
        typer.Argument(help="Source tree to gather into the distribution."),
    ],
    dest_root: Annotated[
        str,
        typer.Option(
            "--dest",
            help="Directory to write the built distribution to (default: build).",
            metavar="DIR",
        ),
    ] = "",
    manifest: Annotated[
        str,
        typer.Option(
            "--manifest",
            help="YAML build manifest (default: distrender.yaml in SOURCE, if present).",
            metavar="FILE",
        ),
    ] = "",
    name: Annotated[
        str,
        typer.Option("--name", help="Distribution name (default: SOURCE directory name)."),
    ] = "",
    version: Annotated[
        str,
        typer.Option("--version", help="Distribution version."),
    ] = "",
    finder: Annotated[
        str,
        typer.Option(
            "--finder",
            help="Name of the file finder selecting templates (default: all *.tt files).",
            metavar="NAME",
        ),
    ] = "",
    finder_definitions: Annotated[
        list[str],
        typer.Option(
            "--define-finder",
            help="Define a file finder (format: NAME=GLOB[,GLOB...]). Repeatable.",
            metavar="NAME=GLOB",
        ),
    ] = [],
    output_regex: Annotated[
        str,
        typer.Option(
            "--output-regex",
            help=r"Substitution computing output names (default: /\.tt$//).",
            metavar="EXPR",
        ),
    ] = "",
    trim: Annotated[
        bool,
        typer.Option("--trim", help="Strip the newline after block directives."),
    ] = False,
    var: Annotated[
        list[str],
        typer.Option(
            "--var",
            help="Template variable (format: 'NAME = VALUE'). Repeatable.",
            metavar="NAME=VALUE",
        ),
    ] = [],
    replace: Annotated[
        bool,
        typer.Option("--replace", help="Overwrite existing files with rendered output."),
    ] = False,
    prune: Annotated[
        bool,
        typer.Option("--prune", help="Leave the source templates out of the build."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="List the built files instead of writing them."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Gather SOURCE, process its templates and write the distribution."""
    _configure_logging(verbose)
    settings = get_settings()

    logger.debug("Starting distrender build")

    if not source.is_dir():
        raise typer.BadParameter(f"Not a directory: {source}", param_hint="SOURCE")

    loaded = _resolve_manifest(source, manifest)
    finders = dict(loaded.finders) if loaded else {}
    for name_and_globs in finder_definitions:
        finder_name, finder_config = parse_finder(name_and_globs)
        finders[finder_name] = finder_config

    if loaded:
        metadata_fields = loaded.metadata().model_dump()
    else:
        metadata_fields = {"name": source.resolve().name}
    if name:
        metadata_fields["name"] = name
    if version:
        metadata_fields["version"] = version
    metadata = DistMetadata(**metadata_fields)

    if loaded and loaded.templates:
        ignored = [
            flag
            for flag, given in (
                ("--finder", finder),
                ("--output-regex", output_regex),
                ("--trim", trim),
                ("--var", var),
                ("--replace", replace),
                ("--prune", prune),
            )
            if given
        ]
        if ignored:
            logger.warning(
                f"Manifest defines template sections; ignoring {', '.join(ignored)}"
            )
        configs = loaded.templates
    else:
        options: dict[str, object] = {
            "trim": trim,
            "var": var,
            "replace": replace,
            "prune": prune,
        }
        if finder:
            options["finder"] = finder
        if output_regex:
            options["output_regex"] = output_regex
        configs = [parse_template_config(**options)]

    dest = Path(dest_root) if dest_root else settings.dest_root
    if not dest.is_absolute():
        dest = Path.cwd() / dest

    try:
        dist = Distribution.from_directory(
            source,
            metadata,
            include_dotfiles=settings.include_dotfiles,
            exclude=[dest],
        )
        for finder_name, finder_config in finders.items():
            dist.register_finder(finder_name, finder_config)

        run_phases(TemplatePlugin(dist, config) for config in configs)

        if dry_run:
            dist.check_duplicates()
            for file in dist.files:
                typer.echo(file.name)
            return

        outputs = dist.write_to(dest)
    except (TemplateError, UnknownFinderError, DuplicateFileError) as e:
        logger.error(f"Build failed: {e}")
        raise typer.Exit(code=1) from e

    logger.debug(f"Completed: {len(outputs)} file(s) written")


@app.command()
def render(
    template: Annotated[
        Path,
        typer.Argument(help="Template file to render to standard output."),
    ],
    var: Annotated[
        list[str],
        typer.Option(
            "--var",
            help="Template variable (format: 'NAME = VALUE'). Repeatable.",
            metavar="NAME=VALUE",
        ),
    ] = [],
    trim: Annotated[
        bool,
        typer.Option("--trim", help="Strip the newline after block directives."),
    ] = False,
    name: Annotated[
        str,
        typer.Option("--name", help="Distribution name exposed as dist.name."),
    ] = "",
    version: Annotated[
        str,
        typer.Option("--version", help="Distribution version exposed as dist.version."),
    ] = "",
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Render a single template with the same variables a build would use."""
    _configure_logging(verbose)

    metadata = DistMetadata(name=name or template.stem)
    if version:
        metadata.version = version
    context = build_context(Distribution(metadata), TemplateConfig(var=var).var)

    try:
        output = render_file(template, context, trim=trim)
    except FileNotFoundError as e:
        raise typer.BadParameter(str(e), param_hint="TEMPLATE") from e
    except TemplateError as e:
        logger.error(f"Render failed: {e}")
        raise typer.Exit(code=1) from e

    typer.echo(output, nl=False)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
