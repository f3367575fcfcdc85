"""
Command-line interface for classforge.

    classforge generate classes.json --output-dir src/Model --overwrite
    classforge extensions
"""

import argparse
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from . import __version__
from .core.config import GeneratorConfig, load_config, load_config_classes
from .core.emitter import EmissionReport, Emitter
from .core.errors import GeneratorError
from .core.pipeline import Pipeline
from .logging_config import get_logger, setup_logging
from .registry import get_registry

logger = get_logger(__name__)

# Initialize rich console
console = Console()


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="classforge",
        description="Generate class source files from config classes",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    subparsers = parser.add_subparsers(dest="command")

    generate = subparsers.add_parser("generate", help="Generate classes")
    generate.add_argument(
        "config_classes", metavar="CONFIG_CLASSES", help="JSON file with config classes"
    )
    generate.add_argument(
        "--config", metavar="FILE", help="JSON configuration file for generation"
    )
    generate.add_argument(
        "--output-dir", "-o", metavar="DIR", help="Directory for generated files"
    )
    generate.add_argument(
        "--overwrite",
        action="store_true",
        default=None,
        help="Replace files that already exist",
    )
    generate.add_argument(
        "--extension",
        "-e",
        metavar="NAME",
        action="append",
        default=[],
        help="Extension name or module:Class path (repeatable)",
    )
    generate.add_argument(
        "--max-depth", type=int, metavar="N", help="Expansion depth limit"
    )
    generate.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be written without writing",
    )
    generate.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers.add_parser("extensions", help="List available extensions")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command == "extensions":
        return _list_extensions()
    if args.command == "generate":
        try:
            return _generate(args)
        except GeneratorError as e:
            logger.debug("Generation failed", exc_info=True)
            console.print(f"[red]✗ Error:[/red] {e}")
            return 1

    parser.print_help()
    return 1


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Build configuration from CLI arguments."""
    overrides = {}
    if args.output_dir:
        overrides["output_dir"] = args.output_dir
    if args.overwrite is not None:
        overrides["overwrite"] = args.overwrite
    if args.max_depth is not None:
        overrides["max_depth"] = args.max_depth
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    return load_config(overrides, args.config)


def _generate(args: argparse.Namespace) -> int:
    config = _build_config(args)
    setup_logging(config.log_level)

    config_classes = load_config_classes(args.config_classes)

    declarations = list(config.extensions) + [{"class": name} for name in args.extension]
    if not declarations:
        declarations = [{"class": "skeleton"}]

    defaults = {
        "output_dir": config.output_dir,
        "overwrite": config.overwrite,
        "template_dir": config.template_dir,
    }
    registry = get_registry()
    extensions = [registry.create(data, defaults) for data in declarations]

    emitter = Emitter(
        file_extension=config.file_extension,
        header=config.header,
        dry_run=args.dry_run,
    )
    pipeline = Pipeline(extensions, config_classes, config.max_depth, emitter)

    with console.status("Generating..."):
        report = pipeline.process()

    _print_report(report, args.dry_run)
    return 0


def _print_report(report: EmissionReport, dry_run: bool):
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold cyan")
    table.add_column("File")
    table.add_column("Status")

    for path in report.written:
        status = "[yellow]would write[/yellow]" if dry_run else "[green]written[/green]"
        table.add_row(str(path), status)
    for path in report.skipped:
        table.add_row(str(path), "[dim]exists, skipped[/dim]")

    if report.total:
        console.print(table)
    console.print(
        f"[green]✓[/green] {len(report.written)} written, {len(report.skipped)} skipped"
    )


def _list_extensions() -> int:
    registry = get_registry()

    table = Table(
        title="Available extensions",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Name", style="bold")
    table.add_column("Kind")
    table.add_column("Aliases")
    table.add_column("Description")

    for name in registry.list_extensions():
        info = registry.get_extension_info(name)
        table.add_row(
            info["name"], info["kind"], ", ".join(info["aliases"]), info["description"]
        )

    console.print(table)
    return 0
