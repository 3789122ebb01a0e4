"""
Command-line interface for LocalizedDate expansion.

Provides the ``localized-date`` command with ``expand`` and ``names``
subcommands.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from . import __version__
from .adapters.source import ExpansionResult, expand_source
from .core.config import ConfigError, GeneratorConfig, get_config_manager, load_config
from .core.errors import MacroError
from .core.naming import derive_names
from .logging_config import get_logger, setup_logging
from .utils import SourceLoadError, load_source

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Initialize rich consoles
console = Console()
err_console = Console(stderr=True)


def create_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="localized-date",
        description="Synthesize GMT-stored, locally cached date members",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: logging disabled)",
    )
    parser.add_argument("--log-file", metavar="FILE", help="Also log to FILE")

    subparsers = parser.add_subparsers(dest="command")
    create_expand_subparser(subparsers)
    create_names_subparser(subparsers)
    return parser


def create_expand_subparser(subparsers) -> argparse.ArgumentParser:
    """
    Create the expand subcommand parser.

    For use with: localized-date expand [options] FILE

    Args:
        subparsers: Subparser group from main parser

    Returns:
        Configured subparser for the expand command
    """
    parser = subparsers.add_parser(
        "expand",
        help="Expand LocalizedDate triggers in a module",
        description="Replace every LocalizedDate trigger with its generated members",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  localized-date expand models.py
  localized-date expand models.py -o models_expanded.py
  localized-date expand --check models.py
  localized-date expand --stdin < models.py
        """.strip(),
    )

    # Input options (mutually exclusive)
    input_group = parser.add_mutually_exclusive_group(required=False)
    input_group.add_argument("file", nargs="?", help="Python module to expand")
    input_group.add_argument("--url", help="URL to fetch the module from")
    input_group.add_argument(
        "--stdin", action="store_true", help="Read the module from standard input"
    )

    parser.add_argument("--output", "-o", help="Output file (default: stdout)")
    parser.add_argument("--config", help="Configuration file path (JSON)")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Exit with status 1 if the module would change; write nothing",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Print expanded code without highlighting",
    )

    style_group = parser.add_argument_group("style options")
    style_group.add_argument(
        "--no-comments",
        action="store_true",
        help="Don't add header comments to generated members",
    )
    style_group.add_argument("--indent-size", type=int, help="Spaces per indent level")
    style_group.add_argument("--tabs", action="store_true", help="Indent with tabs")

    parser.set_defaults(func=_handle_expand_subcommand)
    return parser


def create_names_subparser(subparsers) -> argparse.ArgumentParser:
    """Create the names subcommand parser."""
    parser = subparsers.add_parser(
        "names",
        help="Show the names derived for an identifier",
        description="Show the member names a LocalizedDate trigger would produce",
    )
    parser.add_argument("identifier", help="Field identifier carrying the trigger")
    parser.add_argument(
        "--base-name", metavar="NAME", help="Explicit base name (declaration-level)"
    )
    parser.set_defaults(func=_handle_names_subcommand)
    return parser


def _get_input(args: argparse.Namespace) -> Tuple[str, str]:
    """Get (source name, source text) from the selected input."""
    try:
        if args.file:
            return load_source(file_path=args.file)
        elif args.url:
            return load_source(url=args.url)
        elif args.stdin:
            return "<stdin>", sys.stdin.read()
        else:
            raise CLIError("Input source required (file, --url, or --stdin)")
    except (SourceLoadError, FileNotFoundError) as e:
        raise CLIError(f"Failed to load input: {e}") from e


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Build configuration from the config file and CLI overrides."""
    overrides = {}

    if args.no_comments:
        overrides["add_comments"] = False
    if args.indent_size is not None:
        overrides["indent_size"] = args.indent_size
    if args.tabs:
        overrides["use_tabs"] = True

    try:
        config = load_config(custom_config=overrides, config_file=args.config)
    except ConfigError as e:
        raise CLIError(f"Configuration error: {e}") from e

    for warning in get_config_manager().validate_config(config):
        err_console.print(f"[yellow]⚠️  Config:[/yellow] {warning}")

    return config


def _handle_expand_subcommand(args: argparse.Namespace) -> int:
    """Handle the expand subcommand."""
    try:
        source_name, source = _get_input(args)
        config = _build_config(args)
    except CLIError as e:
        err_console.print(f"[red]✗ Error:[/red] {e}")
        return 1

    result = expand_source(source, config, filename=source_name)
    _print_diagnostics(result)

    if args.check:
        if result.changed:
            console.print(
                f"[yellow]would expand[/yellow] {source_name} "
                f"({len(result.expansions)} trigger(s))"
            )
            return 1
        return 0 if result.success else 1

    if not result.success:
        return 1

    return _output_result(result, args)


def _print_diagnostics(result: ExpansionResult):
    for diagnostic in result.diagnostics:
        err_console.print(diagnostic.format(), markup=False, highlight=False, soft_wrap=True)

    if result.warnings:
        err_console.print("\n[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            err_console.print(f"  [yellow]•[/yellow] {warning}", soft_wrap=True)


def _output_result(result: ExpansionResult, args: argparse.Namespace) -> int:
    """Write or display the expanded module."""
    if args.output:
        output_path = Path(args.output)
        try:
            output_path.write_text(result.code, encoding="utf-8")
        except OSError as e:
            err_console.print(f"[red]✗ Failed to write to {output_path}:[/red] {e}")
            return 1
        console.print(
            f"[green]✓[/green] Expanded {len(result.expansions)} trigger(s) "
            f"into [cyan]{output_path}[/cyan]",
            soft_wrap=True,
        )
        return 0

    if args.raw or not console.is_terminal:
        sys.stdout.write(result.code)
        return 0

    console.print(
        Panel(
            Syntax(result.code, "python", theme="monokai"),
            title=f"📄 Expanded ({len(result.expansions)} trigger(s))",
            border_style="green",
        )
    )
    return 0


def _handle_names_subcommand(args: argparse.Namespace) -> int:
    """Handle the names subcommand."""
    try:
        names = derive_names(args.identifier, args.base_name)
    except MacroError as e:
        err_console.print(f"[red]✗ {e.code}:[/red] {e.message}")
        return 1

    table = Table(
        title=f"📋 Derived names for {args.base_name or args.identifier}",
        box=box.ROUNDED,
        title_style="bold cyan",
    )
    table.add_column("Member", style="bold")
    table.add_column("Name", style="green", no_wrap=True)

    table.add_row("Base name", names.base_name)
    table.add_row("Computed accessor", names.public_name)
    table.add_row("GMT field", names.gmt_field_name)
    table.add_row("Cached field", names.cached_field_name)
    if args.base_name:
        table.add_row("Legacy alias", names.legacy_alias_name)

    console.print(table)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the localized-date command."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.verbose or args.log_level or args.log_file:
        level = logging.DEBUG if args.verbose else getattr(
            logging, args.log_level or "INFO"
        )
        setup_logging(level=level, log_file=args.log_file)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Interrupted[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
