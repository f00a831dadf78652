"""Command-line interface for deptyck."""

import sys
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from deptyck import __version__


console = Console()
err_console = Console(stderr=True)


@click.command()
@click.argument('filename', required=False, type=click.Path(exists=True, dir_okay=False))
@click.option('--trace', is_flag=True, help='Show every step of the checking algorithm')
@click.option('--show-rewrites', is_flag=True, help='Also print the final rewrites')
@click.option('--strict-occurs-check', is_flag=True,
              help='Reject any rewrite whose replacement mentions the rewritten name')
@click.option('--rollback-counter', is_flag=True,
              help='Restore the fresh-name counter when a nested scope closes')
@click.option('--fuel', type=click.IntRange(min=0), default=None,
              help='Reduction step budget for comparing type indices')
@click.option('--json', 'as_json', is_flag=True, help='Print the result as JSON')
@click.option('--version', is_flag=True, help='Show version information')
def main(filename: Optional[str] = None,
         trace: bool = False,
         show_rewrites: bool = False,
         strict_occurs_check: bool = False,
         rollback_counter: bool = False,
         fuel: Optional[int] = None,
         as_json: bool = False,
         version: bool = False) -> None:
    """deptyck - type check a program given as a JSON syntax tree.

    Examples:

      deptyck program.json                  # Check a program

      deptyck program.json --trace          # Show the algorithm's steps

      deptyck program.json --json           # Machine-readable result
    """
    if version:
        click.echo(f"deptyck version {__version__}")
        sys.exit(0)
    if not filename:
        raise click.UsageError("Missing argument 'FILENAME'.")

    from deptyck.context import CheckerOptions
    from deptyck.errors import ProgramFormatError
    from deptyck.error_reporting import clear_trace, disable_trace, enable_trace, get_trace
    from deptyck.serializer import load_program, result_to_json
    from deptyck.typechecker import check_program

    options = CheckerOptions(strict_occurs_check=strict_occurs_check,
                             rollback_counter=rollback_counter)
    if fuel is not None:
        options.reduction_fuel = fuel

    try:
        program = load_program(filename)
    except ProgramFormatError as e:
        err_console.print(e.format_error(), style="red", markup=False)
        sys.exit(1)

    clear_trace()
    if trace:
        enable_trace()
    try:
        result = check_program(program, options=options)
    finally:
        disable_trace()
    check_trace = get_trace()

    if as_json:
        click.echo(result_to_json(result))
    else:
        if trace:
            print_trace(check_trace)
        if result.ok:
            print_context(result.context, show_rewrites)
            console.print(f"[green]✓[/green] {filename} checks")
        else:
            print_diagnostic(result.diagnostic)

    if not result.ok:
        sys.exit(1)


def print_trace(check_trace) -> None:
    table = Table(title="Trace", show_lines=False)
    table.add_column("Phase", style="dim")
    table.add_column("Message")
    for event in check_trace.events:
        table.add_row("  " * event.depth + event.phase, event.message)
    console.print(table)


def print_context(ctx, show_rewrites: bool = False) -> None:
    table = Table(title="Declarations")
    table.add_column("Term", style="cyan")
    table.add_column("Type", style="magenta")
    for declaration in reversed(ctx.declarations):
        table.add_row(str(declaration.expr), str(ctx.get_rewritten(declaration.type)))
    console.print(table)

    if show_rewrites:
        rewrites = Table(title="Rewrites")
        rewrites.add_column("Name", style="cyan")
        rewrites.add_column("Replacement", style="magenta")
        for rewrite in ctx.rewrites:
            rewrites.add_row(str(rewrite.name), str(rewrite.replacement))
        console.print(rewrites)


def print_diagnostic(diagnostic) -> None:
    err_console.print(f"[red]✗[/red] [bold]{diagnostic.kind.name.lower()}[/bold]")
    err_console.print(diagnostic.message, markup=False)
    for operand in diagnostic.operands:
        err_console.print(f"  - {operand}", markup=False)


if __name__ == '__main__':
    main()
