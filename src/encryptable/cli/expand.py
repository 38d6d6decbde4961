from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from encryptable.core.directives import parse_structure
from encryptable.core.source import read_structures_from_file
from encryptable.core.synthesis import render_source
from encryptable.errors import EncryptableError

console = Console()


def expand(
    path: Annotated[str, typer.Argument(help="Python file containing @encryptable classes.")],
    class_name: Annotated[str | None, typer.Option("--class", help="Only expand this class.")] = None,
    plain: Annotated[bool, typer.Option(help="Print source without highlighting.")] = False,
) -> None:
    """Print the generated encrypt/decrypt routines."""
    try:
        declarations = read_structures_from_file(path)
        if class_name is not None:
            declarations = [d for d in declarations if d.name == class_name]
        sources = [render_source(parse_structure(d)) for d in declarations]
    except EncryptableError as exc:
        console.print(f"[red]Error[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from None

    if not sources:
        target = f"class {class_name}" if class_name else "@encryptable classes"
        console.print(f"[yellow]No[/yellow] {target} found in {path}")
        raise typer.Exit(code=1)

    for source in sources:
        if plain:
            console.print(source, markup=False, highlight=False, soft_wrap=True)
        else:
            console.print(Syntax(source, "python"))
