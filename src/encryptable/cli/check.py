from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from encryptable.core.directives import parse_structure
from encryptable.core.source import read_structures_from_file
from encryptable.errors import EncryptableError

console = Console()


def check(
    paths: Annotated[list[str], typer.Argument(help="Python files to validate.")],
) -> None:
    """Validate the directives of every @encryptable class."""
    failures = 0
    for path in paths:
        try:
            declarations = read_structures_from_file(path)
        except EncryptableError as exc:
            console.print(f"[red]FAIL[/red] {path}: {escape(str(exc))}")
            failures += 1
            continue

        for declaration in declarations:
            try:
                descriptor = parse_structure(declaration)
            except EncryptableError as exc:
                console.print(f"[red]FAIL[/red] {path}: {escape(str(exc))}")
                failures += 1
                continue
            transformed = sum(1 for f in descriptor.fields if f.operations)
            console.print(f"[green]OK[/green] {path}: {descriptor.name} ({transformed} encryptable fields)")

    if failures:
        raise typer.Exit(code=1)
