import logging

import typer

from encryptable.cli.check import check
from encryptable.cli.expand import expand
from encryptable.config import log_level

app = typer.Typer(
    name="encryptable",
    help="Encryptable CLI — inspect and validate generated encrypt/decrypt routines.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("expand")(expand)
app.command("check")(check)


def main() -> None:
    logging.basicConfig(level=log_level(), format="%(levelname)s %(name)s: %(message)s")
    app()
