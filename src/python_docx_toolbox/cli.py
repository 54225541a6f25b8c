"""Command-line interface for python-docx-toolbox.

Provides commands for inspecting and modifying Word documents from the terminal.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer

from . import __version__
from .archive import DocxArchive, zip_directory_to_docx
from .config import ToolboxConfig
from .errors import InputError
from .export import (
    render_entries_plain,
    render_fields_plain,
    render_fonts_plain,
    render_json,
    render_meta_plain,
)
from .results import OperationResult

app = typer.Typer(
    name="docx-toolbox",
    help="Inspect and modify DOCX documents from the command line.",
    no_args_is_help=True,
)

FileArgument = Annotated[Path, typer.Argument(help="Path to the .docx file")]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]
OutputOption = Annotated[
    Path | None,
    typer.Option("--output", "-o", help="Output file path (default: overwrite the document)"),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"docx-toolbox version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Log progress to stderr.")] = False,
) -> None:
    """Inspect and modify DOCX documents from the command line."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _config(as_json: bool = False) -> ToolboxConfig:
    """Read the configuration, exiting with status 1 if the environment is invalid."""
    try:
        return ToolboxConfig.from_env(as_json=as_json)
    except InputError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _finish(result: OperationResult) -> OperationResult:
    """Exit with status 1 if the operation failed."""
    if not result:
        typer.echo(f"Error: {result.message}", err=True)
        raise typer.Exit(1)
    return result


@app.command("ls")
def list_files(file: FileArgument, as_json: JsonOption = False) -> None:
    """List the files contained in the document."""
    result = _finish(DocxArchive(file, _config(as_json)).list_files())
    typer.echo(render_json(result.data) if as_json else render_entries_plain(result.data))


@app.command()
def images(file: FileArgument, as_json: JsonOption = False) -> None:
    """List the images contained in the document."""
    result = _finish(DocxArchive(file, _config(as_json)).list_images())
    typer.echo(render_json(result.data) if as_json else render_entries_plain(result.data))


@app.command()
def meta(file: FileArgument, as_json: JsonOption = False) -> None:
    """Show the document's metadata (app.xml and core.xml)."""
    result = _finish(DocxArchive(file, _config(as_json)).list_meta())
    typer.echo(render_json(result.data) if as_json else render_meta_plain(result.data))


@app.command()
def fonts(file: FileArgument, as_json: JsonOption = False) -> None:
    """List the fonts declared in the document's font tables."""
    result = _finish(DocxArchive(file, _config(as_json)).list_fonts())
    typer.echo(render_json(result.data) if as_json else render_fonts_plain(result.data))


@app.command()
def fields(file: FileArgument, as_json: JsonOption = False) -> None:
    """List the merge fields of the document."""
    result = _finish(DocxArchive(file, _config(as_json)).list_merge_fields())
    typer.echo(render_json(result.data) if as_json else render_fields_plain(result.data))


@app.command()
def text(
    file: FileArgument,
    segments: Annotated[
        bool, typer.Option("--segments", "-s", help="Put each paragraph on its own line")
    ] = False,
) -> None:
    """Output the plain text of the document."""
    result = _finish(DocxArchive(file, _config()).get_text(newline_at_segments=segments))
    typer.echo(result.data, nl=not segments)


@app.command()
def unzip(
    file: FileArgument,
    indent: Annotated[bool, typer.Option("--indent", "-i", help="Pretty-print XML files")] = False,
    directory: Annotated[
        Path | None, typer.Option("--directory", "-d", help="Target directory")
    ] = None,
) -> None:
    """Extract the document into <name>-extracted."""
    result = _finish(DocxArchive(file, _config()).unzip(indent=indent, directory=directory))
    typer.echo(result.message)


@app.command("unzip-media")
def unzip_media(file: FileArgument) -> None:
    """Extract only the images of the document into <name>-media."""
    result = _finish(DocxArchive(file, _config()).unzip_media())
    typer.echo(result.message)


@app.command("zip")
def zip_command(
    directory: Annotated[Path, typer.Argument(help="Directory to package")],
    output: Annotated[Path, typer.Argument(help="Path of the .docx file to create")],
    update_created: Annotated[
        bool, typer.Option("--update-created", help="Set core.xml 'created' to now")
    ] = False,
    update_modified: Annotated[
        bool, typer.Option("--update-modified", help="Set core.xml 'modified' to now")
    ] = False,
) -> None:
    """Package a directory into a .docx file."""
    result = _finish(
        zip_directory_to_docx(directory, output, _config(), update_created, update_modified)
    )
    typer.echo(result.message)


@app.command("set-meta")
def set_meta(
    file: FileArgument,
    attribute: Annotated[str, typer.Argument(help="Attribute (title, creator, language, ...)")],
    value: Annotated[str, typer.Argument(help="New value")],
    output: OutputOption = None,
) -> None:
    """Set or insert a metadata attribute in docProps/core.xml."""
    result = _finish(DocxArchive(file, _config()).modify_meta(attribute, value, output))
    typer.echo(result.message)


@app.command()
def replace(
    file: FileArgument,
    search: Annotated[str, typer.Argument(help="Text to find")],
    replacement: Annotated[str, typer.Argument(help="Replacement text")],
    output: OutputOption = None,
) -> None:
    """Replace text, also where it is split across several runs."""
    result = _finish(DocxArchive(file, _config()).replace_text(search, replacement, output))
    typer.echo(result.message)


@app.command("remove-between")
def remove_between(
    file: FileArgument,
    lhs: Annotated[str, typer.Argument(help="Text starting the part to remove")],
    rhs: Annotated[str, typer.Argument(help="Text ending the part to remove")],
    output: OutputOption = None,
) -> None:
    """Remove text from LHS through RHS (inclusive), first occurrence only."""
    result = _finish(DocxArchive(file, _config()).remove_between_text(lhs, rhs, output))
    typer.echo(result.message)


@app.command()
def lorem(file: FileArgument, output: OutputOption = None) -> None:
    """Replace all text by lorem ipsum of the same shape."""
    result = _finish(DocxArchive(file, _config()).randomize_text(output))
    typer.echo(result.message)


@app.command("replace-image")
def replace_image(
    file: FileArgument,
    image: Annotated[str, typer.Argument(help="Name of the image inside the document")],
    replacement: Annotated[Path, typer.Argument(help="Path of the replacement image")],
    output: OutputOption = None,
) -> None:
    """Replace an image inside the document."""
    result = _finish(DocxArchive(file, _config()).replace_image(image, replacement, output))
    typer.echo(result.message)


if __name__ == "__main__":
    app()
