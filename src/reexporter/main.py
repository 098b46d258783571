import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from reexporter import __version__
from reexporter.config import load_config
from reexporter.exceptions import ReexporterError
from reexporter.exporter import Exporter, GoFormatter
from reexporter.logging_config import logger, setup_logging
from reexporter.module import ModuleResolver
from reexporter.scanner import generate_all, group_by_output
from reexporter.settings import Settings

app = typer.Typer(help="Generate Go files that re-export symbols of other packages.")
console = Console()
err_console = Console(stderr=True)


def _fail(error: ReexporterError) -> None:
    err_console.print(f"[bold red]Error:[/bold red] {escape(str(error))}", soft_wrap=True)
    raise typer.Exit(code=1)


@app.command()
def version():
    """
    Prints the current version of reexporter.
    """
    typer.echo(f"reexporter v{__version__}")


@app.command()
def generate(
    root: Path = typer.Argument(
        ".", help="Directory searched for configuration files.", exists=True, file_okay=False, readable=True
    ),
    config_name: Optional[str] = typer.Option(
        None, "--config-name", "-c", help="Configuration file name (default: exported.yaml, or REEXPORTER_CONFIG_NAME)."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Render and format without writing files."
    ),
    no_gofmt: bool = typer.Option(
        False, "--no-gofmt", help="Do not run gofmt on generated code."
    ),
    human: bool = typer.Option(
        False, "--human", "-H", help="Pretty output with tables and colors."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every symbol decision."
    ),
):
    """
    Generates every configured forwarding file below ROOT.
    """
    setup_logging(
        level="DEBUG" if verbose else None,
        suppress_console=not (human or verbose),
        force=True,
    )

    settings = Settings.from_env()
    if config_name:
        settings.config_name = config_name
    if no_gofmt:
        settings.use_gofmt = False

    try:
        results = generate_all(root, settings, dry_run=dry_run)
    except ReexporterError as e:
        logger.error(f"Generation failed: {e.__class__.__name__}")
        _fail(e)

    if dry_run and not human:
        for result in results:
            typer.echo(f"// {result.output_path}")
            typer.echo(result.code, nl=False)
        return

    if not human:
        for result in results:
            typer.echo(result.output_path)
        return

    table = Table(title=f"Generated files under '{root}'")
    table.add_column("Output", style="cyan", no_wrap=True)
    table.add_column("Package", style="magenta")
    table.add_column("Types", justify="right")
    table.add_column("Vars", justify="right")
    table.add_column("Consts", justify="right")
    table.add_column("Funcs", justify="right")
    for result in results:
        table.add_row(
            result.output_path,
            result.package_path,
            str(result.types),
            str(result.variables),
            str(result.constants),
            str(result.functions),
        )
    console.print(table)
    verb = "Rendered" if dry_run else "Wrote"
    console.print(f"{verb} [bold green]{len(results)}[/bold green] file(s).")


@app.command()
def inspect(
    config_path: Path = typer.Argument(
        ..., help="Configuration file to inspect.", exists=True, dir_okay=False, readable=True
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON."
    ),
):
    """
    Shows the merged settings of a configuration file and what happens to
    every symbol of the configured packages.
    """
    setup_logging(suppress_console=True, force=True)
    settings = Settings.from_env()

    try:
        config = load_config(config_path)
        directory = config_path.resolve().parent
        module = ModuleResolver().resolve(directory)
        package_path = module.package_path(str(directory))

        units = []
        for name, exports in group_by_output(config.exports, package_path).items():
            exporter = Exporter(
                exports,
                module,
                package_path,
                formatter=GoFormatter(use_gofmt=False),
                module_cache=settings.module_cache,
            )
            exporter.collect()
            units.append((name, exports, exporter.decisions))
    except ReexporterError as e:
        _fail(e)

    if json_output:
        payload = {
            "config": str(config_path),
            "package_path": package_path,
            "outputs": [
                {
                    "output": name,
                    "exports": [e.model_dump(mode="json", by_alias=True) for e in exports],
                    "decisions": [d._asdict() for d in decisions],
                }
                for name, exports, decisions in units
            ],
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    for name, exports, decisions in units:
        console.print(f"[bold]{escape(name)}[/bold] in [magenta]{escape(package_path)}[/magenta]")
        for export in exports:
            exclude = export.exclude
            flags = [k for k in ("types", "variables", "constants", "functions") if getattr(exclude, k)]
            console.print(
                f"  [cyan]{escape(export.import_path)}[/cyan]"
                f" excludes: {', '.join(flags) or '-'}"
                f" names: {', '.join(f.text for f in exclude.names) or '-'}"
                f" files: {', '.join(f.text for f in exclude.files) or '-'}"
                f" renames: {len(export.rename)}",
                soft_wrap=True,
            )

        table = Table()
        table.add_column("Package", style="magenta")
        table.add_column("File")
        table.add_column("Kind")
        table.add_column("Name", style="cyan")
        table.add_column("Exported as", style="green")
        table.add_column("Reason", style="yellow")
        for d in decisions:
            table.add_row(d.package, d.file, d.kind, d.name, d.export_name if d.included else "", d.reason)
        console.print(table)


if __name__ == "__main__":
    app()
