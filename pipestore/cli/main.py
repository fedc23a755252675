"""pipestore CLI - Main commands."""
import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

from ..core.exceptions import PipestoreException
from ..core.pipeline import Pipeline, TransferResult
from ..core.transforms import Stats

app = typer.Typer(
    name="pipestore",
    help="Transfer files to and from storage backends",
    add_completion=False
)
console = Console()


class Backend:
    """Backend selection shared by all commands."""

    def __init__(self, adapter: str, root: Optional[Path], base_url: Optional[str]):
        self.adapter = adapter
        self.root = root
        self.base_url = base_url

    def config(self) -> Dict[str, Any]:
        if self.adapter == 'filesystem':
            return {'root': str((self.root or Path.cwd()).resolve())}
        if self.adapter == 'http':
            if not self.base_url:
                console.print("[red]--base-url is required for the http adapter[/red]")
                raise typer.Exit(1)
            return {'base_url': self.base_url}
        return {}


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


@app.callback()
def main_callback(
    ctx: typer.Context,
    adapter: str = typer.Option("filesystem", "--adapter", "-a", help="Storage adapter (filesystem, http)"),
    root: Path = typer.Option(None, "--root", "-r", help="Root directory for the filesystem adapter"),
    base_url: str = typer.Option(None, "--base-url", "-u", help="Base URL for the http adapter"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Transfer files to and from storage backends."""
    if verbose:
        import logging
        from .. import setup_logging

        logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
        setup_logging(logging.DEBUG)

    ctx.obj = Backend(adapter, root, base_url)


def build_pipeline(storage, steps: List[Tuple[str, Optional[Dict[str, Any]]]]) -> Pipeline:
    """Register and use the selected transforms, in order."""
    pipeline = storage.pipeline()
    for identity, options in steps:
        storage.register_transform(identity)
        pipeline.use(identity, options)
    return pipeline


def select_steps(checksum: Optional[str], compress: bool, progress: bool, upload: bool):
    """
    Order the transforms so that checksum and progress see the original data.

    Uploads compress last, downloads decompress first.
    """
    steps = []
    if progress:
        steps.append(('progress', None))
    if checksum:
        steps.append(('checksum', {'algorithm': checksum}))
    if compress:
        steps.append(('compress', None))
    return steps if upload else steps[::-1]


def format_value(value: Any) -> str:
    if isinstance(value, Stats):
        return f"{value.processed:,} bytes in {value.duration:.2f}s"
    if isinstance(value, dict):
        return ", ".join(f"{k}={v}" for k, v in value.items() if v is not None)
    if isinstance(value, (list, tuple)):
        return ", ".join(map(str, value)) or "-"
    return str(value)


def print_result(title: str, result: TransferResult) -> None:
    table = Table(title=title)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("location", result.location)
    table.add_row("adapter", result.adapter)
    table.add_row("transforms", format_value(result.transforms))
    for identity in result.transforms:
        table.add_row(identity, format_value(result[identity]))

    console.print(table)


async def transfer(description: str, total: Optional[int], show_progress: bool, start) -> TransferResult:
    """Run a transfer, with a progress bar when requested."""
    if not show_progress:
        return await start({})

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console
    ) as progress:
        task = progress.add_task(description, total=total)

        def on_progress(stats: Stats):
            progress.update(task, completed=stats.processed, total=stats.total)

        return await start({'progress': {'total': total, 'on_progress': on_progress}})


@app.command()
def upload(
    ctx: typer.Context,
    file_path: Path = typer.Argument(..., help="Local file to upload", exists=True, dir_okay=False),
    dest: str = typer.Option(None, "--dest", "-d", help="Destination directory"),
    name: str = typer.Option(None, "--name", "-n", help="File name (random UUID if omitted)"),
    checksum: str = typer.Option(None, "--checksum", "-c", help="Checksum algorithm (md5, sha1, sha256, ...)"),
    compress: bool = typer.Option(False, "--compress", "-z", help="Gzip the file before storing it"),
    progress: bool = typer.Option(False, "--progress", "-p", help="Show a progress bar"),
):
    """Upload a file."""
    from .. import FileSource, Storage

    backend: Backend = ctx.obj

    async def do_upload():
        try:
            async with Storage(backend.adapter, backend.config()) as storage:
                pipeline = build_pipeline(storage, select_steps(checksum, compress, progress, upload=True))

                def start(extra: Dict[str, Any]):
                    options = {'directory': dest, 'name': name, **extra}
                    if compress:
                        options['compress'] = {'mode': 'compress'}
                    return pipeline.upload(FileSource(file_path), options)

                result = await transfer(
                    f"Uploading {file_path.name}", file_path.stat().st_size, progress, start
                )
        except (PipestoreException, OSError) as e:
            console.print(f"[red]Upload failed: {e}[/red]")
            raise typer.Exit(1)

        print_result(f"Uploaded {file_path.name}", result)

    run_async(do_upload())


@app.command()
def download(
    ctx: typer.Context,
    location: str = typer.Argument(..., help="Location of the file on the storage"),
    output: Path = typer.Argument(..., help="Output file path"),
    checksum: str = typer.Option(None, "--checksum", "-c", help="Checksum algorithm (md5, sha1, sha256, ...)"),
    compress: bool = typer.Option(False, "--compress", "-z", help="Gunzip the stored file"),
    progress: bool = typer.Option(False, "--progress", "-p", help="Show a progress bar"),
):
    """Download a file."""
    from .. import FileSink, Storage

    backend: Backend = ctx.obj

    async def do_download():
        try:
            async with Storage(backend.adapter, backend.config()) as storage:
                pipeline = build_pipeline(storage, select_steps(checksum, compress, progress, upload=False))

                def start(extra: Dict[str, Any]):
                    options = dict(extra)
                    if compress:
                        options['compress'] = {'mode': 'decompress'}
                    return pipeline.download(location, FileSink(output), options)

                result = await transfer(f"Downloading {location}", None, progress, start)
        except (PipestoreException, OSError) as e:
            console.print(f"[red]Download failed: {e}[/red]")
            raise typer.Exit(1)

        print_result(f"Downloaded to {output}", result)

    run_async(do_download())


@app.command()
def remove(
    ctx: typer.Context,
    location: str = typer.Argument(..., help="Location of the file on the storage"),
):
    """Remove a file."""
    from .. import Storage

    backend: Backend = ctx.obj

    async def do_remove():
        try:
            async with Storage(backend.adapter, backend.config()) as storage:
                removed = await storage.remove(location)
        except (PipestoreException, OSError) as e:
            console.print(f"[red]Remove failed: {e}[/red]")
            raise typer.Exit(1)

        console.print(f"[green]Removed:[/green] {removed}")

    run_async(do_remove())


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
