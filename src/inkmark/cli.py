import dataclasses
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from .config import load_config
from .core import (
    MARGIN,
    OPACITY_MAX,
    OPACITY_MIN,
    OPACITY_STEP,
    OUTPUT_FORMATS,
    SIZE_MAX,
    SIZE_MIN,
    SIZE_STEP,
)
from .core.watermark_config import LogoPosition, WatermarkConfig
from .errors import ImageDecodeError, LogoFetchError, SettingsError
from .logging_config import setup_logging
from .processors.image import (
    SUPPORTED_IMAGE_FORMATS,
    is_supported_image,
    output_path_for,
    process_image,
    render_image,
    render_preview,
    write_result,
)
from .processors.logo import clear_logo_cache, load_logo
from .settings_store import SettingsRepository, upload_logo

app = typer.Typer(
    name="inkmark",
    help="Watermark tattoo portfolio images with the studio logo.",
    add_completion=True,
)
settings_app = typer.Typer(help="Show and edit the saved watermark settings.")
app.add_typer(settings_app, name="settings")

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    settings: Optional[Path] = typer.Option(
        None,
        "--settings",
        help="Watermark settings file. Defaults to INKMARK_SETTINGS_PATH.",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Load configuration and set up logging for every command."""
    config = load_config()
    setup_logging(debug or config["DEBUG_MODE"])
    ctx.obj = {
        "config": config,
        "repo": SettingsRepository(settings or config["SETTINGS_PATH"]),
    }


def get_files_to_process(path: Path, recursive: bool = False) -> list[Path]:
    """Get all supported images from path (file or directory)."""
    if path.is_file():
        return [path]

    pattern = "**/*" if recursive else "*"
    return sorted(f for f in path.glob(pattern) if f.is_file() and is_supported_image(f))


def load_settings(ctx: typer.Context) -> WatermarkConfig:
    try:
        return ctx.obj["repo"].load()
    except SettingsError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)


def resolve_logo(ctx: typer.Context, config: WatermarkConfig) -> Optional[bytes]:
    """Fetch the configured logo, or None so images pass through unchanged."""
    if not config.enabled or not config.has_logo:
        return None
    try:
        return load_logo(config.logo_url, ctx.obj["config"]["HTTP_TIMEOUT"])
    except LogoFetchError as e:
        console.print(f"[yellow]Logo unavailable, images are kept unchanged:[/yellow] {escape(str(e))}")
        return None


def check_format(output_format: str) -> str:
    output_format = output_format.upper()
    if output_format not in OUTPUT_FORMATS:
        console.print(f"[red]Unsupported format {output_format}[/red], use one of {', '.join(OUTPUT_FORMATS)}")
        raise typer.Exit(1)
    return output_format


def snap(value: float, step: float) -> float:
    """Round a form value to its slider step."""
    return round(round(value / step) * step, 2)


@app.command()
def apply(
    ctx: typer.Context,
    path: Path = typer.Argument(
        ...,
        help="Path to an image or a directory of portfolio images",
        exists=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path (file or directory). Defaults to input location with the suffix.",
    ),
    recursive: bool = typer.Option(
        False,
        "--recursive",
        "-r",
        help="Process directories recursively",
    ),
    suffix: str = typer.Option(
        "_watermarked",
        "--suffix",
        "-s",
        help="Suffix to add to output filenames",
    ),
    overwrite: bool = typer.Option(
        False,
        "--overwrite",
        "-y",
        help="Overwrite existing output files without prompting",
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format: JPEG, PNG or WEBP. Defaults to INKMARK_OUTPUT_FORMAT.",
    ),
):
    """
    Apply the saved watermark settings to images.

    Images that cannot be watermarked are written unchanged.

    Examples:
        inkmark apply tattoo.jpg
        inkmark apply ./portfolio/ -r -o ./public/portfolio
    """
    app_config = ctx.obj["config"]
    output_format = check_format(output_format or app_config["OUTPUT_FORMAT"])
    files = get_files_to_process(path, recursive)

    if not files:
        console.print(f"[red]No supported images found in {path}[/red]")
        console.print(f"Supported formats: {SUPPORTED_IMAGE_FORMATS}")
        raise typer.Exit(1)

    config = load_settings(ctx)
    logo = resolve_logo(ctx, config)
    if not config.enabled:
        console.print("[yellow]Watermarking is disabled, images are copied unchanged[/yellow]")

    # Determine output directory for batch processing
    output_dir = None
    if path.is_dir() and output:
        output_dir = output
        output_dir.mkdir(parents=True, exist_ok=True)

    console.print(
        Panel(
            f"Watermarking {len(files)} image(s)",
            title="inkmark",
            border_style="blue",
        )
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        main_task = progress.add_task("Processing images...", total=len(files))

        for file_path in files:
            progress.update(main_task, description=f"Processing {file_path.name}...")

            try:
                data, watermarked, error = render_image(
                    file_path,
                    config,
                    logo,
                    output_format=output_format,
                    quality=app_config["OUTPUT_QUALITY"],
                )
            except OSError as e:
                console.print(f"  [red]Error reading {file_path}:[/red] {escape(str(e))}")
                progress.advance(main_task)
                continue

            if output and path.is_file():
                file_output = output
            else:
                file_output = output_path_for(file_path, watermarked, suffix, output_format, output_dir)

            # Check for overwrite
            if file_output.exists() and not overwrite:
                if not typer.confirm(f"Overwrite {file_output}?"):
                    progress.advance(main_task)
                    continue

            try:
                result = write_result(file_path, file_output, data, watermarked, error)
            except OSError as e:
                console.print(f"  [red]Error processing {file_path}:[/red] {escape(str(e))}")
            else:
                if result.watermarked:
                    console.print(f"  [green]Watermarked:[/green] {result.output_path}")
                elif result.error:
                    console.print(f"  [yellow]Kept original ({escape(result.error)}):[/yellow] {result.output_path}")
                else:
                    console.print(f"  [dim]Copied:[/dim] {result.output_path}")

            progress.advance(main_task)

    console.print("[bold green]Done![/bold green]")


@app.command()
def preview(
    ctx: typer.Context,
    image: Path = typer.Argument(..., help="Image to preview the watermark on", exists=True, dir_okay=False),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the preview image here instead of printing a data URI",
    ),
    opacity: Optional[float] = typer.Option(None, help="Override logo opacity"),
    size: Optional[float] = typer.Option(None, help="Override logo width in percent of the image"),
    position: Optional[LogoPosition] = typer.Option(None, help="Override logo position"),
    enabled: Optional[bool] = typer.Option(None, "--enabled/--disabled", help="Override watermarking on/off"),
    logo: Optional[str] = typer.Option(None, help="Override logo path, URL or data URI"),
    output_format: Optional[str] = typer.Option(None, "--format", "-f", help="JPEG, PNG or WEBP"),
):
    """
    Preview the watermark without saving the settings.

    Overrides apply to this preview only and are not range-checked.
    """
    app_config = ctx.obj["config"]
    output_format = check_format(output_format or app_config["OUTPUT_FORMAT"])

    overrides = {
        "opacity": opacity,
        "size_percent": size,
        "position": position,
        "enabled": enabled,
        "logo_url": logo,
    }
    config = dataclasses.replace(
        load_settings(ctx),
        **{key: value for key, value in overrides.items() if value is not None},
    )
    logo_bytes = resolve_logo(ctx, config)

    if output:
        result = process_image(
            image,
            config,
            logo_bytes,
            output_path=output,
            output_format=output_format,
            quality=app_config["OUTPUT_QUALITY"],
        )
        console.print(f"[green]Preview saved:[/green] {result.output_path}")
    else:
        typer.echo(
            render_preview(
                image,
                config,
                logo_bytes,
                output_format=output_format,
                quality=app_config["OUTPUT_QUALITY"],
            )
        )


def print_settings(config: WatermarkConfig) -> None:
    table = Table(title="Watermark settings", show_header=False)
    table.add_row("Enabled", "on" if config.enabled else "off")
    table.add_row("Logo", escape(config.logo_url) or "[dim]none[/dim]")
    table.add_row("Opacity", f"{round(config.opacity * 100)}%")
    table.add_row("Size", f"{config.size_percent:g}%")
    table.add_row("Position", config.position.value)
    console.print(table)


@settings_app.command("show")
def settings_show(ctx: typer.Context):
    """Show the saved watermark settings."""
    print_settings(load_settings(ctx))


@settings_app.command("set")
def settings_set(
    ctx: typer.Context,
    opacity: Optional[float] = typer.Option(None, min=OPACITY_MIN, max=OPACITY_MAX, help="Logo opacity"),
    size: Optional[float] = typer.Option(None, min=SIZE_MIN, max=SIZE_MAX, help="Logo width in percent"),
    position: Optional[LogoPosition] = typer.Option(None, help="Logo position"),
    enabled: Optional[bool] = typer.Option(None, "--enabled/--disabled", help="Turn watermarking on or off"),
    logo_url: Optional[str] = typer.Option(None, "--logo-url", help="Logo path, URL or data URI"),
):
    """Change and save watermark settings."""
    changes = {}
    if opacity is not None:
        changes["opacity"] = snap(opacity, OPACITY_STEP)
    if size is not None:
        changes["size_percent"] = snap(size, SIZE_STEP)
    if position is not None:
        changes["position"] = position
    if enabled is not None:
        changes["enabled"] = enabled
    if logo_url is not None:
        changes["logo_url"] = logo_url
        clear_logo_cache()

    if not changes:
        console.print("[yellow]Nothing to change[/yellow]")
        print_settings(load_settings(ctx))
        return

    try:
        config = ctx.obj["repo"].update(**changes)
    except SettingsError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print("[green]Watermark settings saved successfully[/green]")
    print_settings(config)


@settings_app.command("upload-logo")
def settings_upload_logo(
    ctx: typer.Context,
    logo: Path = typer.Argument(..., help="PNG, JPEG or WEBP logo, transparent PNG works best", exists=True, dir_okay=False),
):
    """Store a logo and use it for the watermark."""
    try:
        stored = upload_logo(logo, Path(ctx.obj["config"]["LOGO_DIR"]))
        ctx.obj["repo"].update(logo_url=str(stored))
    except (ImageDecodeError, ValueError, SettingsError) as e:
        console.print(f"[red]Failed to upload logo:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    clear_logo_cache()
    console.print(f"[green]Logo uploaded successfully:[/green] {stored}")


@settings_app.command("reset")
def settings_reset(ctx: typer.Context):
    """Restore the default watermark settings."""
    try:
        config = ctx.obj["repo"].reset()
    except SettingsError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)
    print_settings(config)


@app.command()
def info():
    """Display information about supported formats and the watermark algorithm."""
    console.print(
        Panel(
            "[bold]inkmark[/bold]\n\n"
            "Blends the studio logo onto portfolio images.\n\n"
            f"[cyan]Positions:[/cyan] {', '.join(p.value for p in LogoPosition)}\n"
            f"[cyan]Corner margin:[/cyan] {MARGIN}px\n"
            f"[cyan]Opacity range:[/cyan] {OPACITY_MIN:g}-{OPACITY_MAX:g} (step {OPACITY_STEP:g})\n"
            f"[cyan]Size range:[/cyan] {SIZE_MIN:g}-{SIZE_MAX:g}% of image width\n"
            f"[cyan]Supported Image Formats:[/cyan] {', '.join(sorted(SUPPORTED_IMAGE_FORMATS))}\n"
            f"[cyan]Output Formats:[/cyan] {', '.join(OUTPUT_FORMATS)}\n\n"
            "[dim]Logo height follows its own aspect ratio; transparent PNG logos work best[/dim]",
            title="About",
            border_style="blue",
        )
    )


if __name__ == "__main__":
    app()
