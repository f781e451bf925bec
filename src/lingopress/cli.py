"""CLI interface for lingopress."""

import os
from pathlib import Path
from typing import Annotated, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import typer
from rich.console import Console
from rich.markup import escape

from lingopress.config import load_config
from lingopress.content.models import Language
from lingopress.errors import ConfigError, EntryNotFound, LingopressError, PublishValidationError
from lingopress.publish import PublishPayload
from lingopress.views import Site, entry_path, render_home

app = typer.Typer(
    name="lingopress",
    help="Publish translated drafts of Chinese source text to per-language feeds.",
    no_args_is_help=True,
)

console = Console()

PUBLISH_FAILED_MESSAGE = "发布失败，请稍后重试。"
EMPTY_SOURCE_MESSAGE = "中文原文不能为空"
UNKNOWN_CITY = "未知城市"
WEATHER_UNAVAILABLE = "天气信息不可用"
LOCALTIME_PATH = Path("/etc/localtime")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from lingopress import __version__

        console.print(f"lingopress {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to a .lingopress.toml config file.",
        ),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """lingopress - multilingual publishing from Chinese source text."""
    try:
        settings = load_config(config)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)
    ctx.obj = Site(settings.create_backend())


def _is_zone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def _local_timezone() -> str:
    """IANA name of the host's zone: $TZ, then the /etc/localtime link, then UTC."""
    candidates = [os.environ.get("TZ", "").lstrip(":")]
    try:
        target = LOCALTIME_PATH.resolve(strict=True).as_posix()
    except (OSError, RuntimeError):
        target = ""
    if "zoneinfo/" in target:
        candidates.append(target.split("zoneinfo/", 1)[1])
    for name in candidates:
        if name and _is_zone(name):
            return name
    return "UTC"


@app.command()
def home() -> None:
    """List the language feeds and the editor."""
    console.print(render_home())


@app.command()
def feed(
    ctx: typer.Context,
    language: Annotated[Language, typer.Argument(help="Feed language.")],
) -> None:
    """Show a language feed, most recent entry first."""
    site: Site = ctx.obj
    try:
        view = site.feed(language)
    except LingopressError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)
    console.print(view)


@app.command()
def show(
    ctx: typer.Context,
    language: Annotated[Language, typer.Argument(help="Entry language.")],
    slug: Annotated[str, typer.Argument(help="Entry slug, e.g. en-20261019081530123.")],
) -> None:
    """Show a single published entry."""
    site: Site = ctx.obj
    try:
        view = site.entry(language, slug)
    except EntryNotFound:
        console.print(f"[yellow]404 Not Found:[/yellow] {entry_path(language, slug)}")
        raise typer.Exit(1)
    except LingopressError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)
    console.print(view)


@app.command()
def publish(
    ctx: typer.Context,
    language: Annotated[
        Language,
        typer.Option("--language", "-l", help="Target language of the draft."),
    ] = Language.ZH,
    text: Annotated[
        Optional[str],
        typer.Option(
            "--text",
            "-t",
            help="The translated draft. A blank zh draft defaults to the source text.",
        ),
    ] = None,
    text_file: Annotated[
        Optional[Path],
        typer.Option(
            "--text-file",
            help="Read the draft from a UTF-8 file instead of --text.",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    source_text: Annotated[
        str,
        typer.Option("--source-text", "-s", help="The Chinese source text (required)."),
    ] = "",
    timezone: Annotated[
        Optional[str],
        typer.Option(
            "--timezone",
            help="IANA timezone of the author, e.g. Asia/Shanghai. Defaults to the local zone.",
        ),
    ] = None,
    city: Annotated[str, typer.Option("--city", help="City shown with the entry.")] = "",
    weather: Annotated[
        str,
        typer.Option("--weather", help="Weather summary shown with the entry."),
    ] = "",
) -> None:
    """Publish a draft (the editor's publish button)."""
    if text is not None and text_file is not None:
        console.print("[red]Error:[/red] use either --text or --text-file, not both")
        raise typer.Exit(1)
    if text_file is not None:
        try:
            text = text_file.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            console.print(
                f"[red]Error:[/red] draft file is not valid UTF-8 text: {escape(str(text_file))}"
            )
            raise typer.Exit(1)

    source_text = source_text.strip()
    if not source_text:
        console.print(f"[red]{EMPTY_SOURCE_MESSAGE}[/red]")
        raise typer.Exit(1)

    text = (text or "").strip()
    if not text and language == Language.ZH:
        text = source_text

    payload = PublishPayload(
        language=language,
        text=text,
        source_text=source_text,
        timezone=(timezone or "").strip() or _local_timezone(),
        city=city.strip() or UNKNOWN_CITY,
        weather_summary=weather.strip() or WEATHER_UNAVAILABLE,
    )
    site: Site = ctx.obj
    try:
        result = site.publish(payload)
    except PublishValidationError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)
    except LingopressError as exc:
        console.print(f"[red]{PUBLISH_FAILED_MESSAGE}[/red]")
        console.print(f"[dim]{escape(str(exc))}[/dim]")
        raise typer.Exit(1)

    entry = result.entry
    console.print(f"[green]Published[/green] {entry.slug}")
    console.print(f"  Invalidated: {', '.join(result.invalidated_paths)}")
    try:
        console.print(site.entry(entry.language, entry.slug))
    except LingopressError as exc:
        console.print(
            f"[yellow]Published, but the entry could not be shown:[/yellow] {escape(str(exc))}"
        )


if __name__ == "__main__":
    app()
