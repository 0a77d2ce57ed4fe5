"""
adapters.cli.main - CLI adapter for Ingredient Snap.

Mirrors src/adapters/rest/ but for terminal use. Uses the same
ServiceFactory and services as the REST API, so detection fallbacks and
normalization behave identically.

Commands
--------
  detect    Detect ingredients in a local photo
  parse     Normalize a typed ingredient list
  recipes   Suggest recipes for the given ingredients

Usage
-----
  python run_cli.py detect fridge.jpg
  python run_cli.py parse "Tomatoes, red onion; basmati rice"
  python run_cli.py recipes tomatoes onions rice
"""

from __future__ import annotations

import asyncio
import mimetypes
import sys
from pathlib import Path

# ── Ensure src/ is on the path ──
_SRC = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(_SRC))

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from domain.models import ImageBlob
from factory import ServiceFactory
from infrastructure.config import Settings, configure_logging

__version__ = "0.1.0"

console = Console()
app = typer.Typer(
    help="Ingredient Snap CLI",
    add_completion=False,
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _make_factory(verbose: bool) -> ServiceFactory:
    config = Settings.from_env()
    configure_logging(
        "DEBUG" if verbose else config.log_level,
        fmt="%(levelname)s %(name)s: %(message)s",
    )
    return ServiceFactory(config)


async def _run_then_close(factory: ServiceFactory, coro):
    try:
        return await coro
    finally:
        await factory.aclose()


def _print_ingredients(ingredients: list[str], title: str, style: str = "green") -> None:
    table = Table(title=title, box=box.ROUNDED, show_header=False)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Ingredient", style=style)
    for i, name in enumerate(ingredients, 1):
        table.add_row(str(i), name)
    console.print(table)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"ingredient-snap v{__version__}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command()
def detect(
    image_path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    verbose: bool = typer.Option(False, "--verbose", help="Show provider logs."),
) -> None:
    """Detect ingredients in a local photo."""
    factory = _make_factory(verbose)
    service = factory.create_ingredient_detection_service()
    mime_type = mimetypes.guess_type(image_path.name)[0] or "image/jpeg"
    image = ImageBlob(data=image_path.read_bytes(), mime_type=mime_type, filename=image_path.name)

    with console.status("[bold cyan]Detecting ingredients…", spinner="dots"):
        outcome = asyncio.run(_run_then_close(factory, service.detect(image)))

    style = "yellow" if outcome.is_degraded else "green"
    _print_ingredients(outcome.ingredients, f"Ingredients ({outcome.source.value})", style)
    if outcome.message:
        console.print(f"[{style}]{outcome.message}[/{style}]")


@app.command()
def parse(text: str = typer.Argument(..., help="Comma-separated ingredients.")) -> None:
    """Normalize a typed ingredient list."""
    factory = _make_factory(verbose=False)
    ingredients = factory.create_ingredient_detection_service().from_text(text)
    if not ingredients:
        console.print("[bold red]No ingredients found in the input.[/bold red]")
        raise typer.Exit(code=1)
    _print_ingredients(ingredients, "Ingredients")


@app.command()
def recipes(
    ingredients: list[str] = typer.Argument(..., help="Ingredients to cook with."),
    verbose: bool = typer.Option(False, "--verbose", help="Show LLM logs."),
) -> None:
    """Suggest recipes for the given ingredients."""
    factory = _make_factory(verbose)
    service = factory.create_recipe_generation_service()

    try:
        with console.status("[bold cyan]Generating recipes…", spinner="dots"):
            suggestions = asyncio.run(_run_then_close(factory, service.generate(ingredients)))
    except ValueError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=1)

    if suggestions.is_fallback:
        console.print("[yellow]Recipe generator unavailable — showing a fallback recipe.[/yellow]")

    for recipe in suggestions.recipes:
        body = (
            f"{recipe.description}\n\n"
            f"[bold]Difficulty:[/bold] {recipe.difficulty}   "
            f"[bold]Time:[/bold] {recipe.cook_time} min   "
            f"[bold]Serves:[/bold] {recipe.servings}\n\n"
            "[bold]Ingredients[/bold]\n"
            + "\n".join(f"  • {item}" for item in recipe.ingredients)
            + "\n\n[bold]Steps[/bold]\n"
            + "\n".join(f"  {i}. {step}" for i, step in enumerate(recipe.instructions, 1))
        )
        console.print(Panel(body, title=f"[bold]{recipe.title}[/bold]", border_style="blue"))


# ---------------------------------------------------------------------------
# Global version option
# ---------------------------------------------------------------------------

@app.callback()
def _callback(
    version: bool = typer.Option(
        False, "--version", "-v",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Ingredient Snap CLI"""


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
