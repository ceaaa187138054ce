"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Optional, Tuple

import typer
from rich import print

from .errors import CampaignMapError, MapNotFoundError, WaypointNotFoundError, WaypointValidationError
from .map_view.viewport import Point, Size, compute_fit_viewport
from .map_view.waypoints import Waypoint, WaypointCategory, WaypointPlacer, category_info
from .settings.manager import SettingsManager
from .storage import JsonFileKeyValueStore, KeyValueWaypointRepository, MapRepository
from .utils.console_logger import ensure_console_logger

app = typer.Typer(help="Campaign map catalogue and viewport helper")
maps_app = typer.Typer(help="Manage uploaded map images")
waypoints_app = typer.Typer(help="Manage waypoints placed on maps")
app.add_typer(maps_app, name="maps")
app.add_typer(waypoints_app, name="waypoints")


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (MapNotFoundError, WaypointNotFoundError, WaypointValidationError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except CampaignMapError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


@app.callback()
def main(
    ctx: typer.Context,
    store: Optional[Path] = typer.Option(
        None,
        "--store",
        help="JSON document holding maps and waypoints (defaults to the settings value).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
) -> None:
    """Campaign map command line tools."""

    if verbose:
        ensure_console_logger(level=logging.DEBUG)
    ctx.obj = store


def _open_store(ctx: typer.Context) -> JsonFileKeyValueStore:
    path: Optional[Path] = ctx.obj
    if path is None:
        settings = SettingsManager()
        settings.load(persist=False)
        path = settings.storage_path()
    return JsonFileKeyValueStore(path)


def _format_waypoint(record: Waypoint) -> str:
    label = category_info(record.category).label
    return (
        f"[bold]{record.id}[/bold] {record.title} "
        f"[dim]{label} @ {record.x_percent:.2f}%, {record.y_percent:.2f}%[/dim]"
    )


# ----------------------------------------------------------------------
# Maps
# ----------------------------------------------------------------------
@maps_app.command("list")
@_handle_errors
def maps_list(ctx: typer.Context) -> None:
    """List every registered map; the active one is starred."""

    maps = MapRepository(_open_store(ctx)).list_maps()
    if not maps:
        print("[yellow]No maps registered")
        return
    for record in maps:
        marker = "*" if record.is_active else " "
        print(f"{marker} [bold]{record.id}[/bold] {record.title} [dim]{record.image_url}[/dim]")


@maps_app.command("add")
@_handle_errors
def maps_add(
    ctx: typer.Context,
    title: str,
    image_url: str,
    description: str = typer.Option("", "--description", "-d"),
    activate: bool = typer.Option(True, "--activate/--no-activate"),
) -> None:
    """Register a map image."""

    record = MapRepository(_open_store(ctx)).add_map(title, image_url, description, activate=activate)
    print(f"[green]Added map {record.id}")


@maps_app.command("activate")
@_handle_errors
def maps_activate(ctx: typer.Context, map_id: str) -> None:
    """Make MAP_ID the active map."""

    record = MapRepository(_open_store(ctx)).set_active(map_id)
    print(f"[green]Activated map {record.title}")


@maps_app.command("remove")
@_handle_errors
def maps_remove(ctx: typer.Context, map_id: str) -> None:
    """Delete MAP_ID together with its waypoints."""

    store = _open_store(ctx)
    record = MapRepository(store).remove_map(map_id, KeyValueWaypointRepository(store))
    print(f"[green]Removed map {record.title}")


# ----------------------------------------------------------------------
# Waypoints
# ----------------------------------------------------------------------
@waypoints_app.command("list")
@_handle_errors
def waypoints_list(
    ctx: typer.Context,
    map_id: Optional[str] = typer.Option(None, "--map", help="Map id; defaults to the active map."),
) -> None:
    """List waypoints placed on a map."""

    store = _open_store(ctx)
    repository = KeyValueWaypointRepository(store)
    if map_id is None:
        active = MapRepository(store).active_map()
        records = repository.load_waypoints(active.id) if active else repository.all_waypoints()
    else:
        records = repository.load_waypoints(map_id)
    if not records:
        print("[yellow]No waypoints")
        return
    for record in records:
        print(_format_waypoint(Waypoint.from_record(record)))


@waypoints_app.command("add")
@_handle_errors
def waypoints_add(
    ctx: typer.Context,
    title: str,
    x: float = typer.Option(..., "--x", help="Horizontal position in percent (0-100)."),
    y: float = typer.Option(..., "--y", help="Vertical position in percent (0-100)."),
    category: WaypointCategory = typer.Option(WaypointCategory.LOCATION, "--category", case_sensitive=False),
    description: str = typer.Option("", "--description", "-d"),
    map_id: Optional[str] = typer.Option(None, "--map", help="Map id; defaults to the active map."),
) -> None:
    """Place a waypoint at a percent position."""

    title = title.strip()
    if not title:
        raise WaypointValidationError("A waypoint needs a title")

    store = _open_store(ctx)
    maps = MapRepository(store)
    if map_id is None:
        active = maps.active_map()
        map_id = active.id if active else None
    else:
        maps.get(map_id)

    try:
        draft = Waypoint(
            id="new",
            title=title,
            description=description.strip(),
            category=category,
            x_percent=x,
            y_percent=y,
            map_id=map_id,
        )
    except ValueError as exc:
        raise WaypointValidationError(str(exc)) from exc

    record = draft.to_record()
    del record["id"]
    stored = KeyValueWaypointRepository(store).create_waypoint(record)
    print(f"[green]Added waypoint {stored['id']}")


@waypoints_app.command("remove")
@_handle_errors
def waypoints_remove(ctx: typer.Context, waypoint_id: str) -> None:
    """Delete WAYPOINT_ID."""

    KeyValueWaypointRepository(_open_store(ctx)).delete_waypoint(waypoint_id)
    print(f"[green]Removed waypoint {waypoint_id}")


# ----------------------------------------------------------------------
# Viewport helpers
# ----------------------------------------------------------------------
@app.command()
def fit(image_width: int, image_height: int, container_width: int, container_height: int) -> None:
    """Print the viewport that fits an image inside a container."""

    viewport = compute_fit_viewport(
        Size(image_width, image_height),
        Size(container_width, container_height),
    )
    print(f"scale={viewport.scale:g} offset_x={viewport.offset_x:g} offset_y={viewport.offset_y:g}")


@app.command()
def locate(
    x: float,
    y: float,
    image: Tuple[int, int] = typer.Option(..., "--image", help="Image width and height."),
    container: Tuple[int, int] = typer.Option(..., "--container", help="Container width and height."),
) -> None:
    """Print the percent position a click at X, Y lands on in the fitted view."""

    image_size = Size(*image)
    viewport = compute_fit_viewport(image_size, Size(*container))
    staged = WaypointPlacer().stage_click(Point(x, y), image_size, viewport)
    if staged is None:
        typer.echo("Error: click lands outside the map image", err=True)
        raise typer.Exit(1)
    print(f"x={staged.x_percent:g}% y={staged.y_percent:g}%")


if __name__ == "__main__":  # pragma: no cover
    app()
