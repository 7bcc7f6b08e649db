"""Cache commands -- inspect and clear the persistent caches.

Both commands work on the cache directory only and do not need settings.
"""

from __future__ import annotations

from pathlib import Path

import typer

from apiconnector.cache import FallbackCache, TaggedCache
from apiconnector.commands.context import cache_config_from_context, exit_on_error
from apiconnector.config import get_cache_dir
from apiconnector.output import print_table, success

cache_app = typer.Typer(no_args_is_help=True)


def _cache_dir(ctx: typer.Context) -> Path:
    config = cache_config_from_context(ctx)
    return Path(config.directory) if config.directory else get_cache_dir()


@cache_app.command("stats")
def cache_stats(ctx: typer.Context) -> None:
    """Show entry counts and locations of both caches."""
    with exit_on_error():
        cache_dir = _cache_dir(ctx)
        rows: list[list[str]] = []
        for name, store_cls in (("fallback", FallbackCache), ("objects", TaggedCache)):
            store = store_cls(cache_dir)
            try:
                stats = store.stats()
            finally:
                store.close()
            rows.append([name, str(stats["size"]), stats["directory"]])
        print_table(["cache", "entries", "directory"], rows, title="Caches")


@cache_app.command("clear")
def cache_clear(
    ctx: typer.Context,
    fallback: bool = typer.Option(True, "--fallback/--no-fallback", help="Clear response bodies."),
    objects: bool = typer.Option(True, "--objects/--no-objects", help="Clear cached objects."),
) -> None:
    """Remove all entries from the selected caches."""
    with exit_on_error():
        cache_dir = _cache_dir(ctx)
        cleared: list[str] = []
        if fallback:
            store = FallbackCache(cache_dir)
            try:
                store.clear()
            finally:
                store.close()
            cleared.append("fallback")
        if objects:
            tagged = TaggedCache(cache_dir)
            try:
                tagged.clear()
            finally:
                tagged.close()
            cleared.append("objects")
        success(f"Cleared: {', '.join(cleared) if cleared else 'nothing'}")
