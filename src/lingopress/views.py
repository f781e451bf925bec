"""Presentation helpers: language labels, route paths, feed and entry views.

Views are rich renderables built from ContentStore reads.  ViewCache holds
rendered views by route path.  Site owns one ViewCache for the life of the
process and feeds it the publish action's invalidation signal.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from lingopress.content.backends import RequestScopedBackend, StorageBackend
from lingopress.content.models import LANGUAGES, ContentEntry, Language
from lingopress.content.store import ContentStore
from lingopress.errors import EntryNotFound
from lingopress.publish import PublishPayload, PublishResult, publish_entry

logger = logging.getLogger(__name__)

LANGUAGE_LABELS: dict[Language, str] = {
    Language.ZH: "中文",
    Language.JP: "日本語",
    Language.EN: "English",
}

FEED_DESCRIPTIONS: dict[Language, str] = {
    Language.ZH: "已发布的中文稿件会显示在这里。",
    Language.JP: "公開された日本語の原稿がここに表示されます。",
    Language.EN: "Published English drafts will appear here.",
}

EMPTY_FEED_MESSAGE = "还没有内容，前往编辑器发布第一篇吧。"
EDITOR_PATH = "/editor"


def feed_path(language: Language | str) -> str:
    return f"/{Language(language).value}"


def entry_path(language: Language | str, slug: str) -> str:
    return f"/{Language(language).value}/{slug}"


def format_timestamp(published_at: str, timezone: str) -> str:
    """Render a publish time as a medium date and short time in *timezone*.

    An empty or unknown timezone falls back to UTC.
    """
    instant = datetime.fromisoformat(published_at)
    try:
        zone = ZoneInfo(timezone or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        zone = UTC
    local = instant.astimezone(zone)
    return f"{local.year}年{local.month}月{local.day}日 {local:%H:%M}"


def _meta_line(entry: ContentEntry) -> Text:
    meta = Text()
    badges = (
        format_timestamp(entry.published_at, entry.timezone),
        entry.city,
        entry.weather_summary,
    )
    for badge in badges:
        if not badge:
            continue
        if meta.plain:
            meta.append(" · ", style="dim")
        meta.append(badge, style="cyan")
    return meta


def render_home() -> Table:
    """Navigation table: one row per language feed plus the editor."""
    table = Table(title="lingopress", show_header=True)
    table.add_column("Route")
    table.add_column("Page")
    for language in LANGUAGES:
        table.add_row(feed_path(language), LANGUAGE_LABELS[language])
    table.add_row(EDITOR_PATH, "Editor")
    return table


def render_feed(store: ContentStore, language: Language | str) -> RenderableType:
    """The language's entries, most recent first."""
    language = Language(language)
    title = f"{LANGUAGE_LABELS[language]}发布"
    entries = store.list_entries(language)

    if not entries:
        return Panel(
            Text(EMPTY_FEED_MESSAGE, style="dim"),
            title=title,
            subtitle=FEED_DESCRIPTIONS[language],
            border_style="dim",
        )

    table = Table(title=title, caption=FEED_DESCRIPTIONS[language], show_lines=True)
    table.add_column("Text", ratio=3)
    table.add_column("Published", no_wrap=True)
    table.add_column("City")
    table.add_column("Weather")
    table.add_column("Link", style="dim", no_wrap=True)
    for entry in entries:
        table.add_row(
            Text(entry.text),
            format_timestamp(entry.published_at, entry.timezone),
            Text(entry.city),
            Text(entry.weather_summary),
            entry_path(language, entry.slug),
        )
    return table


def render_entry(store: ContentStore, language: Language | str, slug: str) -> RenderableType:
    """A single entry page.

    Raises:
        EntryNotFound: If the language has no entry with *slug*.
    """
    language = Language(language)
    entry = store.get_entry(language, slug)
    if entry is None:
        raise EntryNotFound(language.value, slug)

    label = LANGUAGE_LABELS[language]
    back = Text(f"← 返回{label}列表 ({feed_path(language)})", style="dim")
    body = Group(Text(entry.text), Text(""), _meta_line(entry))
    return Group(back, Panel(body, title=f"{label}成稿", subtitle=entry.slug))


class ViewCache:
    """Rendered views keyed by route path."""

    def __init__(self) -> None:
        self._views: dict[str, RenderableType] = {}

    def __contains__(self, path: object) -> bool:
        return path in self._views

    def get_or_render(self, path: str, render: Callable[[], RenderableType]) -> RenderableType:
        if path not in self._views:
            self._views[path] = render()
        return self._views[path]

    def invalidate(self, paths: Iterable[str]) -> None:
        for path in paths:
            if self._views.pop(path, None) is not None:
                logger.debug("Invalidated cached view %s", path)


class Site:
    """Cached views over one storage backend.

    Every call opens its own request-scoped store, so reads are memoized
    only within that call.  Rendered views outlive the call and stay cached
    until a publish through :meth:`publish` invalidates their paths.
    """

    def __init__(
        self,
        backend: StorageBackend,
        cache: ViewCache | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.backend = backend
        self.cache = cache if cache is not None else ViewCache()
        self._clock = clock

    def open_store(self) -> ContentStore:
        scoped = RequestScopedBackend(self.backend)
        if self._clock is None:
            return ContentStore(scoped)
        return ContentStore(scoped, clock=self._clock)

    def feed(self, language: Language | str) -> RenderableType:
        store = self.open_store()
        return self.cache.get_or_render(feed_path(language), lambda: render_feed(store, language))

    def entry(self, language: Language | str, slug: str) -> RenderableType:
        """Raises EntryNotFound without caching anything for the path."""
        store = self.open_store()
        return self.cache.get_or_render(
            entry_path(language, slug), lambda: render_entry(store, language, slug)
        )

    def publish(self, payload: PublishPayload) -> PublishResult:
        return publish_entry(payload, self.open_store(), on_invalidate=self.cache.invalidate)
