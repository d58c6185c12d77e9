from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from .dom import Element

TABLE_CSS_CLASS = "table dc-data-table"

logger = logging.getLogger(__name__)


class TableHost(Protocol):
    def width(self) -> int: ...

    def root(self) -> Element: ...

    def dimension(self) -> Any: ...

    def group(self) -> Callable[[Any], Any] | None: ...


class StaticHost:
    """Fixed-width host that owns the table root element."""

    def __init__(
        self,
        dimension: Any,
        group: Callable[[Any], Any] | None = None,
        width: int = 960,
    ) -> None:
        self._dimension = dimension
        self._group = group
        self._width = width
        self._root: Element | None = None
        self.chart_group: str | None = None

    def anchor(self, parent: Element | None = None, chart_group: str | None = None) -> StaticHost:
        root = Element("table", class_name=TABLE_CSS_CLASS)
        if parent is not None:
            parent.insert(root)
        self._root = root
        self.chart_group = chart_group
        return self

    def width(self) -> int:
        return self._width

    def set_width(self, width: int) -> StaticHost:
        self._width = width
        return self

    def root(self) -> Element:
        if self._root is None:
            self.anchor()
        if self._root is None:
            raise RuntimeError("Host has no root element; call anchor() first.")
        return self._root

    def dimension(self) -> Any:
        return self._dimension

    def group(self) -> Callable[[Any], Any] | None:
        return self._group


class ChartRegistry:
    """Charts bucketed by group name so one filter change can redraw them all."""

    def __init__(self) -> None:
        self._charts: dict[str | None, list[Any]] = {}

    def register(self, chart: Any, chart_group: str | None = None) -> None:
        charts = self._charts.setdefault(chart_group, [])
        if chart not in charts:
            charts.append(chart)

    def deregister(self, chart: Any, chart_group: str | None = None) -> None:
        charts = self._charts.get(chart_group, [])
        if chart in charts:
            charts.remove(chart)
        if not charts:
            self._charts.pop(chart_group, None)

    def charts(self, chart_group: str | None = None) -> list[Any]:
        return list(self._charts.get(chart_group, []))

    def render_all(self, chart_group: str | None = None) -> None:
        charts = self.charts(chart_group)
        logger.debug("render_all group=%r charts=%d", chart_group, len(charts))
        for chart in charts:
            chart.render()

    def redraw_all(self, chart_group: str | None = None) -> None:
        charts = self.charts(chart_group)
        logger.debug("redraw_all group=%r charts=%d", chart_group, len(charts))
        for chart in charts:
            chart.redraw()
