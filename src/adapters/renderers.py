"""Renderers que escriben ficheros a partir de un `FeedResult`.

Implementan `core.interfaces.source.Renderer` para que `run_feed` pueda
entregar el resultado a varios destinos a la vez (consola + HTML + JSON).
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from adapters.json_exporter import export_feed_json
from adapters.report_exporter import export_feed_html
from core.domain.models import FeedResult
from core.interfaces.source import Renderer


class JsonFileRenderer(Renderer):
    def __init__(self, output_path: Path) -> None:
        self.output_path = output_path

    def render(self, result: FeedResult, region_map: Mapping[str, str]) -> None:
        export_feed_json(result=result, output_path=self.output_path)


class HtmlFileRenderer(Renderer):
    def __init__(self, output_path: Path) -> None:
        self.output_path = output_path

    def render(self, result: FeedResult, region_map: Mapping[str, str]) -> None:
        export_feed_html(result=result, region_map=region_map, output_path=self.output_path)


class CompositeRenderer(Renderer):
    """Reparte el mismo resultado entre varios renderers, en orden."""

    def __init__(self, *renderers: Renderer) -> None:
        self.renderers = list(renderers)

    def render(self, result: FeedResult, region_map: Mapping[str, str]) -> None:
        for renderer in self.renderers:
            renderer.render(result, region_map)
