from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from adapters.excalidraw.renderer import ExcalidrawDiagramRenderer
from adapters.excalidraw.repository import FileSystemExcalidrawRepository
from adapters.excalidraw.url_encoder import build_excalidraw_url
from adapters.filesystem.json_utils import write_bytes_atomic
from adapters.layout.stacked import StackedLayoutEngine
from adapters.svg.renderer import SvgDiagramRenderer
from app.config import AppSettings, DiagramFormat
from domain.models import ExcalidrawDocument, Plan, RenderPass

FORMAT_SUFFIXES: dict[str, str] = {
    "svg": ".svg",
    "excalidraw": ".excalidraw",
}


@dataclass(frozen=True)
class RenderedDiagram:
    format: DiagramFormat
    render_pass: RenderPass
    svg: str | None = None
    excalidraw: ExcalidrawDocument | None = None

    @property
    def suffix(self) -> str:
        return FORMAT_SUFFIXES[self.format]

    def save(self, path: Path) -> None:
        if self.excalidraw is not None:
            FileSystemExcalidrawRepository().save(self.excalidraw, path)
            return
        write_bytes_atomic(path, (self.svg or "").encode("utf-8"))

    def excalidraw_url(self, base_url: str) -> str:
        if self.excalidraw is None:
            msg = "Excalidraw URLs are only available for the excalidraw format"
            raise ValueError(msg)
        return build_excalidraw_url(base_url, self.excalidraw)


def render_diagram(
    plan: Plan, settings: AppSettings, diagram_format: DiagramFormat | None = None
) -> RenderedDiagram:
    resolved_format = diagram_format or settings.render.format
    metrics = settings.render.to_node_metrics()
    layout_config = settings.layout.to_layout_config()

    if resolved_format == "excalidraw":
        excal_renderer = ExcalidrawDiagramRenderer(
            metrics=metrics,
            margin=settings.render.margin,
            curve_segments=settings.render.curve_segments,
        )
        render_pass = StackedLayoutEngine(excal_renderer, layout_config).render(plan)
        return RenderedDiagram(
            format=resolved_format,
            render_pass=render_pass,
            excalidraw=excal_renderer.to_document(),
        )
    if resolved_format == "svg":
        svg_renderer = SvgDiagramRenderer(metrics=metrics, margin=settings.render.margin)
        render_pass = StackedLayoutEngine(svg_renderer, layout_config).render(plan)
        return RenderedDiagram(
            format=resolved_format, render_pass=render_pass, svg=svg_renderer.to_svg()
        )
    msg = f"Unsupported diagram format: {resolved_format}"
    raise ValueError(msg)
