from __future__ import annotations

from typing import Protocol

from domain.models import CubicCurve, NodeBox, NodeKind, Point, Size


class DiagramRenderer(Protocol):
    def create_node(
        self,
        node_id: str,
        kind: NodeKind,
        title: str,
        subtitle: str | None,
        position: Point,
    ) -> NodeBox: ...

    def draw_curve(self, curve: CubicCurve) -> str: ...

    def place_label(self, position: Point, text: str) -> None: ...

    def clear_all(self) -> None: ...

    def report_content_bounds(self) -> Size: ...
