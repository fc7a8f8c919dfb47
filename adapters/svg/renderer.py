from __future__ import annotations

import xml.etree.ElementTree as ET

from adapters.layout.metrics import NodeMetrics, content_bounds, measure_label, measure_node
from domain.models import CubicCurve, LabelPlacement, NodeBox, NodeKind, Point, Size
from domain.ports.renderer import DiagramRenderer

SVG_NS = "http://www.w3.org/2000/svg"
ET.register_namespace("", SVG_NS)

WIRE_STROKE = "rgba(150,161,179,.9)"

STYLESHEET = """
.node__frame { fill: #ffffff; stroke: #d5dae3; stroke-width: 1; }
.node--decision .node__frame { fill: #fff7e6; stroke: #f5b841; }
.node--action .node__frame { fill: #eef4ff; stroke: #8fb3ff; }
.node__badge { font: 600 11px sans-serif; fill: #6b7385; text-transform: uppercase; }
.node__title { font: 600 14px sans-serif; fill: #1e1e1e; }
.node__subtitle { font: 11px sans-serif; fill: #6b7385; letter-spacing: .04em; }
.port { fill: #ffffff; stroke: #96a1b3; stroke-width: 1.5; }
.branch-label rect { fill: #ffffff; stroke: #d5dae3; }
.branch-label text { font: 600 11px sans-serif; fill: #3d4556; }
"""


def _q(tag: str) -> str:
    return f"{{{SVG_NS}}}{tag}"


def _fmt(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


class SvgDiagramRenderer(DiagramRenderer):
    def __init__(self, metrics: NodeMetrics | None = None, margin: float = 40.0) -> None:
        self.metrics = metrics or NodeMetrics()
        self.margin = margin
        self._nodes: list[ET.Element] = []
        self._wires: list[ET.Element] = []
        self._labels: list[ET.Element] = []
        self._boxes: list[NodeBox] = []
        self._label_placements: list[LabelPlacement] = []
        self._bounds: Size | None = None

    def create_node(
        self,
        node_id: str,
        kind: NodeKind,
        title: str,
        subtitle: str | None,
        position: Point,
    ) -> NodeBox:
        size = measure_node(self.metrics, title, subtitle)
        box = NodeBox(node_id=node_id, position=position, size=size)
        self._boxes.append(box)

        group = ET.Element(
            _q("g"),
            {
                "class": f"node node--{kind}",
                "data-node-id": node_id,
                "transform": f"translate({_fmt(position.x)} {_fmt(position.y)})",
            },
        )
        ET.SubElement(
            group,
            _q("rect"),
            {
                "class": "node__frame",
                "width": _fmt(size.width),
                "height": _fmt(size.height),
                "rx": "12",
            },
        )
        text_x = _fmt(self.metrics.padding_x)
        badge = ET.SubElement(
            group, _q("text"), {"class": "node__badge", "x": text_x, "y": "22"}
        )
        badge.text = "Decision" if kind == "decision" else "Action"
        title_el = ET.SubElement(
            group, _q("text"), {"class": "node__title", "x": text_x, "y": "46"}
        )
        title_el.text = title
        if subtitle:
            subtitle_el = ET.SubElement(
                group, _q("text"), {"class": "node__subtitle", "x": text_x, "y": "66"}
            )
            subtitle_el.text = subtitle

        middle = _fmt(size.height / 2)
        for port, cx in (("in", "0"), ("out", _fmt(size.width))):
            ET.SubElement(
                group,
                _q("circle"),
                {
                    "class": f"port port--{port}",
                    "data-port": port,
                    "cx": cx,
                    "cy": middle,
                    "r": "5",
                },
            )
        self._nodes.append(group)
        return box

    def draw_curve(self, curve: CubicCurve) -> str:
        handle = f"wire-{len(self._wires)}"
        self._wires.append(
            ET.Element(
                _q("path"),
                {
                    "id": handle,
                    "d": curve.to_path(),
                    "fill": "none",
                    "stroke": WIRE_STROKE,
                    "stroke-width": "2",
                    "stroke-linecap": "round",
                },
            )
        )
        return handle

    def place_label(self, position: Point, text: str) -> None:
        self._label_placements.append(LabelPlacement(text=text, position=position))
        size = measure_label(self.metrics, text)
        group = ET.Element(_q("g"), {"class": "branch-label"})
        ET.SubElement(
            group,
            _q("rect"),
            {
                "x": _fmt(position.x - size.width / 2),
                "y": _fmt(position.y - size.height / 2),
                "width": _fmt(size.width),
                "height": _fmt(size.height),
                "rx": _fmt(size.height / 2),
            },
        )
        label = ET.SubElement(
            group,
            _q("text"),
            {
                "x": _fmt(position.x),
                "y": _fmt(position.y),
                "text-anchor": "middle",
                "dominant-baseline": "central",
            },
        )
        label.text = text
        self._labels.append(group)

    def clear_all(self) -> None:
        self._nodes.clear()
        self._wires.clear()
        self._labels.clear()
        self._boxes.clear()
        self._label_placements.clear()
        self._bounds = None

    def report_content_bounds(self) -> Size:
        self._bounds = content_bounds(
            self._boxes, self._label_placements, self.metrics, self.margin
        )
        return self._bounds

    def to_svg(self) -> str:
        bounds = self._bounds or self.report_content_bounds()
        root = ET.Element(
            _q("svg"),
            {
                "width": _fmt(bounds.width),
                "height": _fmt(bounds.height),
                "viewBox": f"0 0 {_fmt(bounds.width)} {_fmt(bounds.height)}",
            },
        )
        style = ET.SubElement(root, _q("style"))
        style.text = STYLESHEET
        # Wires sit under nodes so ports stay visible.
        for group_id, children in (
            ("wires", self._wires),
            ("nodes", self._nodes),
            ("labels", self._labels),
        ):
            group = ET.SubElement(root, _q("g"), {"id": group_id})
            group.extend(children)
        return ET.tostring(root, encoding="unicode")
