from __future__ import annotations

import random
import uuid
from typing import Dict, List

from adapters.layout.metrics import NodeMetrics, content_bounds, measure_label, measure_node
from domain.models import (
    CUSTOM_DATA_KEY,
    METADATA_SCHEMA_VERSION,
    CubicCurve,
    ExcalidrawDocument,
    LabelPlacement,
    NodeBox,
    NodeKind,
    Point,
    Size,
)
from domain.ports.renderer import DiagramRenderer
from domain.services.wire_router import sample_curve

NODE_COLORS: Dict[str, str] = {
    "decision": "#fff3bf",
    "action": "#cce5ff",
}
WIRE_COLOR = "#96a1b3"


class ExcalidrawDiagramRenderer(DiagramRenderer):
    def __init__(
        self,
        metrics: NodeMetrics | None = None,
        margin: float = 40.0,
        curve_segments: int = 16,
        seed: int | None = None,
    ) -> None:
        self.metrics = metrics or NodeMetrics()
        self.margin = margin
        self.curve_segments = curve_segments
        self.namespace = uuid.uuid5(uuid.NAMESPACE_DNS, "planviz")
        self.seed = seed
        self._random = random.Random(seed)
        self._elements: List[dict] = []
        self._element_index: Dict[str, dict] = {}
        self._boxes: Dict[str, NodeBox] = {}
        self._labels: List[LabelPlacement] = []
        self._arrow_count = 0

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
        self._boxes[node_id] = box

        group_id = self._stable_id("group", node_id)
        shape_id = self._stable_id("node", node_id)
        metadata = self._metadata({"node_id": node_id, "role": "node", "kind": kind})
        self._add(
            self._base_shape(
                element_id=shape_id,
                type_name="diamond" if kind == "decision" else "rectangle",
                position=position,
                size=size,
                group_ids=[group_id],
                metadata=metadata,
                extra={
                    "strokeColor": "#1e1e1e",
                    "backgroundColor": NODE_COLORS[kind],
                    "fillStyle": "solid",
                    "roundness": None if kind == "decision" else {"type": 3},
                },
            )
        )
        text = title if not subtitle else f"{title}\n{subtitle}"
        text_id = self._stable_id("node-text", node_id)
        self._element_index[shape_id]["boundElements"].append({"id": text_id, "type": "text"})
        self._add(
            self._text_element(
                element_id=text_id,
                text=text,
                center=Point(position.x + size.width / 2, position.y + size.height / 2),
                size=Size(size.width - 20, size.height - 20),
                container_id=shape_id,
                group_ids=[group_id],
                metadata=self._metadata({"node_id": node_id, "role": "node_label"}),
                font_size=16.0,
            )
        )
        return box

    def draw_curve(self, curve: CubicCurve) -> str:
        source = self._node_at(curve.start, side="right")
        target = self._node_at(curve.end, side="left")
        # Index keeps ids unique when two wires share the same path.
        arrow_id = self._stable_id("arrow", str(self._arrow_count), curve.to_path())
        self._arrow_count += 1
        samples = sample_curve(curve, self.curve_segments)
        xs = [point.x for point in samples]
        ys = [point.y for point in samples]
        arrow = {
            **self._base_shape(
                element_id=arrow_id,
                type_name="arrow",
                position=curve.start,
                size=Size(max(xs) - min(xs), max(ys) - min(ys)),
                group_ids=[],
                metadata=self._metadata(
                    {
                        "role": "edge",
                        "source_node_id": source,
                        "target_node_id": target,
                        "path": curve.to_path(),
                    }
                ),
                extra={
                    "strokeColor": WIRE_COLOR,
                    "backgroundColor": "transparent",
                    "fillStyle": "solid",
                    "strokeWidth": 2,
                    "roundness": {"type": 2},
                },
            ),
            "points": [[point.x - curve.start.x, point.y - curve.start.y] for point in samples],
            "startBinding": self._binding(source),
            "endBinding": self._binding(target),
            "startArrowhead": None,
            "endArrowhead": "arrow",
        }
        self._add(arrow)
        self._bind_arrow(arrow)
        return arrow_id

    def place_label(self, position: Point, text: str) -> None:
        self._labels.append(LabelPlacement(text=text, position=position))
        self._add(
            self._text_element(
                element_id=self._stable_id("label", str(len(self._labels)), text, str(position)),
                text=text,
                center=position,
                size=measure_label(self.metrics, text),
                container_id=None,
                group_ids=[],
                metadata=self._metadata({"role": "branch_label"}),
                font_size=14.0,
            )
        )

    def clear_all(self) -> None:
        self._elements.clear()
        self._element_index.clear()
        self._boxes.clear()
        self._labels.clear()
        self._arrow_count = 0
        self._random.seed(self.seed)

    def report_content_bounds(self) -> Size:
        return content_bounds(self._boxes.values(), self._labels, self.metrics, self.margin)

    def to_document(self) -> ExcalidrawDocument:
        app_state = {
            "viewBackgroundColor": "#ffffff",
            "gridSize": None,
            "currentItemFontFamily": 1,
            "currentItemFontSize": 20,
            "currentItemStrokeColor": "#1e1e1e",
        }
        return ExcalidrawDocument(elements=list(self._elements), app_state=app_state, files={})

    def _add(self, element: dict) -> None:
        self._elements.append(element)
        self._element_index[element["id"]] = element

    def _node_at(self, anchor: Point, side: str) -> str | None:
        for box in self._boxes.values():
            candidate = box.right_middle() if side == "right" else box.left_middle()
            if candidate == anchor:
                return box.node_id
        return None

    def _binding(self, node_id: str | None) -> dict | None:
        if node_id is None:
            return None
        return {"elementId": self._stable_id("node", node_id), "focus": 0.0, "gap": 4}

    def _bind_arrow(self, arrow: dict) -> None:
        for key in ("startBinding", "endBinding"):
            binding = arrow.get(key)
            if not binding:
                continue
            target = self._element_index.get(binding["elementId"])
            if target is not None:
                target.setdefault("boundElements", []).append({"id": arrow["id"], "type": "arrow"})

    def _base_shape(
        self,
        element_id: str,
        type_name: str,
        position: Point,
        size: Size,
        group_ids: List[str],
        metadata: dict,
        extra: dict | None = None,
    ) -> dict:
        return {
            "id": element_id,
            "type": type_name,
            "x": position.x,
            "y": position.y,
            "width": size.width,
            "height": size.height,
            "angle": 0,
            "strokeWidth": 1,
            "strokeStyle": "solid",
            "roughness": 0,
            "opacity": 100,
            "groupIds": group_ids,
            "roundness": None,
            "seed": self._rand_seed(),
            "version": 1,
            "versionNonce": self._rand_seed(),
            "isDeleted": False,
            "boundElements": [],
            "locked": False,
            "frameId": None,
            "customData": {CUSTOM_DATA_KEY: metadata},
            **(extra or {}),
        }

    def _text_element(
        self,
        element_id: str,
        text: str,
        center: Point,
        size: Size,
        container_id: str | None,
        group_ids: List[str],
        metadata: dict,
        font_size: float,
    ) -> dict:
        return {
            **self._base_shape(
                element_id=element_id,
                type_name="text",
                position=Point(center.x - size.width / 2, center.y - size.height / 2),
                size=size,
                group_ids=group_ids,
                metadata=metadata,
                extra={
                    "strokeColor": "#1e1e1e",
                    "backgroundColor": "transparent",
                    "fillStyle": "solid",
                },
            ),
            "text": text,
            "originalText": text,
            "fontSize": font_size,
            "fontFamily": 1,
            "textAlign": "center",
            "verticalAlign": "middle",
            "baseline": size.height / 2,
            "containerId": container_id,
            "lineHeight": 1.25,
        }

    def _metadata(self, metadata: dict) -> dict:
        merged: dict = {"schema_version": METADATA_SCHEMA_VERSION}
        merged.update(metadata)
        return merged

    def _stable_id(self, *parts: str) -> str:
        return str(uuid.uuid5(self.namespace, "|".join(parts)))

    def _rand_seed(self) -> int:
        return self._random.randint(1, 2**31 - 1)
