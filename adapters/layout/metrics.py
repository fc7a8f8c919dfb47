from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from domain.models import LabelPlacement, NodeBox, Size


@dataclass(frozen=True)
class NodeMetrics:
    title_char_width: float = 8.5
    subtitle_char_width: float = 7.0
    label_char_width: float = 7.0
    padding_x: float = 16.0
    min_width: float = 200.0
    max_width: float = 320.0
    height: float = 64.0
    subtitle_height: float = 18.0
    label_height: float = 22.0
    label_padding_x: float = 10.0


def measure_node(metrics: NodeMetrics, title: str, subtitle: str | None) -> Size:
    text_width = len(title) * metrics.title_char_width
    if subtitle:
        text_width = max(text_width, len(subtitle) * metrics.subtitle_char_width)
    width = min(metrics.max_width, max(metrics.min_width, text_width + metrics.padding_x * 2))
    height = metrics.height + (metrics.subtitle_height if subtitle else 0.0)
    return Size(width, height)


def measure_label(metrics: NodeMetrics, text: str) -> Size:
    return Size(
        len(text) * metrics.label_char_width + metrics.label_padding_x * 2,
        metrics.label_height,
    )


def content_bounds(
    boxes: Iterable[NodeBox],
    labels: Iterable[LabelPlacement],
    metrics: NodeMetrics,
    margin: float,
) -> Size:
    max_x = 0.0
    max_y = 0.0
    for box in boxes:
        max_x = max(max_x, box.position.x + box.size.width)
        max_y = max(max_y, box.position.y + box.size.height)
    for label in labels:
        size = measure_label(metrics, label.text)
        max_x = max(max_x, label.position.x + size.width / 2)
        max_y = max(max_y, label.position.y + size.height / 2)
    return Size(max_x + margin, max_y + margin)
