from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import assert_never

from domain.errors import DuplicateNodeError, PlanShapeError
from domain.models import (
    Action,
    ActionStep,
    Branch,
    LabelPlacement,
    NodeBox,
    NodeKind,
    Plan,
    Point,
    RenderPass,
    SequentialAction,
    SequentialStep,
    Split,
    SplitStep,
    WirePlacement,
)
from domain.ports.layout import PlanLayoutEngine
from domain.ports.renderer import DiagramRenderer
from domain.services.wire_router import midpoint, route_curve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutConfig:
    origin_x: float = 140.0
    origin_y: float = 160.0
    column_width: float = 320.0
    branch_gap: float = 140.0
    vertical_pad: float = 200.0
    row_height: float = 120.0
    block_gap: float = 40.0
    branch_wire_offset: float = 70.0
    sequential_wire_offset: float = 60.0


class StackedLayoutEngine(PlanLayoutEngine):
    """Lays top-level steps out in one column, fanning split branches to the right.

    Every call to :meth:`render` clears the renderer and builds a new
    :class:`RenderPass`, so re-rendering the same plan is idempotent.
    """

    def __init__(self, renderer: DiagramRenderer, config: LayoutConfig | None = None) -> None:
        self.renderer = renderer
        self.config = config or LayoutConfig()

    def render(self, plan: Plan) -> RenderPass:
        self.renderer.clear_all()
        render_pass = RenderPass(cursor_y=self.config.origin_y)
        logger.info("Rendering plan with %d top-level steps", len(plan.steps))

        for step in plan.steps:
            if isinstance(step, SplitStep):
                self._place_split(render_pass, step.split)
            elif isinstance(step, SequentialStep):
                self._place_sequential(render_pass, step.sequential)
            elif isinstance(step, ActionStep):
                self._place_action(render_pass, step.action)
            else:
                assert_never(step)

        render_pass.content_bounds = self.renderer.report_content_bounds()
        logger.info(
            "Rendered %d nodes, %d wires, %d labels",
            len(render_pass.node_boxes),
            len(render_pass.wires),
            len(render_pass.labels),
        )
        return render_pass

    def _place_split(self, render_pass: RenderPass, split: Split) -> None:
        if not split.branches:
            raise PlanShapeError(split.id, "split has no branches")

        decision = self._place_node(
            render_pass,
            node_id=split.id,
            kind="decision",
            title=split.label,
            subtitle=None,
            position=Point(self.config.origin_x, render_pass.cursor_y),
        )
        for idx, branch in enumerate(split.branches):
            self._place_branch(render_pass, split, decision, branch, idx)

        render_pass.cursor_y += (
            len(split.branches) - 1
        ) * self.config.branch_gap + self.config.vertical_pad

    def _place_branch(
        self,
        render_pass: RenderPass,
        split: Split,
        decision: NodeBox,
        branch: Branch,
        index: int,
    ) -> None:
        # Only the entry step of each branch is drawn; override to render deeper chains.
        if not branch.steps:
            raise PlanShapeError(split.id, f"branch '{branch.label}' has no steps")
        first = branch.steps[0]
        if not isinstance(first, ActionStep):
            raise PlanShapeError(
                split.id,
                f"branch '{branch.label}' must start with an action step",
            )

        action = first.action
        box = self._place_node(
            render_pass,
            node_id=action.id,
            kind="action",
            title=action.label,
            subtitle=_subtitle(action.provider),
            position=Point(
                self.config.origin_x + self.config.column_width,
                render_pass.cursor_y + index * self.config.branch_gap,
            ),
        )
        wire = self._connect(render_pass, decision, box, self.config.branch_wire_offset)
        label = LabelPlacement(text=branch.label, position=midpoint(wire.curve))
        self.renderer.place_label(label.position, label.text)
        render_pass.labels.append(label)

    def _place_sequential(self, render_pass: RenderPass, actions: list[SequentialAction]) -> None:
        previous: NodeBox | None = None
        for idx, action in enumerate(actions):
            box = self._place_node(
                render_pass,
                node_id=f"seq_{idx}_{action.tool_name}",
                kind="action",
                title=action.label or action.tool_name,
                subtitle=_subtitle(action.call_type),
                position=Point(
                    self.config.origin_x,
                    render_pass.cursor_y + idx * self.config.row_height,
                ),
            )
            if previous is not None:
                self._connect(render_pass, previous, box, self.config.sequential_wire_offset)
            previous = box

        render_pass.cursor_y += len(actions) * self.config.row_height + self.config.block_gap

    def _place_action(self, render_pass: RenderPass, action: Action) -> None:
        self._place_node(
            render_pass,
            node_id=action.id,
            kind="action",
            title=action.label,
            subtitle=_subtitle(action.provider),
            position=Point(self.config.origin_x, render_pass.cursor_y),
        )
        render_pass.cursor_y += self.config.row_height + self.config.block_gap

    def _place_node(
        self,
        render_pass: RenderPass,
        node_id: str,
        kind: NodeKind,
        title: str,
        subtitle: str | None,
        position: Point,
    ) -> NodeBox:
        if node_id in render_pass.node_boxes:
            raise DuplicateNodeError(node_id)
        box = self.renderer.create_node(node_id, kind, title, subtitle, position)
        render_pass.node_boxes[node_id] = box
        logger.debug(
            "Placed %s node %s at (%s, %s) size %sx%s",
            kind,
            node_id,
            box.position.x,
            box.position.y,
            box.size.width,
            box.size.height,
        )
        return box

    def _connect(
        self,
        render_pass: RenderPass,
        source: NodeBox,
        target: NodeBox,
        horizontal_offset: float,
    ) -> WirePlacement:
        curve = route_curve(source, target, horizontal_offset)
        handle = self.renderer.draw_curve(curve)
        wire = WirePlacement(
            source_id=source.node_id,
            target_id=target.node_id,
            curve=curve,
            handle=handle,
        )
        render_pass.wires.append(wire)
        return wire


def _subtitle(value: str | None) -> str | None:
    text = (value or "").strip().upper()
    return text or None
