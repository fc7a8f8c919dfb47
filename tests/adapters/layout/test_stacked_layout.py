from __future__ import annotations

import pytest

from adapters.layout.stacked import LayoutConfig, StackedLayoutEngine
from domain.errors import DuplicateNodeError, PlanShapeError
from domain.models import ActionStep, Branch, NodeBox, Plan, Point, RenderPass, Split
from tests.helpers.plan_fixtures import action, build_plan, sequential, split
from tests.helpers.recording_renderer import RecordingRenderer


def _snapshot(render_pass: RenderPass) -> tuple:
    return (
        dict(render_pass.node_boxes),
        [(wire.source_id, wire.target_id, wire.curve.to_path()) for wire in render_pass.wires],
        list(render_pass.labels),
        render_pass.cursor_y,
    )


def test_example_plan_scenario(recording_renderer: RecordingRenderer, example_plan: Plan) -> None:
    render_pass = StackedLayoutEngine(recording_renderer).render(example_plan)

    kinds = [node.kind for node in recording_renderer.nodes]
    assert kinds.count("decision") == 1
    assert kinds.count("action") == 6
    assert list(render_pass.node_boxes) == [
        "is_manager",
        "add_to_channel",
        "update_profile",
        "seq_0_SHOPIFY_CREATE_PRODUCT",
        "seq_1_OPENAI_IMAGE_GENERATION",
        "seq_2_EXPOSE_FILE_ON_URL",
        "seq_3_SHOPIFY_CREATE_PRODUCT_IMAGE",
    ]
    assert len(render_pass.wires) == 5
    assert len(recording_renderer.curves) == 5
    assert [label.text for label in render_pass.labels] == ["true", "false"]
    assert [text for _, text in recording_renderer.labels] == ["true", "false"]


def test_example_plan_positions(recording_renderer: RecordingRenderer, example_plan: Plan) -> None:
    render_pass = StackedLayoutEngine(recording_renderer).render(example_plan)
    positions = {node_id: box.position for node_id, box in render_pass.node_boxes.items()}

    assert positions["is_manager"] == Point(140, 160)
    assert positions["add_to_channel"] == Point(460, 160)
    assert positions["update_profile"] == Point(460, 300)
    sequential_ys = [
        position.y for node_id, position in positions.items() if node_id.startswith("seq_")
    ]
    assert sequential_ys == [500, 620, 740, 860]
    assert {
        position.x for node_id, position in positions.items() if node_id.startswith("seq_")
    } == {140}
    assert render_pass.cursor_y == 1020


def test_branch_labels_sit_on_curve_midpoints(
    recording_renderer: RecordingRenderer, example_plan: Plan
) -> None:
    render_pass = StackedLayoutEngine(recording_renderer).render(example_plan)

    assert [label.position for label in render_pass.labels] == [Point(350, 180), Point(350, 250)]
    first_wire = render_pass.wires[0]
    assert first_wire.source_id == "is_manager"
    assert first_wire.target_id == "add_to_channel"
    assert first_wire.curve.control1 == Point(310, 180)
    assert first_wire.curve.control2 == Point(390, 180)


def test_node_titles_and_subtitles(
    recording_renderer: RecordingRenderer, example_plan: Plan
) -> None:
    StackedLayoutEngine(recording_renderer).render(example_plan)
    nodes = {node.node_id: node for node in recording_renderer.nodes}

    assert nodes["is_manager"].title == "Is manager?"
    assert nodes["is_manager"].subtitle is None
    assert nodes["add_to_channel"].subtitle == "SLACK"
    assert nodes["seq_1_OPENAI_IMAGE_GENERATION"].title == "Generate image"
    assert nodes["seq_1_OPENAI_IMAGE_GENERATION"].subtitle == "SELF_MADE"


def test_branch_fan_out_spacing(recording_renderer: RecordingRenderer) -> None:
    config = LayoutConfig(origin_y=160, branch_gap=140, vertical_pad=200)
    plan = build_plan(
        split(
            "route",
            ("a", [action("first")]),
            ("b", [action("second")]),
            ("c", [action("third")]),
        ),
        action("after"),
    )

    render_pass = StackedLayoutEngine(recording_renderer, config).render(plan)

    boxes = render_pass.node_boxes
    assert [boxes[name].position.y for name in ("first", "second", "third")] == [160, 300, 440]
    assert {boxes[name].position.x for name in ("first", "second", "third")} == {460}
    assert boxes["after"].position == Point(140, 160 + 2 * 140 + 200)
    assert len(render_pass.wires) == 3
    assert [label.text for label in render_pass.labels] == ["a", "b", "c"]


def test_sequential_chaining(recording_renderer: RecordingRenderer) -> None:
    config = LayoutConfig(origin_y=160, row_height=120, block_gap=40)
    plan = build_plan(sequential("ONE", "TWO", "THREE", "FOUR"))

    render_pass = StackedLayoutEngine(recording_renderer, config).render(plan)

    assert [box.position.y for box in render_pass.node_boxes.values()] == [160, 280, 400, 520]
    assert {box.position.x for box in render_pass.node_boxes.values()} == {140}
    assert [(wire.source_id, wire.target_id) for wire in render_pass.wires] == [
        ("seq_0_ONE", "seq_1_TWO"),
        ("seq_1_TWO", "seq_2_THREE"),
        ("seq_2_THREE", "seq_3_FOUR"),
    ]
    assert render_pass.labels == []
    assert render_pass.cursor_y == 160 + 4 * 120 + 40


def test_sequential_wires_use_sequential_offset(recording_renderer: RecordingRenderer) -> None:
    plan = build_plan(sequential("ONE", "TWO"))

    render_pass = StackedLayoutEngine(recording_renderer).render(plan)

    curve = render_pass.wires[0].curve
    assert curve.start == Point(240, 180)
    assert curve.control1 == Point(300, 180)
    assert curve.end == Point(140, 300)
    assert curve.control2 == Point(80, 300)


def test_sequential_title_falls_back_to_tool_name(recording_renderer: RecordingRenderer) -> None:
    plan = Plan.model_validate({"steps": [{"sequential": [{"tool_name": "BARE_TOOL"}]}]})

    StackedLayoutEngine(recording_renderer).render(plan)

    node = recording_renderer.nodes[0]
    assert node.title == "BARE_TOOL"
    assert node.subtitle is None


def test_top_level_action_occupies_one_row(recording_renderer: RecordingRenderer) -> None:
    plan = build_plan(action("solo", provider="github"), sequential("NEXT"))

    render_pass = StackedLayoutEngine(recording_renderer).render(plan)

    assert render_pass.node_boxes["solo"].position == Point(140, 160)
    assert render_pass.node_boxes["seq_0_NEXT"].position == Point(140, 160 + 120 + 40)
    assert render_pass.wires == []
    assert recording_renderer.nodes[0].subtitle == "GITHUB"


def test_render_is_idempotent(recording_renderer: RecordingRenderer, example_plan: Plan) -> None:
    engine = StackedLayoutEngine(recording_renderer)

    first = engine.render(example_plan)
    first_curves = list(recording_renderer.curves)
    second = engine.render(example_plan)

    assert first is not second
    assert _snapshot(first) == _snapshot(second)
    assert recording_renderer.curves == first_curves
    assert len(recording_renderer.nodes) == 7
    assert recording_renderer.clear_count == 2


def test_render_reports_content_bounds_once(
    recording_renderer: RecordingRenderer, example_plan: Plan
) -> None:
    render_pass = StackedLayoutEngine(recording_renderer).render(example_plan)

    assert recording_renderer.bounds_requests == 1
    assert render_pass.content_bounds.width == 560
    assert render_pass.content_bounds.height == 900


def test_empty_plan_renders_nothing(recording_renderer: RecordingRenderer) -> None:
    render_pass = StackedLayoutEngine(recording_renderer).render(Plan())

    assert render_pass.node_boxes == {}
    assert render_pass.cursor_y == 160
    assert recording_renderer.clear_count == 1


def test_split_without_branches_raises(recording_renderer: RecordingRenderer) -> None:
    plan = build_plan(split("lonely"))

    with pytest.raises(PlanShapeError) as excinfo:
        StackedLayoutEngine(recording_renderer).render(plan)

    assert excinfo.value.step_id == "lonely"


def test_branch_without_steps_raises(recording_renderer: RecordingRenderer) -> None:
    plan = build_plan(split("check", ("yes", [action("ok")]), ("no", [])))

    with pytest.raises(PlanShapeError) as excinfo:
        StackedLayoutEngine(recording_renderer).render(plan)

    assert excinfo.value.step_id == "check"
    assert "no" in excinfo.value.reason


def test_branch_starting_with_non_action_raises(recording_renderer: RecordingRenderer) -> None:
    plan = build_plan(split("outer", ("nested", [sequential("INNER")])))

    with pytest.raises(PlanShapeError) as excinfo:
        StackedLayoutEngine(recording_renderer).render(plan)

    assert excinfo.value.step_id == "outer"


def test_duplicate_node_id_raises(recording_renderer: RecordingRenderer) -> None:
    plan = build_plan(
        split("check", ("yes", [action("notify")]), ("no", [action("notify")])),
    )

    with pytest.raises(DuplicateNodeError) as excinfo:
        StackedLayoutEngine(recording_renderer).render(plan)

    assert excinfo.value.node_id == "notify"


def test_repeated_sequential_blocks_collide(recording_renderer: RecordingRenderer) -> None:
    plan = build_plan(sequential("SAME"), sequential("SAME"))

    with pytest.raises(DuplicateNodeError) as excinfo:
        StackedLayoutEngine(recording_renderer).render(plan)

    assert excinfo.value.node_id == "seq_0_SAME"


def test_failed_render_leaves_renderer_cleared(
    recording_renderer: RecordingRenderer, example_plan: Plan
) -> None:
    engine = StackedLayoutEngine(recording_renderer)
    engine.render(example_plan)

    with pytest.raises(PlanShapeError):
        engine.render(build_plan(split("broken")))

    assert recording_renderer.clear_count == 2
    assert recording_renderer.nodes == []
    assert recording_renderer.curves == []


def test_place_branch_can_be_overridden(recording_renderer: RecordingRenderer) -> None:
    class ChainedBranchEngine(StackedLayoutEngine):
        def _place_branch(
            self,
            render_pass: RenderPass,
            split: Split,
            decision: NodeBox,
            branch: Branch,
            index: int,
        ) -> None:
            super()._place_branch(render_pass, split, decision, branch, index)
            previous = render_pass.node_boxes[render_pass.wires[-1].target_id]
            for depth, step in enumerate(branch.steps[1:], start=1):
                assert isinstance(step, ActionStep)
                box = self._place_node(
                    render_pass,
                    node_id=step.action.id,
                    kind="action",
                    title=step.action.label,
                    subtitle=None,
                    position=Point(
                        previous.position.x + self.config.column_width * depth,
                        previous.position.y,
                    ),
                )
                self._connect(render_pass, previous, box, self.config.sequential_wire_offset)
                previous = box

    plan = build_plan(split("check", ("yes", [action("first"), action("second")])))

    render_pass = ChainedBranchEngine(recording_renderer).render(plan)

    assert list(render_pass.node_boxes) == ["check", "first", "second"]
    assert render_pass.node_boxes["second"].position == Point(780, 160)
    assert len(render_pass.wires) == 2
    assert [label.text for label in render_pass.labels] == ["yes"]
