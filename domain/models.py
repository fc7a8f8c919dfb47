from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

METADATA_SCHEMA_VERSION = "1.0"
CUSTOM_DATA_KEY = "planviz"

NodeKind = Literal["decision", "action"]


def _empty_payload(value: Any) -> Any:
    return {} if value is None else value


# null payloads are treated as empty
Payload = Annotated[Dict[str, Any], BeforeValidator(_empty_payload)]


class StoreVariable(BaseModel):
    variable_name: str = Field(..., min_length=1)
    description: str = ""


class Action(BaseModel):
    id: str = Field(..., min_length=1)
    provider: Optional[str] = None
    label: str
    tool_name: Optional[str] = None
    payload: Payload = Field(default_factory=dict)


class SequentialAction(BaseModel):
    label: Optional[str] = None
    call_type: Optional[str] = None
    tool_name: str = Field(..., min_length=1)
    payload: Payload = Field(default_factory=dict)
    store_variables: List[StoreVariable] = Field(default_factory=list)


class ActionStep(BaseModel):
    model_config = ConfigDict(extra="forbid")

    action: Action


class SplitStep(BaseModel):
    model_config = ConfigDict(extra="forbid")

    split: Split


class SequentialStep(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sequential: List[SequentialAction]


Step = Union[ActionStep, SplitStep, SequentialStep]


class Branch(BaseModel):
    label: str
    # At least one step is expected; the layout engine reports empty branches.
    steps: List[Step] = Field(default_factory=list)


class Split(BaseModel):
    id: str = Field(..., min_length=1)
    label: str
    branches: List[Branch] = Field(default_factory=list)


class Plan(BaseModel):
    steps: List[Step] = Field(default_factory=list)


for _model in (SplitStep, Branch, Split, Plan):
    _model.model_rebuild()


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class NodeBox:
    node_id: str
    position: Point
    size: Size

    def right_middle(self) -> Point:
        return Point(self.position.x + self.size.width, self.position.y + self.size.height / 2)

    def left_middle(self) -> Point:
        return Point(self.position.x, self.position.y + self.size.height / 2)


@dataclass(frozen=True)
class CubicCurve:
    start: Point
    control1: Point
    control2: Point
    end: Point

    def points(self) -> tuple[Point, Point, Point, Point]:
        return (self.start, self.control1, self.control2, self.end)

    def to_path(self) -> str:
        return (
            f"M {_fmt(self.start.x)} {_fmt(self.start.y)} "
            f"C {_fmt(self.control1.x)} {_fmt(self.control1.y)}, "
            f"{_fmt(self.control2.x)} {_fmt(self.control2.y)}, "
            f"{_fmt(self.end.x)} {_fmt(self.end.y)}"
        )


@dataclass(frozen=True)
class WirePlacement:
    source_id: str
    target_id: str
    curve: CubicCurve
    handle: str


@dataclass(frozen=True)
class LabelPlacement:
    text: str
    position: Point


@dataclass
class RenderPass:
    node_boxes: Dict[str, NodeBox] = field(default_factory=dict)
    wires: List[WirePlacement] = field(default_factory=list)
    labels: List[LabelPlacement] = field(default_factory=list)
    cursor_y: float = 0.0
    content_bounds: Size = Size(0.0, 0.0)


@dataclass(frozen=True)
class ExcalidrawDocument:
    elements: List[dict]
    app_state: dict
    files: dict

    def to_dict(self) -> dict:
        return {
            "type": "excalidraw",
            "version": 2,
            "source": "planviz",
            "elements": self.elements,
            "appState": self.app_state,
            "files": self.files,
        }


def _fmt(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
