from __future__ import annotations


class PlanDiagramError(Exception):
    pass


class PlanShapeError(PlanDiagramError):
    def __init__(self, step_id: str, reason: str) -> None:
        self.step_id = step_id
        self.reason = reason
        super().__init__(f"Unsupported plan shape at step '{step_id}': {reason}")


class DuplicateNodeError(PlanDiagramError):
    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"Duplicate diagram node id: {node_id}")


class CurveDescriptorError(PlanDiagramError):
    def __init__(self, descriptor: str, found: int) -> None:
        self.descriptor = descriptor
        self.found = found
        super().__init__(
            "Curve descriptor must read 'M x y C cx1 cy1, cx2 cy2, x y' "
            f"(found {found} numbers): {descriptor!r}"
        )
