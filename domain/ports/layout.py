from __future__ import annotations

from typing import Protocol

from domain.models import Plan, RenderPass


class PlanLayoutEngine(Protocol):
    def render(self, plan: Plan) -> RenderPass:
        ...
