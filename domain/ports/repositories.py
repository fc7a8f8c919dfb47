from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from domain.models import ExcalidrawDocument, Plan


class PlanRepository(Protocol):
    def load_all_with_paths(self, directory: Path) -> Sequence[tuple[Path, Plan]]: ...

    def load_by_path(self, path: Path) -> Plan: ...


class ExcalidrawRepository(Protocol):
    def save(self, document: ExcalidrawDocument, path: Path) -> None: ...
