from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from adapters.filesystem.json_utils import loads_json_text
from domain.models import Plan
from domain.ports.repositories import PlanRepository


class FileSystemPlanRepository(PlanRepository):
    def load_all_with_paths(self, directory: Path) -> List[tuple[Path, Plan]]:
        return [(path, self.load_by_path(path)) for path in sorted(self._iter_paths(directory))]

    def load_by_path(self, path: Path) -> Plan:
        text = path.read_text(encoding="utf-8")
        return Plan.model_validate(loads_json_text(self._strip_comments(text)))

    def _iter_paths(self, directory: Path) -> Iterable[Path]:
        yield from directory.glob("*.json")

    def _strip_comments(self, content: str) -> str:
        result_lines: List[str] = []
        for line in content.splitlines():
            in_string = False
            escaped = False
            cleaned = []
            for idx, char in enumerate(line):
                if char == '"' and not escaped:
                    in_string = not in_string
                if not in_string and char == "/" and idx + 1 < len(line) and line[idx + 1] == "/":
                    break
                cleaned.append(char)
                escaped = char == "\\" and not escaped
            result_lines.append("".join(cleaned))
        return "\n".join(result_lines)
