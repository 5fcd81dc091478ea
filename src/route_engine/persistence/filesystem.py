"""File-based persistence for aggregated route results."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import settings
from ..models.domain import RouteResult
from ..services.outputs.route_formatter import route_legs_to_csv, route_result_to_json

ROUTE_RESULT_FILE = "route_result.json"
LEGS_FILE = "legs.csv"


def _slug(label: str) -> str:
    return re.sub(r"[^A-Za-z0-9_-]+", "_", label.strip()).strip("_")


class FileStorage:
    """Stores each route run in its own timestamped directory under ``<data_root>/outputs``."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.output_root = self.root / "outputs"
        self.output_root.mkdir(parents=True, exist_ok=True)

    def make_run_directory(self, run_label: str | None = None) -> Path:
        slug = _slug(run_label) if run_label else ""
        prefix = f"route_{slug}" if slug else "route"
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        path = self.output_root / f"{prefix}_{timestamp}"
        path.mkdir(parents=True, exist_ok=False)
        return path

    def save_route_result(self, result: RouteResult, run_label: str | None = None) -> Path:
        """Write ``route_result.json`` and ``legs.csv`` for one run; return its directory."""
        run_dir = self.make_run_directory(run_label)
        self._write_json(run_dir / ROUTE_RESULT_FILE, route_result_to_json(result))
        self._write_text(run_dir / LEGS_FILE, route_legs_to_csv(result))
        return run_dir

    def load_route_result(self, run_dir: Path) -> dict[str, Any]:
        with (run_dir / ROUTE_RESULT_FILE).open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def _write_json(self, path: Path, data: Any) -> None:
        with path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False, indent=2)

    def _write_text(self, path: Path, content: str) -> None:
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)
