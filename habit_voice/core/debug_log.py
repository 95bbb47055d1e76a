"""
Debug logging for extraction and admission decisions.

When HV_DEBUG=1, every segment run through the cascade is written out as a JSON
trace listing each candidate tried, its tier and whether it was admitted.
Persistence-time rejections are written alongside. Files live under
{project_root}/.habit_voice/debug/session_<timestamp>/.
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .types import ExtractionTrace


class DebugLogger:
    """
    Writes extraction traces and admission rejections as JSON files.
    """

    def __init__(self, project_root: str = ".", enabled: Optional[bool] = None):
        """
        Initialize debug logger.

        Args:
            project_root: Project root directory for log storage
            enabled: Override debug enable flag, uses HV_DEBUG env var if None
        """
        self.project_root = project_root
        self.enabled = enabled if enabled is not None else is_debug_enabled()
        self.session_id = datetime.now().strftime("%Y%m%d_%H%M%S")

        if self.enabled:
            self._setup_log_directory()

    def _setup_log_directory(self) -> None:
        self.log_dir = Path(self.project_root) / ".habit_voice" / "debug"
        self.session_dir = self.log_dir / f"session_{self.session_id}"
        self.session_dir.mkdir(parents=True, exist_ok=True)

    def is_enabled(self) -> bool:
        return self.enabled

    def _write(self, step: str, payload: Dict[str, Any]) -> Optional[Path]:
        timestamp = datetime.now().isoformat()
        log_data = {"timestamp": timestamp, "session_id": self.session_id, "step": step, **payload}

        filename = f"{step}_{timestamp.replace(':', '-').replace('.', '_')}.json"
        log_file = self.session_dir / filename

        with open(log_file, "w", encoding="utf-8") as f:
            json.dump(log_data, f, indent=2, ensure_ascii=False, default=str)
        return log_file

    def log_extraction_trace(self, trace: ExtractionTrace) -> Optional[Path]:
        """
        Log every candidate the cascade tried for one segment.

        Args:
            trace: Trace produced by the cascade run
        """
        if not self.enabled:
            return None

        return self._write(
            "extraction_trace",
            {
                "text": trace.text,
                "attempts": [step.model_dump() for step in trace.steps],
                "result": trace.result.model_dump() if trace.result else None,
                "stats": {
                    "attempt_count": len(trace.steps),
                    "rejected_count": sum(1 for step in trace.steps if not step.accepted),
                },
            },
        )

    def log_admission_rejection(self, raw_name: str, normalized_name: str, registry_names: List[str], suggestions: List[str]) -> Optional[Path]:
        """
        Log a name dropped by the existence check at persistence time.

        Args:
            raw_name: Name as detected
            normalized_name: Name after registry normalization
            registry_names: Canonical names the check compared against
            suggestions: Closest canonical names, for diagnosis only
        """
        if not self.enabled:
            return None

        return self._write(
            "admission_rejection",
            {
                "raw_name": raw_name,
                "normalized_name": normalized_name,
                "registry_names": registry_names,
                "suggestions": suggestions,
            },
        )


# Global debug logger instance
_debug_logger: Optional[DebugLogger] = None


def get_debug_logger(project_root: str = ".") -> DebugLogger:
    """Get or create the global debug logger for a project root."""
    global _debug_logger
    if _debug_logger is None or _debug_logger.project_root != project_root or _debug_logger.enabled != is_debug_enabled():
        _debug_logger = DebugLogger(project_root)
    return _debug_logger


def is_debug_enabled() -> bool:
    """True if HV_DEBUG=1 is set."""
    return os.getenv("HV_DEBUG", "0") == "1"
