"""Timing and outcome diagnostics for autofill runs."""

import json
import logging
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class StageInfo:
    """Timing of one stage of a run (detect_platform, collect_fields ...)."""
    name: str
    start_time: float
    end_time: Optional[float] = None
    success: Optional[bool] = None
    duration: Optional[float] = None
    error: Optional[str] = None
    actions: List[Dict[str, Any]] = field(default_factory=list)


class DiagnosticsManager:
    """Tracks stages and per-field actions of autofill runs."""

    def __init__(self, run_id: str, enabled: bool = True, base_output_dir: str = "run_results"):
        """Initialize the diagnostics manager.

        Args:
            run_id: A unique identifier for this run (e.g., timestamp).
            enabled: Whether results are written to disk.
            base_output_dir: The base directory to store results for all runs.
        """
        self.run_id = run_id
        self.enabled = enabled
        self.logger = logging.getLogger(__name__)
        self.stages: Dict[str, StageInfo] = {}
        self.current_stage: Optional[str] = None
        self.start_time = time.time()
        self._current_action: Optional[Dict[str, Any]] = None

        self.run_output_dir = os.path.join(base_output_dir, self.run_id)
        if self.enabled:
            try:
                os.makedirs(self.run_output_dir, exist_ok=True)
                self.logger.info(f"Diagnostics for run '{self.run_id}' will be saved to {self.run_output_dir}")
            except OSError as e:
                self.logger.error(f"Failed to create diagnostics directory {self.run_output_dir}: {e}")
                self.enabled = False

    def start_stage(self, stage_name: str) -> None:
        self.logger.info(f"Starting stage: {stage_name}")
        self.current_stage = stage_name
        self.stages[stage_name] = StageInfo(name=stage_name, start_time=time.time())

    def end_stage(self, success: bool, error: Optional[str] = None) -> None:
        if self.current_stage is None:
            self.logger.warning("No current stage to end")
            return

        stage = self.stages[self.current_stage]
        stage.end_time = time.time()
        stage.success = success
        stage.error = error
        stage.duration = stage.end_time - stage.start_time

        msg = f"Stage {stage.name} {'succeeded' if success else 'failed'}"
        if error:
            msg += f": {error}"
        msg += f" (took {stage.duration:.2f}s)"
        (self.logger.info if success else self.logger.error)(msg)
        self.current_stage = None

    @contextmanager
    def track_stage(self, stage_name: str):
        """Context manager for tracking a stage.

        Args:
            stage_name: Name of the stage
        """
        self.start_stage(stage_name)
        try:
            yield
            self.end_stage(True)
        except Exception as e:
            self.end_stage(False, error=str(e))
            raise

    def start_action(self, action_type: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Start tracking an action within the current stage.

        Args:
            action_type: Type of action (e.g., 'fill', 'upload')
            details: Optional details about the action
        """
        if not self.current_stage:
            self.logger.warning(f"Starting action '{action_type}' without an active stage")
            return
        self._current_action = {"type": action_type, "start_time": time.time(), "details": details or {}}
        self.stages[self.current_stage].actions.append(self._current_action)

    def end_action(self, success: bool, error: Optional[str] = None) -> None:
        action = self._current_action
        if action is None:
            return
        action["end_time"] = time.time()
        action["duration"] = action["end_time"] - action["start_time"]
        action["success"] = success
        if error:
            action["error"] = error
        self.logger.debug(
            f"Action {action['type']} {'completed' if success else 'failed'} in {action['duration']:.2f}s"
        )
        self._current_action = None

    def get_diagnostics(self) -> Dict[str, Any]:
        """Get diagnostics information.

        Returns:
            Dict with overall duration and per-stage timings
        """
        return {
            "run_id": self.run_id,
            "start_time": self.start_time,
            "duration": time.time() - self.start_time,
            "stages": {
                name: {
                    "start_time": stage.start_time,
                    "end_time": stage.end_time,
                    "success": stage.success,
                    "duration": stage.duration,
                    "error": stage.error,
                    "actions": stage.actions,
                }
                for name, stage in self.stages.items()
            },
        }

    def save_intermediate_result(self, filename: str, data: Any) -> Optional[str]:
        """Save structured data as a JSON file within the run's directory.

        Returns:
            The written path, or None when diagnostics are disabled or the write failed
        """
        if not self.enabled:
            self.logger.debug(f"Skipping save of '{filename}', diagnostics are disabled")
            return None

        if not filename.endswith('.json'):
            filename += '.json'
        filepath = os.path.join(self.run_output_dir, filename)
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=4, ensure_ascii=False, default=str)
        except (TypeError, OSError) as e:
            self.logger.error(f"Failed to write result to '{filepath}': {e}")
            return None
        self.logger.info(f"Saved result to '{filepath}'")
        return filepath
