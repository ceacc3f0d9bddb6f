from __future__ import annotations

import os
from typing import Any, Dict, List

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .base import Reporter, TaskRecord, TaskStatus, get_verbosity

_STATUS_ICON = {
    TaskStatus.SUCCESS: "[green]✔[/]",
    TaskStatus.FAILED: "[red]✖[/]",
}


def _env_flag(name: str) -> bool:
    return os.getenv(name, "0").lower() in ("1", "true", "yes")


class RichReporter(Reporter):
    """Reporter backed by a rich console with live progress bars.

    ``PARAMSFO_PROGRESS_TRANSIENT=1`` clears the bars once all tasks end and
    prints the collected completion lines instead.
    """

    supports_progress = True

    def __init__(self, console: Console | None = None):
        super().__init__()
        self.console = console or Console(
            stderr=True, highlight=False, soft_wrap=False
        )
        self._transient = _env_flag("PARAMSFO_PROGRESS_TRANSIENT")
        self.progress: Progress | None = None
        self._progress_ids: Dict[str, TaskID] = {}
        self._completions: List[str] = []

    def _ensure_progress(self) -> Progress:
        if self.progress is None:
            self.progress = Progress(
                SpinnerColumn(spinner_name="dots"),
                TextColumn("{task.description}"),
                BarColumn(bar_width=None),
                TextColumn("{task.completed}/{task.total}"),
                TimeElapsedColumn(),
                transient=self._transient,
                console=self.console,
                expand=True,
            )
            self.progress.start()
        return self.progress

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        super().start_task(task_id, name, total, **meta)
        if total is None:
            self.console.rule(name)
            return
        progress = self._ensure_progress()
        self._progress_ids[task_id] = progress.add_task(name, total=total)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        super().advance(task_id, step, **meta)
        pid = self._progress_ids.get(task_id)
        if pid is not None and self.progress is not None:
            self.progress.advance(pid, step)

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> TaskRecord | None:
        rec = super().end_task(task_id, status, **final_meta)
        if rec is None:
            return None
        pid = self._progress_ids.pop(task_id, None)
        line = rec.summary(_STATUS_ICON.get(status, ""))
        if pid is not None and self.progress is not None:
            if rec.total is not None and status is TaskStatus.SUCCESS:
                self.progress.update(pid, completed=rec.total)
        if self._transient:
            self._completions.append(line)
        elif status is TaskStatus.FAILED or get_verbosity() >= 1:
            self.console.print(line)
        if not self._progress_ids:
            self.flush()
        return rec

    def status(self, message: str, **fields: Any) -> None:
        self.console.print(f"[green]INFO[/]: {message}")

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() < level:
            return
        self.console.print(f"[cyan]VERB{level}[/]: {message}")

    def error(self, message: str, **fields: Any) -> None:
        self.console.print(f"[bold red]ERROR[/]: {message}")

    def warning(self, message: str, **fields: Any) -> None:
        self.console.print(f"[yellow]WARN[/]: {message}")

    def section(self, title: str) -> None:
        self.console.rule(title)

    def flush(self) -> None:
        if self.progress is not None:
            try:
                self.progress.stop()
            finally:
                self.progress = None
                self._progress_ids.clear()
        if self._completions:
            self.console.print("\n".join(self._completions))
            self._completions.clear()
