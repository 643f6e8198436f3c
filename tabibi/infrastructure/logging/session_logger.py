"""Per-run markdown trail of what each pipeline phase produced."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from tabibi.config.constants import PHASE_LABELS, Phase

RUN_FILE = "00_run.md"
RESULT_FILE = "99_result.md"


def _block(title: str, body: str, lang: str = "") -> str:
    return f"## {title}\n\n```{lang}\n{body}\n```\n\n"


def _label(phase_name: str) -> str:
    try:
        return PHASE_LABELS[Phase(phase_name)]
    except ValueError:
        return ""


class SessionLogger:
    """
    Writes one directory per pipeline run with a markdown file per phase.

    Disabled loggers accept every call and write nothing, so callers never
    have to branch on configuration.
    """

    def __init__(self, base_dir: Optional[str] = None, enabled: bool = True) -> None:
        # Defaults to logs/ next to the tabibi package.
        self.base_dir = Path(base_dir) if base_dir else Path(__file__).parents[3] / "logs"
        self.enabled = enabled
        self.session_dir: Optional[Path] = None
        self.phase_counter: int = 0

    def start_session(self, user_id: str = "anonymous", user_message: str = "") -> str | None:
        """Create the run directory and record who asked what. Returns its path."""
        if not self.enabled:
            return None

        started = datetime.now()
        self.session_dir = self.base_dir / started.strftime("%Y%m%d-%H%M%S-%f")
        self.session_dir.mkdir(parents=True, exist_ok=True)
        self.phase_counter = 0

        header = (
            f"# Run {self.session_dir.name}\n\n"
            f"- user: `{user_id}`\n"
            f"- started: {started.isoformat(timespec='seconds')}\n\n"
        )
        (self.session_dir / RUN_FILE).write_text(
            header + _block("Question", user_message), encoding="utf-8"
        )
        return str(self.session_dir)

    def log_phase_output(
        self,
        phase_name: str,
        raw_response: str,
        parsed_response: Optional[Any] = None,
        input_text: Optional[str] = None,
        system_prompt: Optional[str] = None,
        execution_time_ms: Optional[float] = None,
        provider: Optional[str] = None,
    ) -> None:
        """
        Write ``NN_<phase>.md`` for one finished phase.

        Args:
            phase_name: Phase value, e.g. ``planning``.
            raw_response: Text the phase produced.
            parsed_response: Structured form of the output, when there is one.
            input_text: What the phase worked on.
            system_prompt: System prompt sent to the provider.
            execution_time_ms: Wall time of the phase.
            provider: Provider that answered, ``None`` for static fallbacks.
        """
        if not self.enabled:
            return
        if self.session_dir is None:
            raise RuntimeError("Session not started. Call start_session() first.")

        self.phase_counter += 1
        label = _label(phase_name)
        lines = [f"# {self.phase_counter}. {phase_name}" + (f" ({label})" if label else ""), ""]
        lines.append(f"- provider: {provider or 'static fallback'}")
        if execution_time_ms is not None:
            lines.append(f"- took: {execution_time_ms:.2f} ms")
        content = "\n".join(lines) + "\n\n"

        if system_prompt:
            content += _block("System prompt", system_prompt)
        if input_text:
            content += _block("Input", input_text)
        content += _block("Output", raw_response)
        if parsed_response:
            content += _block(
                "Output (structured)",
                json.dumps(parsed_response, indent=2, ensure_ascii=False, default=str),
                "json",
            )

        filepath = self.session_dir / f"{self.phase_counter:02d}_{phase_name}.md"
        filepath.write_text(content, encoding="utf-8")

    def end_session(self, success: bool = True, final_message: str = "") -> None:
        if self.enabled and self.session_dir is not None:
            status = "answered" if success else "failed or cancelled"
            (self.session_dir / RESULT_FILE).write_text(
                f"# Result: {status}\n\n" + _block("Answer", final_message), encoding="utf-8"
            )
        self.session_dir = None
        self.phase_counter = 0
