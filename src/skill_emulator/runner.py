"""ScriptRunner — plays conversation scripts against an emulator and reports the results."""

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .emulator import SkillEmulator
from .errors import EmulatorError
from .response import SkillResponse
from .script import ConversationScript, ScriptTurn
from .validator import ResponseValidator

logger = logging.getLogger(__name__)


@dataclass
class TurnReport:
    """Result for a single scripted turn."""

    index: int
    turn: str
    passed: bool
    prompt: Optional[str]
    details: str
    latency_ms: float
    error: Optional[str] = None


@dataclass
class ScriptReport:
    """Aggregated results for one conversation script."""

    name: str
    total: int
    passed: int
    failed: int
    turns: List[TurnReport]
    avg_latency_ms: float
    generated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def success(self) -> bool:
        return self.failed == 0


class ScriptRunner:
    """Runs a conversation script against one emulator, turn by turn.

    Turns share the emulator, so session, dialog and audio state carry over
    exactly as they would in a live conversation.

    Usage::

        emulator = EmulatorBuilder().interaction_model_file(path).handler(h).create()
        runner = ScriptRunner(emulator, ResponseValidator())
        report = asyncio.run(runner.run(ScriptLoader().load(Path("pizza.json"))))
        runner.print_report(report)
    """

    def __init__(self, emulator: SkillEmulator, validator: ResponseValidator) -> None:
        self.emulator = emulator
        self.validator = validator

    async def run(self, script: ConversationScript) -> ScriptReport:
        """Execute every turn and validate each response."""
        reports: List[TurnReport] = []

        for index, turn in enumerate(script.turns, start=1):
            logger.info("Turn %d: %s", index, turn.label)
            t0 = time.monotonic()
            try:
                response = await self._execute(turn)
            except EmulatorError as exc:
                logger.error("Turn %d failed: %s", index, exc)
                reports.append(
                    TurnReport(
                        index=index,
                        turn=turn.label,
                        passed=False,
                        prompt=None,
                        details="",
                        latency_ms=(time.monotonic() - t0) * 1000.0,
                        error=str(exc),
                    )
                )
                continue

            latency_ms = (time.monotonic() - t0) * 1000.0
            vr = self.validator.validate_response(response, turn.expect)
            reports.append(
                TurnReport(
                    index=index,
                    turn=turn.label,
                    passed=vr.passed,
                    prompt=response.prompt(),
                    details=vr.details,
                    latency_ms=latency_ms,
                )
            )

        return _build_report(script.name, reports)

    async def _execute(self, turn: ScriptTurn) -> SkillResponse:
        if turn.action == "utter":
            return await self.emulator.utter(turn.text)
        if turn.action == "intend":
            return await self.emulator.intend(turn.text, turn.slots)
        if turn.action == "launch":
            return await self.emulator.launch()
        return await self.emulator.end_session()

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def print_report(self, report: ScriptReport) -> None:
        """Print a human-readable summary to stdout."""
        print(
            f"\n{'='*60}\n"
            f"Script Report — {report.name} — {report.generated_at}\n"
            f"{'='*60}"
        )
        print(
            f"  Total   : {report.total}\n"
            f"  Passed  : {report.passed}\n"
            f"  Failed  : {report.failed}\n"
            f"  Latency : avg={report.avg_latency_ms:.1f}ms"
        )
        print(f"\n{'─'*60}")
        for t in report.turns:
            status = "PASS" if t.passed else "FAIL"
            print(f"  [{status}]  {t.index:>2}. {t.turn}")
            if not t.passed:
                if t.error:
                    print(f"          error    : {t.error}")
                else:
                    print(f"          details  : {t.details}")
                    print(f"          prompt   : {t.prompt}")
        print(f"{'='*60}\n")

    def save_report(self, report: ScriptReport, output_path: Path) -> None:
        """Save the report as JSON for automated processing."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(
            json.dumps(asdict(report), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.info("Report saved to %s", output_path)


# ------------------------------------------------------------------
# Internal helper
# ------------------------------------------------------------------


def _build_report(name: str, reports: List[TurnReport]) -> ScriptReport:
    latencies = [r.latency_ms for r in reports]
    return ScriptReport(
        name=name,
        total=len(reports),
        passed=sum(1 for r in reports if r.passed),
        failed=sum(1 for r in reports if not r.passed),
        turns=reports,
        avg_latency_ms=sum(latencies) / len(latencies) if latencies else 0.0,
    )
