"""Conversation script loader: scripted turns and their expected responses."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

ACTIONS = ("utter", "intend", "launch", "end_session")


@dataclass
class TurnExpectation:
    """What a response must contain. ``None`` fields are not checked."""

    prompt: Optional[str] = None
    reprompt: Optional[str] = None
    card_title: Optional[str] = None
    directive: Optional[str] = None
    session_ended: Optional[bool] = None


@dataclass
class ScriptTurn:
    """A single scripted turn."""

    action: str
    text: str = ""
    slots: Dict[str, str] = field(default_factory=dict)
    expect: TurnExpectation = field(default_factory=TurnExpectation)

    @property
    def label(self) -> str:
        if self.action == "intend" and self.slots:
            slots = " ".join(f"{k}={v}" for k, v in self.slots.items())
            return f"intend {self.text} {slots}"
        return f"{self.action} {self.text}".strip()


@dataclass
class ConversationScript:
    name: str
    turns: List[ScriptTurn]
    path: Optional[Path] = None


def _parse_turn(raw: dict, index: int) -> ScriptTurn:
    actions = [a for a in ACTIONS if a in raw]
    if len(actions) != 1:
        raise ValueError(
            f"Turn {index} must have exactly one of {', '.join(ACTIONS)}: {raw}"
        )
    action = actions[0]
    value = raw[action]
    text = value if isinstance(value, str) else ""

    expect_raw = raw.get("expect") or {}
    unknown = set(expect_raw) - set(TurnExpectation.__dataclass_fields__)
    if unknown:
        raise ValueError(f"Turn {index} has unknown expectations: {sorted(unknown)}")

    return ScriptTurn(
        action=action,
        text=text,
        slots={k: str(v) for k, v in (raw.get("slots") or {}).items()},
        expect=TurnExpectation(**expect_raw),
    )


class ScriptLoader:
    """Loads conversation scripts from JSON files.

    A script file has the following format::

        {
          "name": "order a pizza",
          "turns": [
            {"launch": true, "expect": {"prompt": "welcome"}},
            {"utter": "order a large pizza", "expect": {"directive": "Dialog.Delegate"}},
            {"intend": "OrderIntent", "slots": {"size": "large"}},
            {"end_session": true}
          ]
        }
    """

    SCRIPT_GLOB = "*.json"

    def load(self, path: Path) -> ConversationScript:
        """Load a single script.

        Raises:
            FileNotFoundError: If the script file is missing.
            ValueError: If the script JSON is malformed.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Conversation script not found: {path}")

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Malformed conversation script: {path}: {exc}") from exc

        if not isinstance(raw, dict) or not isinstance(raw.get("turns"), list):
            raise ValueError(f"Conversation script has no turns list: {path}")

        turns = [_parse_turn(t, i) for i, t in enumerate(raw["turns"], start=1)]
        script = ConversationScript(name=raw.get("name") or path.stem, turns=turns, path=path)
        logger.info("Loaded script %r (%d turns) from %s", script.name, len(turns), path)
        return script

    def load_all(self, script_dir: Path) -> List[ConversationScript]:
        """Load every script in a directory, sorted by filename.

        Raises:
            FileNotFoundError: If the directory does not exist.
        """
        script_dir = Path(script_dir)
        if not script_dir.is_dir():
            raise FileNotFoundError(f"Script directory not found: {script_dir}")
        return [self.load(p) for p in sorted(script_dir.glob(self.SCRIPT_GLOB))]
