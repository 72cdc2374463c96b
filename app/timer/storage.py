import logging
import os
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from app.timer.state import TimerState

logger = logging.getLogger("app.timer.storage")

_adapter = TypeAdapter(TimerState)


def dump_state(state: TimerState) -> str:
    return _adapter.dump_json(state).decode()


def load_state(raw: str | bytes) -> TimerState:
    return _adapter.validate_json(raw)


class TimerStateFile:
    """Keeps the timer state across restarts in a small JSON file."""

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def load(self) -> TimerState:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return TimerState()

        try:
            return load_state(raw)
        except ValidationError:
            logger.warning("Ignoring unreadable timer state in %s", self.path)
            return TimerState()

    def save(self, state: TimerState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(dump_state(state), encoding="utf-8")
        os.replace(tmp, self.path)
