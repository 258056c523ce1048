"""
High score table stored under one key of a host-provided key-value store.

The stored value is a JSON array of ``{name, score, linesCleared,
applesEaten, date}`` records, highest score first, at most ten entries.
A missing, unreadable or corrupt store reads as an empty table.
"""
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from snaketris_config import CONFIG

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    def __init__(self):
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """All keys live in one JSON object on disk."""

    def __init__(self, path: str):
        self.path = os.path.expanduser(path)

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read()
        except (OSError, ValueError):
            data = {}
        data[key] = value
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp, self.path)


@dataclass(frozen=True)
class HighScore:
    name: str
    score: int
    lines_cleared: int
    apples_eaten: int
    date: str

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "score": self.score,
            "linesCleared": self.lines_cleared,
            "applesEaten": self.apples_eaten,
            "date": self.date,
        }

    @staticmethod
    def from_dict(d: dict) -> "HighScore":
        return HighScore(
            name=str(d["name"]),
            score=int(d["score"]),
            lines_cleared=int(d.get("linesCleared", 0)),
            apples_eaten=int(d.get("applesEaten", 0)),
            date=str(d.get("date", "")),
        )


def normalize_name(name: str) -> str:
    """Initials are 1-3 characters, stored upper-case."""
    n = name.strip().upper()
    if not 1 <= len(n) <= 3:
        raise ValueError(f"High score name must be 1-3 characters, got {name!r}")
    return n


class HighScoreTable:
    def __init__(self, store: KeyValueStore, key: Optional[str] = None,
                 limit: Optional[int] = None):
        self.store = store
        self.key = key or CONFIG["HIGH_SCORE_KEY"]
        self.limit = limit if limit is not None else CONFIG["HIGH_SCORE_LIMIT"]

    def load(self) -> List[HighScore]:
        try:
            raw = self.store.get(self.key)
            if not raw:
                return []
            entries = [HighScore.from_dict(d) for d in json.loads(raw)]
        except (OSError, ValueError, TypeError, KeyError) as e:
            logger.warning("High scores unavailable, starting empty: %s", e)
            return []
        entries.sort(key=lambda h: h.score, reverse=True)
        return entries[:self.limit]

    def is_high_score(self, score: int) -> bool:
        scores = self.load()
        if len(scores) < self.limit:
            return True
        return bool(scores) and score > scores[-1].score

    def save(self, name: str, score: int, lines_cleared: int, apples_eaten: int,
             date: Optional[str] = None) -> List[HighScore]:
        entry = HighScore(
            name=normalize_name(name),
            score=score,
            lines_cleared=lines_cleared,
            apples_eaten=apples_eaten,
            date=date or datetime.now(timezone.utc).isoformat(),
        )
        scores = self.load()
        scores.append(entry)
        scores.sort(key=lambda h: h.score, reverse=True)
        del scores[self.limit:]
        try:
            self.store.set(self.key, json.dumps([h.to_dict() for h in scores]))
        except OSError as e:
            logger.warning("Could not save high scores: %s", e)
        else:
            logger.info("Saved high score %s %d", entry.name, entry.score)
        return scores
