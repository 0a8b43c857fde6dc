from __future__ import annotations

import logging
import random
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


def normalize_answer(answer: str) -> str:
    """Answers match after stripping surrounding whitespace and casefolding."""
    return (answer or "").strip().casefold()


@dataclass(frozen=True)
class Challenge:
    session_id: str
    question: str
    expected_answer: str = field(repr=False)
    issued_at: datetime = field(default_factory=datetime.utcnow)
    challenge_id: str = field(default_factory=lambda: uuid.uuid4().hex)


class ChallengeGenerator(Protocol):
    def generate(self) -> tuple[str, str]:
        """Return a (question, answer) pair."""
        ...


class ArithmeticChallengeGenerator:
    """Single-digit addition or subtraction; subtraction never goes negative."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.SystemRandom()

    def generate(self) -> tuple[str, str]:
        a = self._rng.randint(1, 9)
        b = self._rng.randint(1, 9)
        if self._rng.random() < 0.5:
            return f"{a} + {b} = ?", str(a + b)
        # Larger operand first so the expected answer is the absolute difference.
        a, b = max(a, b), min(a, b)
        return f"{a} - {b} = ?", str(a - b)


@dataclass
class _Entry:
    challenge: Challenge
    expires_at: float | None


class ChallengeService:
    """Issues and checks one-time review challenges, one active per submission session.

    State lives in memory only and is lost on restart. Issuing for a session
    supersedes whatever was active there; verifying never changes state.
    A submission ``claim``s its challenge (check and take, atomically) before
    writing, then either ``consume``s it after commit or ``restore``s it when
    the write fails, so one answer can never be spent twice.
    """

    def __init__(
        self,
        generator: ChallengeGenerator | None = None,
        *,
        max_sessions: int = 1024,
        ttl_seconds: int = 0,
        timer: Callable[[], float] = time.time,
    ) -> None:
        self.generator = generator or ArithmeticChallengeGenerator()
        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self._timer = timer
        self._lock = Lock()
        self._active: dict[str, _Entry] = {}
        # challenge_id -> entry taken by an in-flight submission
        self._claimed: dict[str, _Entry] = {}

    def issue(self, session_id: str | None = None) -> Challenge:
        session_id = session_id or uuid.uuid4().hex
        question, answer = self.generator.generate()
        challenge = Challenge(session_id=session_id, question=question, expected_answer=answer)

        expires_at = self._timer() + self.ttl_seconds if self.ttl_seconds > 0 else None
        with self._lock:
            if len(self._active) >= self.max_sessions and session_id not in self._active:
                # Dicts keep insertion order, so this drops the oldest session.
                self._active.pop(next(iter(self._active)), None)
            self._active.pop(session_id, None)
            self._active[session_id] = _Entry(challenge=challenge, expires_at=expires_at)

        logger.debug("Challenge issued for session %s", session_id)
        return challenge

    def _live_entry(self, session_id: str) -> _Entry | None:
        # Caller holds self._lock.
        entry = self._active.get(session_id)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at < self._timer():
            self._active.pop(session_id, None)
            return None
        return entry

    def active(self, session_id: str) -> Challenge | None:
        with self._lock:
            entry = self._live_entry(session_id)
            return entry.challenge if entry is not None else None

    def verify(self, challenge: Challenge | None, supplied_answer: str) -> bool:
        if challenge is None:
            return False
        current = self.active(challenge.session_id)
        if current is None or current.challenge_id != challenge.challenge_id:
            return False
        return normalize_answer(supplied_answer) == normalize_answer(challenge.expected_answer)

    def claim(self, challenge: Challenge | None, supplied_answer: str) -> bool:
        """Verify and take the challenge in one step. Only one caller can win."""
        if challenge is None:
            return False
        with self._lock:
            entry = self._live_entry(challenge.session_id)
            if entry is None or entry.challenge.challenge_id != challenge.challenge_id:
                return False
            if normalize_answer(supplied_answer) != normalize_answer(challenge.expected_answer):
                return False
            del self._active[challenge.session_id]
            self._claimed[challenge.challenge_id] = entry
            return True

    def restore(self, challenge: Challenge | None) -> None:
        """Give a claimed challenge back after a failed write, unless the session moved on."""
        if challenge is None:
            return
        with self._lock:
            entry = self._claimed.pop(challenge.challenge_id, None)
            if entry is not None and challenge.session_id not in self._active:
                self._active[challenge.session_id] = entry

    def consume(self, challenge: Challenge | None) -> None:
        if challenge is None:
            return
        with self._lock:
            self._claimed.pop(challenge.challenge_id, None)
            entry = self._active.get(challenge.session_id)
            if entry is not None and entry.challenge.challenge_id == challenge.challenge_id:
                del self._active[challenge.session_id]

    def clear(self) -> None:
        with self._lock:
            self._active.clear()
            self._claimed.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._active)
