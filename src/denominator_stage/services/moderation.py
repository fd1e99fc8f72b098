# src/denominator_stage/services/moderation.py
"""Content moderation for user-submitted text.

The filter is advisory: it catches obvious spam and abuse before a chat
message or comment is stored. It is not a security boundary.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from denominator_stage.core.settings import Settings, settings

REASON_EMPTY = "Message cannot be empty"
REASON_CAPS = "Excessive caps detected"
REASON_REPEATED = "Excessive repeated characters"
REASON_INAPPROPRIATE = "Inappropriate content detected"


@dataclass(frozen=True)
class ModerationResult:
    """Outcome of moderating a piece of text."""

    approved: bool
    reason: str | None = None


APPROVED = ModerationResult(approved=True)


@dataclass(frozen=True)
class ModerationPolicy:
    """Thresholds and denylist used by ``ContentModerator``."""

    max_length: int = 2000
    caps_ratio: float = 0.7
    caps_min_length: int = 10
    max_repeat: int = 10
    denylist: Sequence[str] = field(default_factory=lambda: ("spam", "fuck", "shit", "bitch"))

    @classmethod
    def from_settings(cls, config: Settings) -> ModerationPolicy:
        return cls(
            max_length=config.moderation_max_length,
            caps_ratio=config.moderation_caps_ratio,
            caps_min_length=config.moderation_caps_min_length,
            max_repeat=config.moderation_max_repeat,
            denylist=tuple(word.lower() for word in config.moderation_denylist),
        )


class Moderator(Protocol):
    """Anything that can approve or reject text."""

    def moderate(self, text: str) -> ModerationResult: ...


Rule = Callable[[str], ModerationResult | None]


class ContentModerator:
    """Applies an ordered list of rules; the first rejection wins."""

    def __init__(self, policy: ModerationPolicy | None = None) -> None:
        self.policy = policy or ModerationPolicy()
        self._repeat_pattern = re.compile(
            r"(.)\1{%d,}" % max(1, self.policy.max_repeat - 1), re.DOTALL
        )
        self.rules: list[Rule] = [
            self._check_empty,
            self._check_length,
            self._check_caps,
            self._check_repeats,
            self._check_denylist,
        ]

    def moderate(self, text: str) -> ModerationResult:
        """Return the first rule failure for ``text`` or an approval."""
        for rule in self.rules:
            result = rule(text)
            if result is not None:
                return result
        return APPROVED

    def _check_empty(self, text: str) -> ModerationResult | None:
        if not text or not text.strip():
            return ModerationResult(False, REASON_EMPTY)
        return None

    def _check_length(self, text: str) -> ModerationResult | None:
        if len(text) > self.policy.max_length:
            return ModerationResult(
                False, f"Message too long (max {self.policy.max_length} characters)"
            )
        return None

    def _check_caps(self, text: str) -> ModerationResult | None:
        if len(text) <= self.policy.caps_min_length:
            return None
        uppercase = sum(1 for char in text if "A" <= char <= "Z")
        if uppercase / len(text) > self.policy.caps_ratio:
            return ModerationResult(False, REASON_CAPS)
        return None

    def _check_repeats(self, text: str) -> ModerationResult | None:
        if self._repeat_pattern.search(text):
            return ModerationResult(False, REASON_REPEATED)
        return None

    def _check_denylist(self, text: str) -> ModerationResult | None:
        lowered = text.lower()
        if any(word and word in lowered for word in self.policy.denylist):
            return ModerationResult(False, REASON_INAPPROPRIATE)
        return None


def get_moderator() -> Moderator:
    """Return a moderator configured from application settings."""
    return ContentModerator(ModerationPolicy.from_settings(settings))
