"""
Escalation tags.

A tag identifies which reminder variant a notification represents and is
part of the notification dedup key:

    TWENTY_FOUR_HOUR  -> "24h"     (intervention tomorrow)
    TODAY             -> "today"   (intervention today)
    Tier(1..3)        -> "tier:N"  (invoice reminder tier)

Tags are stored in Notification.tag as their string key. Rows imported
from older data may only carry the variant inside free-form metadata;
`from_metadata` reads those and returns None for anything it cannot
interpret, so a malformed record never counts as a match.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MAX_TIER = 3


@dataclass(frozen=True)
class EscalationTag:
    kind: str
    tier: int | None = None

    def __post_init__(self):
        if self.kind == "tier":
            if not isinstance(self.tier, int) or not 1 <= self.tier <= MAX_TIER:
                raise ValueError(f"tier must be 1..{MAX_TIER}, got {self.tier!r}")
        elif self.kind in ("24h", "today"):
            if self.tier is not None:
                raise ValueError(f"{self.kind} tag takes no tier")
        else:
            raise ValueError(f"unknown tag kind {self.kind!r}")

    @property
    def key(self) -> str:
        if self.kind == "tier":
            return f"tier:{self.tier}"
        return self.kind

    def __str__(self) -> str:
        return self.key

    @classmethod
    def for_tier(cls, tier: int) -> EscalationTag:
        return cls("tier", tier)

    @classmethod
    def parse(cls, raw) -> EscalationTag | None:
        """Parse a stored key. Unknown or malformed values give None."""
        if not raw or not isinstance(raw, str):
            return None
        try:
            if raw.startswith("tier:"):
                return cls.for_tier(int(raw.split(":", 1)[1]))
            return cls(raw)
        except ValueError:
            logger.debug("Ignoring malformed escalation tag %r", raw)
            return None

    @classmethod
    def from_metadata(cls, metadata) -> EscalationTag | None:
        """
        Recover a tag from legacy free-form metadata.

        Accepts a dict or its JSON text with either `reminderType`
        ("24h"/"today") or `reminderNumber`/`tier` (1..3).
        """
        if isinstance(metadata, str):
            try:
                metadata = json.loads(metadata)
            except ValueError:
                logger.debug("Ignoring unparsable notification metadata")
                return None

        if not isinstance(metadata, dict):
            return None

        reminder_type = metadata.get("reminderType")
        if reminder_type is not None:
            return cls.parse(reminder_type)

        tier = metadata.get("tier", metadata.get("reminderNumber"))
        if isinstance(tier, int) and not isinstance(tier, bool):
            try:
                return cls.for_tier(tier)
            except ValueError:
                return None

        return None


TWENTY_FOUR_HOUR = EscalationTag("24h")
TODAY = EscalationTag("today")


def tag_choices() -> list[tuple[str, str]]:
    """Choices for the Notification.tag column."""
    keys = [TWENTY_FOUR_HOUR.key, TODAY.key]
    keys += [EscalationTag.for_tier(t).key for t in range(1, MAX_TIER + 1)]
    return [("", "-")] + [(k, k) for k in keys]
