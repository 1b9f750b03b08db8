from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ActionResult:
    """Outcome of a user-triggered operation.

    Soft failures (validation, quota, duplicates, store errors) come back as
    ``success=False`` with a message the view can flash; ``reason`` is a
    stable tag for branching.
    """

    success: bool
    message: str = ""
    reason: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str = "", **data) -> "ActionResult":
        return cls(True, message, None, data)

    @classmethod
    def fail(cls, message: str, reason: str | None = None, **data) -> "ActionResult":
        return cls(False, message, reason, data)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)
