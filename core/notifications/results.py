"""
Result types returned by delivery channels and completion providers.

Each provider adapter turns its own failure modes (exceptions, error-shaped
200 responses, empty text) into an Err, so callers only branch on the type.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Ok:
    value: str = ""


@dataclass(frozen=True)
class Err:
    reason: str


Result = Ok | Err


@dataclass
class DispatchResult:
    """Outcome of one dispatch. Only the schedule's fired flag is persisted."""

    success: bool
    sent_count: int = 0
    total_count: int = 0
    errors: list[dict] = field(default_factory=list)
    reason: str | None = None  # set when the dispatch was aborted
    provider: str | None = None  # content provider, None for the template body

    def add_error(self, recipient: str, channel: str, reason: str) -> None:
        self.errors.append({"recipient": recipient, "channel": channel, "reason": reason})

    def to_dict(self) -> dict:
        data = {
            "success": self.success,
            "sentCount": self.sent_count,
            "totalCount": self.total_count,
            "errors": list(self.errors),
        }
        if self.reason:
            data["reason"] = self.reason
        else:
            data["provider"] = self.provider
        return data

    @classmethod
    def aborted(cls, reason: str) -> "DispatchResult":
        return cls(success=False, reason=reason)
