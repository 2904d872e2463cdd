"""Shapes shared by every push provider."""
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Notification:
    title: str
    body: str


@dataclass(frozen=True)
class SendResponse:
    """Outcome for one token inside a multicast."""

    token: str
    success: bool
    error: str | None = None


@dataclass
class MulticastResult:
    responses: list[SendResponse] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.responses if r.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.responses if not r.success)
