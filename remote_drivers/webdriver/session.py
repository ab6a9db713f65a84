from __future__ import annotations

from dataclasses import dataclass, field

from .capabilities import Capabilities


@dataclass(frozen=True)
class Session:
    """A remote session: its server-assigned id and negotiated capabilities."""

    id: str
    capabilities: Capabilities = field(default_factory=Capabilities)

    def get_id(self) -> str:
        return self.id

    def get_capabilities(self) -> Capabilities:
        return self.capabilities

    def get_capability(self, key: str):
        return self.capabilities.get(key)

    def to_wire(self) -> str:
        # A session serializes to its id.
        return self.id
