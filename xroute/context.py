"""
Execution context and event records

Every state-changing call runs against an explicit ``ExecutionContext``
that names the authenticated caller and the current block height, and
buffers the events the call emits.  The ledger commits the buffer only
when the call succeeds, and replays the context's undo journal when it
fails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .journal import UndoJournal


@dataclass(frozen=True)
class Event:
    """Structured record emitted once per successful operation."""
    name: str
    block_height: int
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.name, "block_height": self.block_height, **self.data}


@dataclass
class ExecutionContext:
    """Data passed to every state-changing operation."""
    caller: str
    block_height: int = 0
    events: List[Event] = field(default_factory=list)
    journal: UndoJournal = field(default_factory=UndoJournal)

    def emit(self, name: str, **data: Any) -> Event:
        event = Event(name=name, block_height=self.block_height, data=data)
        self.events.append(event)
        return event
