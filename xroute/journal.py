"""
Per-operation undo journal

Every write made while ``Ledger.execute`` runs an operation goes through
the operation's journal, which remembers the prior value of the key it
touched.  Effects that live outside the ledger (asset transfers) are
journalled as compensating actions instead.

Rollback replays the entries newest-first.  Neither recording nor
rolling back looks at state the operation did not touch.
"""

from typing import Any, Callable, List, MutableMapping, Tuple

from .logger import get_logger

logger = get_logger(__name__)

_MISSING = object()


class UndoJournal:
    """Undo log for a single operation."""

    def __init__(self) -> None:
        self._entries: List[Tuple[str, Callable[[], None]]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, label: str, undo: Callable[[], None]) -> None:
        """Register a compensating action for a change already made."""
        self._entries.append((label, undo))

    def set_item(self, mapping: MutableMapping, key: Any, value: Any) -> None:
        """``mapping[key] = value``, remembering the previous entry (or its absence)."""
        previous = mapping.get(key, _MISSING)

        def undo() -> None:
            if previous is _MISSING:
                mapping.pop(key, None)
            else:
                mapping[key] = previous

        self.record(f"set {key!r}", undo)
        mapping[key] = value

    def set_attr(self, obj: Any, name: str, value: Any) -> None:
        """``setattr(obj, name, value)``, remembering the previous value."""
        previous = getattr(obj, name)
        self.record(f"set {type(obj).__name__}.{name}", lambda: setattr(obj, name, previous))
        setattr(obj, name, value)

    def rollback(self) -> int:
        """
        Undo every entry newest-first and empty the journal.

        A failing entry does not stop the others; the first failure is
        re-raised once the rest have run.

        Returns:
            Number of entries undone
        """
        entries, self._entries = self._entries, []
        failure = None
        for label, undo in reversed(entries):
            try:
                undo()
            except Exception as e:
                logger.error("Undo step '%s' failed: %s", label, e)
                if failure is None:
                    failure = e
        if failure is not None:
            raise failure
        return len(entries)

    def discard(self) -> None:
        """Forget every entry (the operation committed)."""
        self._entries.clear()
