"""In-process registry of which connection each identity currently holds."""


class PresenceRegistry:
    """Maps an identity to its single live connection handle.

    Last connect wins: registering a second connection for the same identity
    replaces the first. State lives only for the lifetime of the process.
    """

    def __init__(self) -> None:
        self._handles: dict[str, str] = {}

    def register(self, identity: str, handle: str) -> str | None:
        """Bind an identity to a handle. Returns the handle it replaced, if any."""
        previous = self._handles.get(identity)
        self._handles[identity] = handle
        return previous if previous != handle else None

    def unregister(self, identity: str, handle: str | None = None) -> bool:
        """Remove an identity's entry.

        When ``handle`` is given the entry is only removed if it still points
        at that handle. Returns True if an entry was removed.
        """
        current = self._handles.get(identity)
        if current is None:
            return False
        if handle is not None and current != handle:
            return False
        del self._handles[identity]
        return True

    def lookup(self, identity: str) -> str | None:
        return self._handles.get(identity)

    def online_identities(self) -> list[str]:
        return list(self._handles)

    def clear(self) -> None:
        self._handles.clear()

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, identity: object) -> bool:
        return identity in self._handles
