import threading


class PresenceRegistry:
    """Which socket session each online user is reachable on.

    One entry per user; a newer connection replaces the older one. All access
    goes through a lock so handlers running on different threads cannot
    interleave a lookup with a removal.
    """

    def __init__(self):
        self._online: dict[int, str] = {}
        self._lock = threading.Lock()

    def add(self, user_id: int, sid: str) -> None:
        with self._lock:
            self._online[user_id] = sid

    def lookup(self, user_id: int) -> str | None:
        with self._lock:
            return self._online.get(user_id)

    def remove_sid(self, sid: str) -> int | None:
        """Drop whichever user is bound to `sid`; returns that user's id."""
        with self._lock:
            for user_id, online_sid in self._online.items():
                if online_sid == sid:
                    del self._online[user_id]
                    return user_id
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._online)
