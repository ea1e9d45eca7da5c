"""In-memory holding area for converted output awaiting download."""

from __future__ import annotations

import secrets
import threading
from collections import OrderedDict

from ..models import ConversionResult

DEFAULT_MAX_ARTIFACTS = 50


class ArtifactStore:
    """Hands out one-shot download tokens, the server-side counterpart of a browser object URL.

    At most ``max_size`` artifacts are held; publishing past that revokes the
    oldest token.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_ARTIFACTS) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._items: "OrderedDict[str, ConversionResult]" = OrderedDict()
        self._lock = threading.Lock()

    def publish(self, result: ConversionResult) -> str:
        token = secrets.token_urlsafe(16)
        with self._lock:
            self._items[token] = result
            while len(self._items) > self.max_size:
                self._items.popitem(last=False)
        return token

    def fetch(self, token: str) -> ConversionResult:
        with self._lock:
            try:
                return self._items[token]
            except KeyError:
                raise KeyError(f"Unknown download token: {token}") from None

    def revoke(self, token: str) -> bool:
        with self._lock:
            return self._items.pop(token, None) is not None

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


__all__ = ["ArtifactStore", "DEFAULT_MAX_ARTIFACTS"]
