"""Thread-safe name-to-signing-method registry.

The registry is the only shared mutable state in the library. It is normally
populated once at import time (see ``bwt.signing_methods``) before concurrent
use. Registration after that point is still safe: every read and write goes
through the same lock, so readers always observe a consistent mapping.

The parser only reads from the registry; it never registers methods.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .protocols import SigningMethod

logger = logging.getLogger(__name__)


class SigningMethodRegistry:
    """Mapping from algorithm name to SigningMethod.

    Thread Safety:
        All operations are protected by an internal lock.

    Attributes:
        _lock: Thread synchronization lock.
        _methods: Internal dict mapping alg -> SigningMethod.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._methods: dict[str, SigningMethod] = {}

    def register(self, method: SigningMethod) -> None:
        """Register ``method`` under its ``alg``, replacing any previous entry.

        Raises:
            ValueError: If the method's algorithm name is empty.
        """
        alg = method.alg
        if not alg:
            raise ValueError("signing method must have a non-empty alg")

        with self._lock:
            self._methods[alg] = method
        logger.debug("Registered signing method %s", alg)

    def get(self, alg: str) -> SigningMethod | None:
        """Return the method registered for ``alg``, or None."""
        with self._lock:
            return self._methods.get(alg)

    def names(self) -> tuple[str, ...]:
        """Return the registered algorithm names, sorted."""
        with self._lock:
            return tuple(sorted(self._methods))

    def __contains__(self, alg: object) -> bool:
        with self._lock:
            return alg in self._methods

    def __len__(self) -> int:
        with self._lock:
            return len(self._methods)


default_registry = SigningMethodRegistry()
"""Process-wide registry used when no registry is passed explicitly."""


def register_signing_method(method: SigningMethod) -> None:
    """Register ``method`` in the default registry."""
    default_registry.register(method)


def get_signing_method(alg: str) -> SigningMethod | None:
    """Look up ``alg`` in the default registry."""
    return default_registry.get(alg)
