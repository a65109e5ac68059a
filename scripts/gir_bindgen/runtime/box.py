"""
Callback handle registry

Native code never holds a reference to a Python callback. It holds an
opaque integer handle, passed as the callback's user data, which the
trampoline resolves back to the callback through a registry.
"""

from typing import Any
import itertools
import threading


class UnknownHandleError(LookupError):
    """A handle was never registered or has already been released"""

    def __init__(self, handle: int):
        super().__init__(f'callback not found for handle {handle}')
        self.handle = handle


class HandleRegistry:
    """Thread-safe map from opaque handles to Python values"""

    def __init__(self):
        self._lock = threading.Lock()
        self._values: dict[int, Any] = {}
        # 0 is never issued; it reads as a NULL user data pointer.
        self._counter = itertools.count(1)

    def register(self, value: Any) -> int:
        """Store a value and return a new handle for it"""
        with self._lock:
            handle = next(self._counter)
            self._values[handle] = value
        return handle

    def resolve(self, handle: int) -> Any:
        """Get the value of a live handle; raises UnknownHandleError otherwise"""
        with self._lock:
            try:
                return self._values[handle]
            except KeyError:
                raise UnknownHandleError(handle) from None

    def release(self, handle: int):
        """Drop a handle once native code will no longer use it"""
        with self._lock:
            self._values.pop(handle, None)

    def __contains__(self, handle: int) -> bool:
        with self._lock:
            return handle in self._values

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)


_default = HandleRegistry()


def default_registry() -> HandleRegistry:
    return _default


def assign(value: Any) -> int:
    """Register a value in the default registry"""
    return _default.register(value)


def get(handle: int) -> Any:
    """Resolve a handle in the default registry"""
    return _default.resolve(handle)


def delete(handle: int):
    """Release a handle in the default registry"""
    _default.release(handle)
