"""
Native struct views

A StructView wraps a native struct address without copying it. Whether the
view frees the memory is decided solely by the transfer annotation of the
value it was built from.
"""

from enum import Enum
from typing import Callable, Optional
import ctypes
import ctypes.util
import weakref

FreeFunc = Callable[[int], None]


class Transfer(Enum):
    NONE = 'none'
    CONTAINER = 'container'
    FULL = 'full'

    @property
    def owns(self) -> bool:
        return self is not Transfer.NONE


_glib: Optional[ctypes.CDLL] = None


def load_glib() -> ctypes.CDLL:
    """Load libglib-2.0 once"""
    global _glib
    if _glib is None:
        path = ctypes.util.find_library('glib-2.0')
        if path is None:
            raise OSError('libglib-2.0 not found')
        _glib = ctypes.CDLL(path)
    return _glib


def g_free(address: int):
    load_glib().g_free(ctypes.c_void_p(address))


class StructView:
    """Borrowed or owned view of a native struct"""

    def __init__(self, address: Optional[int], transfer: Transfer = Transfer.NONE,
                 free: Optional[FreeFunc] = None):
        self.address = address or 0
        self.transfer = transfer
        self._finalizer = None
        if self.address and transfer.owns:
            self._finalizer = weakref.finalize(self, free or g_free, self.address)

    @property
    def is_null(self) -> bool:
        return self.address == 0

    @property
    def owned(self) -> bool:
        return self._finalizer is not None and self._finalizer.alive

    def cast(self, ctype: type):
        """Get a ctypes instance aliasing the native memory"""
        if self.is_null:
            raise ValueError('cannot cast a NULL struct view')
        return ctype.from_address(self.address)

    def free(self):
        """Free owned memory now; borrowed views are left untouched"""
        if self._finalizer is not None:
            self._finalizer()

    def __repr__(self) -> str:
        return f'<StructView 0x{self.address:x} transfer={self.transfer.value}>'


def new_struct_native(address: Optional[int], transfer: Transfer = Transfer.NONE,
                      free: Optional[FreeFunc] = None) -> Optional[StructView]:
    """Wrap a native struct pointer; NULL becomes None"""
    if not address:
        return None
    return StructView(address, transfer, free)
