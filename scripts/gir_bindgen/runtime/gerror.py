"""
GError conversion

Converts native GError values into Python exceptions. Taking a GError
copies its fields and frees it, so the native pointer must not be used
afterwards.
"""

from typing import Callable, Optional
import ctypes

from .structs import FreeFunc, load_glib


class GErrorStruct(ctypes.Structure):
    _fields_ = [
        ('domain', ctypes.c_uint32),
        ('code', ctypes.c_int),
        ('message', ctypes.c_char_p),
    ]


class NativeError(Exception):
    """A GError raised by native code"""

    def __init__(self, domain: int, code: int, message: str, domain_name: str = ''):
        super().__init__(message)
        self.domain = domain
        self.code = code
        self.message = message
        self.domain_name = domain_name

    def __str__(self) -> str:
        domain = self.domain_name or str(self.domain)
        return f'{domain} ({self.code}): {self.message}'


def g_error_free(address: int):
    load_glib().g_error_free(ctypes.c_void_p(address))


def quark_to_string(quark: int) -> str:
    glib = load_glib()
    glib.g_quark_to_string.restype = ctypes.c_char_p
    name = glib.g_quark_to_string(ctypes.c_uint32(quark))
    return name.decode('utf-8', 'replace') if name else ''


def take(address: Optional[int], free: Optional[FreeFunc] = None,
         domain_name: Optional[Callable[[int], str]] = None) -> Optional[NativeError]:
    """Convert a GError pointer into a NativeError, taking ownership

    NULL means no error and returns None.
    """
    if not address:
        return None

    err = GErrorStruct.from_address(address)
    message = err.message.decode('utf-8', 'replace') if err.message else ''
    domain = err.domain
    code = err.code
    name = (domain_name or quark_to_string)(domain)

    (free or g_error_free)(address)
    return NativeError(domain, code, message, name)
