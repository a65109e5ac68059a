"""
Callback trampolines

A Trampoline is what native code actually calls. On each call it resolves
the user data handle to the registered Python callback, wraps struct
pointers as views, takes ownership of a GError if one was passed, and
invokes the callback. Nothing is returned to native code.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Optional, Sequence
import ctypes
import os

from ..logging import get_logger
from . import gerror
from .box import HandleRegistry, UnknownHandleError, default_registry
from .structs import FreeFunc, StructView, Transfer, new_struct_native

logger = get_logger('runtime')


class ArgKind(Enum):
    VALUE = auto()
    STRUCT = auto()
    ERROR = auto()
    USER_DATA = auto()


@dataclass
class ArgSpec:
    """How one native argument becomes a Python argument"""
    kind: ArgKind
    transfer: Transfer = Transfer.NONE
    wrap: Optional[Callable[[StructView], Any]] = None
    convert: Optional[Callable[[Any], Any]] = None


def value_arg(convert: Optional[Callable[[Any], Any]] = None) -> ArgSpec:
    return ArgSpec(ArgKind.VALUE, convert=convert)


def struct_arg(wrap: Optional[Callable[[StructView], Any]] = None, transfer: str = 'none') -> ArgSpec:
    return ArgSpec(ArgKind.STRUCT, transfer=Transfer(transfer), wrap=wrap)


def error_arg() -> ArgSpec:
    return ArgSpec(ArgKind.ERROR, transfer=Transfer.FULL)


def user_data_arg() -> ArgSpec:
    return ArgSpec(ArgKind.USER_DATA)


class Trampoline:
    """Native-to-Python entry point for one callback type"""

    def __init__(self, name: str, args: Sequence[ArgSpec],
                 registry: Optional[HandleRegistry] = None,
                 free: Optional[FreeFunc] = None,
                 error_free: Optional[FreeFunc] = None,
                 domain_name: Optional[Callable[[int], str]] = None):
        user_data = [i for i, spec in enumerate(args) if spec.kind == ArgKind.USER_DATA]
        if len(user_data) != 1:
            raise ValueError(f'{name}: trampoline needs exactly one user data argument')
        self.name = name
        self.args = list(args)
        self.registry = registry or default_registry()
        self._user_data = user_data[0]
        self._free = free
        self._error_free = error_free
        self._domain_name = domain_name

    def __call__(self, *native_args):
        if len(native_args) != len(self.args):
            raise TypeError(f'{self.name}: expected {len(self.args)} arguments, got {len(native_args)}')

        fn = self.registry.resolve(native_args[self._user_data] or 0)

        values = []
        for spec, raw in zip(self.args, native_args):
            if spec.kind == ArgKind.USER_DATA:
                continue
            if spec.kind == ArgKind.STRUCT:
                view = new_struct_native(raw, spec.transfer, self._free)
                values.append(spec.wrap(view) if spec.wrap and view is not None else view)
            elif spec.kind == ArgKind.ERROR:
                values.append(gerror.take(raw, self._error_free, self._domain_name))
            else:
                values.append(spec.convert(raw) if spec.convert else raw)

        fn(*values)

    def cfunction(self, argtypes: Sequence[Any]):
        """Wrap the trampoline as a ctypes function pointer

        An unknown handle aborts the process: the callback outlived its
        registration, and there is no caller to report the error to.
        """
        def entry(*native_args):
            try:
                self(*native_args)
            except UnknownHandleError as e:
                logger.critical('%s: %s', self.name, e)
                os.abort()

        return ctypes.CFUNCTYPE(None, *argtypes)(entry)
