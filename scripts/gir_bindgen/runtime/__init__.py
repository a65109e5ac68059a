"""
runtime - support code imported by generated bindings

Has no dependency on the model pipeline.
"""

from .box import HandleRegistry, UnknownHandleError
from .gerror import NativeError
from .marshal import Trampoline, error_arg, struct_arg, user_data_arg, value_arg
from .structs import StructView, Transfer

__all__ = [
    'HandleRegistry', 'UnknownHandleError',
    'NativeError',
    'Trampoline', 'error_arg', 'struct_arg', 'user_data_arg', 'value_arg',
    'StructView', 'Transfer',
]
