"""
Callback binding generation module

Generates the Python trampolines through which native code invokes
callbacks registered from Python. Each trampoline is declared as a
runtime.Trampoline plus a ctypes entry point; the user data argument
carries the handle of the registered callback.
"""

from typing import Callable, Optional, TYPE_CHECKING

from .codegen import CodeGen, as_pascal_case
from .ir import Callback, NodeKind, Parameter
from .logging import get_logger

if TYPE_CHECKING:
    from .repository import Namespace, TypeFindResult

logger = get_logger('callback')

# GIR type -> ctypes type name
CTYPES = {
    'gboolean': 'c_int',
    'gchar': 'c_char',
    'guchar': 'c_ubyte',
    'gint': 'c_int',
    'guint': 'c_uint',
    'gint8': 'c_int8',
    'guint8': 'c_uint8',
    'gint16': 'c_int16',
    'guint16': 'c_uint16',
    'gint32': 'c_int32',
    'guint32': 'c_uint32',
    'gint64': 'c_int64',
    'guint64': 'c_uint64',
    'glong': 'c_long',
    'gulong': 'c_ulong',
    'gsize': 'c_size_t',
    'gssize': 'c_ssize_t',
    'gfloat': 'c_float',
    'gdouble': 'c_double',
    'GLib.Quark': 'c_uint32',
    'GType': 'c_size_t',
    'utf8': 'c_char_p',
    'filename': 'c_char_p',
}

USER_DATA_NAMES = ('user_data', 'data')

TypeLookup = Callable[[str], Optional['TypeFindResult']]


def is_user_data(param: Parameter) -> bool:
    """Check if a parameter is the closure data of its callback"""
    if param.type != 'gpointer':
        return False
    return param.closure is not None or param.name in USER_DATA_NAMES


def is_error(param: Parameter) -> bool:
    return param.type == 'GLib.Error'


def trampoline_name(namespace: 'Namespace', callback: Callback) -> str:
    """Get the exported trampoline name

    Examples:
        Gsk-4.0 ParseErrorFunc -> _gir_gsk4_ParseErrorFunc
    """
    major = namespace.version.split('.')[0]
    return f'_gir_{namespace.name.lower()}{major}_{callback.name}'


class CallbackGenerator:
    """Generates callback trampoline declarations"""

    def __init__(self, namespace: 'Namespace', lookup: TypeLookup,
                 wrapped_records: Optional[set[str]] = None):
        self.namespace = namespace
        self.lookup = lookup
        # Records with a generated wrapper class; None means all of them.
        self.wrapped_records = wrapped_records

    def can_generate(self, callback: Callback) -> bool:
        """Check whether a callback can be bridged by a trampoline"""
        if callback.return_value.type not in ('none', ''):
            logger.debug('skipping callback %s: return values are not marshaled', callback.name)
            return False
        if sum(1 for p in callback.parameters if is_user_data(p)) != 1:
            logger.debug('skipping callback %s: no user data parameter', callback.name)
            return False
        return True

    def generate_trampoline(self, callback: Callback, gen: CodeGen) -> bool:
        """Generate the trampoline for a callback; False if it was skipped"""
        if not self.can_generate(callback):
            return False

        name = trampoline_name(self.namespace, callback)
        gen.line(f'# {callback.c_type or callback.name}')
        with gen.block(f'{name}_trampoline = runtime.Trampoline(\'{name}\', ['):
            for param in callback.parameters:
                gen.line(self._get_arg_spec_code(param) + ',')
        gen.line('])')

        argtypes = ', '.join(f'ctypes.{self._get_ctype(p)}' for p in callback.parameters)
        gen.line(f'{name} = {name}_trampoline.cfunction([{argtypes}])')
        gen.line()
        return True

    def _get_arg_spec_code(self, param: Parameter) -> str:
        """Generate the runtime argument spec for a callback parameter"""
        if is_user_data(param):
            return 'runtime.user_data_arg()'
        if is_error(param):
            return 'runtime.error_arg()'

        record = self._get_record(param)
        if record is not None:
            if self.wrapped_records is not None and record not in self.wrapped_records:
                return f'runtime.struct_arg(None, \'{param.transfer_ownership}\')'
            return f'runtime.struct_arg({as_pascal_case(record)}, \'{param.transfer_ownership}\')'

        return 'runtime.value_arg()'

    def _get_record(self, param: Parameter) -> Optional[str]:
        """Get the record name for a struct pointer parameter"""
        if '*' not in param.c_type or not param.type:
            return None
        result = self.lookup(param.type)
        if result is None or result.node.kind != NodeKind.RECORD:
            return None
        return result.node.name

    def _get_ctype(self, param: Parameter) -> str:
        """Get the ctypes type for a callback parameter"""
        if '*' in param.c_type:
            if param.type in ('utf8', 'filename'):
                return 'c_char_p'
            return 'c_void_p'
        if param.type in CTYPES:
            return CTYPES[param.type]
        result = self.lookup(param.type) if param.type else None
        if result is not None and result.node.kind == NodeKind.ENUM:
            return 'c_uint' if result.node.bitfield else 'c_int'
        return 'c_void_p'
