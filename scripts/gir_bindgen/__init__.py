"""
gir_bindgen - binding generation framework for GObject introspection data

This framework loads GIR repositories into a mutable model, rewrites it
with an ordered list of preprocessors, and decides per symbol whether it is
generated through an ordered list of filters. Library-specific
configuration modules (see bindings/) supply both lists.
"""

from .errors import ConfigError, PipelineError, RepositoryError
from .ir import (
    Class, Record, Interface, Enum, Callback, Function, NodeKind,
    CallableAttrs, Parameter, Signal, Field, Member,
)
from .repository import Repository, Repositories, TypeFindResult, load_repository
from .preprocess import (
    Preprocessor, PreprocessorFunc, apply_preprocessors,
    remove_pkgconfig, remove_c_includes, preserve_get_name, rename_enum_members,
    rename_type, remove_record_fields, modify_callable, must_introspect,
    rename_callable, modify_param_directions, modify_signal,
)
from .filter import (
    FilterMatcher, absolute_filter, regex_filter, file_filter, file_filter_namespace,
    filter_type, filter_c_type, filter_sub, filter_method, filter_field, eq_namespace,
)
from .locate import locate_callable, locate_signal, find_parameter
from .callback import CallbackGenerator
from .generator import Generator, NamespaceGenerator, LinkMode, Renderer

__all__ = [
    'ConfigError', 'PipelineError', 'RepositoryError',
    'Class', 'Record', 'Interface', 'Enum', 'Callback', 'Function', 'NodeKind',
    'CallableAttrs', 'Parameter', 'Signal', 'Field', 'Member',
    'Repository', 'Repositories', 'TypeFindResult', 'load_repository',
    'Preprocessor', 'PreprocessorFunc', 'apply_preprocessors',
    'remove_pkgconfig', 'remove_c_includes', 'preserve_get_name', 'rename_enum_members',
    'rename_type', 'remove_record_fields', 'modify_callable', 'must_introspect',
    'rename_callable', 'modify_param_directions', 'modify_signal',
    'FilterMatcher', 'absolute_filter', 'regex_filter', 'file_filter', 'file_filter_namespace',
    'filter_type', 'filter_c_type', 'filter_sub', 'filter_method', 'filter_field', 'eq_namespace',
    'locate_callable', 'locate_signal', 'find_parameter',
    'CallbackGenerator',
    'Generator', 'NamespaceGenerator', 'LinkMode', 'Renderer',
]
