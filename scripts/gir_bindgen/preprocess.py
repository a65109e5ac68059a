"""
Preprocessor module

Preprocessors mutate the loaded repositories in place before filtering and
rendering: renaming types and callables, dropping fields or packages, and
overriding annotations. They run strictly in the configured order, so a
preprocessor sees the effect of every one before it.
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterable, Optional, TYPE_CHECKING
import re

from .codegen import GetterNaming, getter_name
from .errors import (
    ConfigError, InvalidSelectorError, NameCollisionError, ParameterNotFoundError,
    PipelineError, UnversionedTypeError, WrongKindError,
)
from .ir import DIRECTIONS, CallableAttrs, NodeKind, Signal, parse_version_name, split_gir_type
from .locate import find_parameter, locate_callable, locate_signal, split_member_path
from .logging import get_logger

if TYPE_CHECKING:
    from .repository import Repositories, TypeFindResult

logger = get_logger('preprocess')


class Preprocessor(ABC):
    """Base class for repository mutations"""

    @abstractmethod
    def preprocess(self, repos: 'Repositories'):
        """Apply the mutation to the repositories"""
        pass


class PreprocessorFunc(Preprocessor):
    """Preprocessor backed by a plain function"""

    def __init__(self, func: Callable[['Repositories'], None], description: str = ''):
        self.func = func
        self.description = description or getattr(func, '__name__', 'preprocessor')

    def preprocess(self, repos: 'Repositories'):
        self.func(repos)

    def __repr__(self) -> str:
        return f'PreprocessorFunc({self.description})'


def apply_preprocessors(repos: 'Repositories', preprocs: Iterable[Preprocessor]):
    """Apply preprocessors in order

    Configuration errors do not stop the remaining preprocessors; they are
    collected and raised together as a PipelineError once all have run.
    """
    errors: list[ConfigError] = []
    for preproc in preprocs:
        try:
            preproc.preprocess(repos)
        except ConfigError as e:
            logger.error('%r: %s', preproc, e)
            errors.append(e)
    if errors:
        raise PipelineError(errors)


def require_versioned(gir_type: str):
    """Raise UnversionedTypeError if the GIR type's namespace has no version"""
    namespace, _ = split_gir_type(gir_type)
    _, version = parse_version_name(namespace)
    if not version:
        raise UnversionedTypeError(f'GIR type {gir_type!r} missing version', gir_type)


def compile_regex(regex: str, value: str) -> re.Pattern:
    """Compile a configured regex; errors name the configuration value"""
    try:
        return re.compile(regex)
    except re.error as e:
        raise InvalidSelectorError(f'invalid regex {regex!r} in {value!r}: {e}', value) from e


def _check_replacement(pattern: re.Pattern, replace: str, value: str):
    # Expand against an empty match with the same groups as the pattern.
    names = {index: name for name, index in pattern.groupindex.items()}
    groups = ''.join(f'(?P<{names[i]}>)' if i in names else '()'
                     for i in range(1, pattern.groups + 1))
    try:
        re.match(groups, '').expand(replace)
    except (re.error, IndexError) as e:
        raise InvalidSelectorError(f'invalid replacement {replace!r} for {value!r}: {e}', value) from e


def check_free_name(result: 'TypeFindResult', new_name: str, gir_type: str):
    """Raise NameCollisionError if another declaration already has the name"""
    existing = result.namespace.find(new_name)
    if existing is not None and existing is not result.node:
        raise NameCollisionError(
            f'cannot rename {gir_type} to {new_name}: '
            f'{result.namespace.versioned_name}.{new_name} already exists', gir_type)


# ==============================================================================
# Packages and includes
# ==============================================================================

def make_path_matcher(inputs: Iterable[str]) -> Callable[[str], bool]:
    """Make a matcher for names; inputs wrapped in slashes are regexes

    Examples:
        "gtk4" matches only "gtk4"
        "/gtk.*/" matches "gtk4" and "gtk4-x11"
    """
    matchers: list[Callable[[str], bool]] = []
    for value in inputs:
        if len(value) > 1 and value.startswith('/') and value.endswith('/'):
            matchers.append(compile_regex(value[1:-1], value).search)
        else:
            matchers.append(value.__eq__)
    return lambda name: any(match(name) for match in matchers)


def remove_pkgconfig(gir_file: str, *pkgs: str) -> Preprocessor:
    """Remove pkg-config packages from the given repository"""
    match = make_path_matcher(pkgs)

    def remove(repos: 'Repositories'):
        repo = repos.from_file(gir_file)
        if repo is None:
            logger.warning('remove_pkgconfig: gir file %s not found', gir_file)
            return
        repo.packages = [pkg for pkg in repo.packages if not match(pkg.name)]

    return PreprocessorFunc(remove, f'remove_pkgconfig({gir_file!r})')


def remove_c_includes(gir_file: str, *includes: str) -> Preprocessor:
    """Remove C header includes from the given repository"""
    match = make_path_matcher(includes)

    def remove(repos: 'Repositories'):
        repo = repos.from_file(gir_file)
        if repo is None:
            logger.warning('remove_c_includes: gir file %s not found', gir_file)
            return
        repo.c_includes = [incl for incl in repo.c_includes if not match(incl.name)]

    return PreprocessorFunc(remove, f'remove_c_includes({gir_file!r})')


# ==============================================================================
# Types
# ==============================================================================

def preserve_get_name(gir_type: str, naming: Optional[GetterNaming] = None) -> Preprocessor:
    """Prefix a getter marker to a type name so generators keep the verb

    The default naming prepends "get_" to snake_case names and "Get"
    otherwise.
    """
    require_versioned(gir_type)
    naming = naming or getter_name

    def preserve(repos: 'Repositories'):
        result = repos.find_full_type(gir_type)
        if result is None:
            logger.warning('GIR type %r not found', gir_type)
            return
        new_name = naming(result.node.name)
        check_free_name(result, new_name, gir_type)
        result.node.name = new_name

    return PreprocessorFunc(preserve, f'preserve_get_name({gir_type!r})')


def rename_enum_members(enum: str, regex: str, replace: str) -> Preprocessor:
    """Rewrite the C identifiers of an enum's members

    The pattern is applied to everything after the first underscore, so the
    type prefix (e.g. "GTK") is never touched.
    """
    require_versioned(enum)
    pattern = compile_regex(regex, enum)
    _check_replacement(pattern, replace, enum)

    def rename(repos: 'Repositories'):
        result = repos.find_full_type(enum)
        if result is None:
            logger.warning('GIR enum %r not found', enum)
            return
        if result.node.kind != NodeKind.ENUM:
            raise WrongKindError(f'GIR type {enum!r} is a {result.node.kind.name.lower()}, not an enum', enum)

        for member in result.node.members:
            prefix, sep, rest = member.c_identifier.partition('_')
            if not sep:
                continue
            member.c_identifier = prefix + '_' + pattern.sub(replace, rest)

    return PreprocessorFunc(rename, f'rename_enum_members({enum!r})')


class TypeRenamer(Preprocessor):
    """Renames a type to a new bare name"""

    def __init__(self, gir_type: str, new_name: str):
        require_versioned(gir_type)
        if '.' in new_name:
            raise ConfigError(f'new name {new_name!r} must not contain a namespace', new_name)
        self.from_type = gir_type
        self.to_name = new_name

    def preprocess(self, repos: 'Repositories'):
        result = repos.find_full_type(self.from_type)
        if result is None:
            logger.warning('GIR type %r not found', self.from_type)
            return

        check_free_name(result, self.to_name, self.from_type)
        old_name = result.node.name
        result.node.name = self.to_name

        doc = result.node.info.doc
        if doc is not None:
            doc.text += f'\n\nThis type has been renamed from {old_name}.'

    def __repr__(self) -> str:
        return f'TypeRenamer({self.from_type!r} -> {self.to_name!r})'


def rename_type(gir_type: str, new_name: str) -> Preprocessor:
    """Rename a type; the GIR type is versioned, the new name is bare"""
    return TypeRenamer(gir_type, new_name)


def remove_record_fields(gir_type: str, *fields: str) -> Preprocessor:
    """Remove fields, named as in the GIR file, from a record"""
    names = set(fields)

    def remove(repos: 'Repositories'):
        result = repos.find_full_type(gir_type)
        if result is None:
            logger.warning('GIR type %r not found', gir_type)
            return
        if result.node.kind != NodeKind.RECORD:
            raise WrongKindError(f'remove_record_fields: GIR type {gir_type!r} is not a record', gir_type)
        result.node.fields = [f for f in result.node.fields if f.name not in names]

    return PreprocessorFunc(remove, f'remove_record_fields({gir_type!r})')


# ==============================================================================
# Callables and signals
# ==============================================================================

class ModifyCallable(Preprocessor):
    """Applies a mutation to a function, callback, constructor or method"""

    def __init__(self, gir_type: str, func: Callable[[CallableAttrs], None]):
        require_versioned(gir_type)
        self.gir_type = gir_type
        self.func = func

    def preprocess(self, repos: 'Repositories'):
        c = locate_callable(repos, self.gir_type)
        if c is None:
            logger.warning('GIR type %r not found', self.gir_type)
            return
        self.func(c)

    def __repr__(self) -> str:
        return f'ModifyCallable({self.gir_type!r})'


def modify_callable(gir_type: str, func: Callable[[CallableAttrs], None]) -> Preprocessor:
    """Modify a callable found by its versioned dotted path"""
    return ModifyCallable(gir_type, func)


def must_introspect(gir_type: str) -> Preprocessor:
    """Force a callable to be introspectable"""
    def mark(c: CallableAttrs):
        c.introspectable = True

    return ModifyCallable(gir_type, mark)


class CallableRenamer(ModifyCallable):
    """Renames a callable; top-level functions keep unique names"""

    def __init__(self, gir_type: str, new_name: str):
        super().__init__(gir_type, self._rename)
        self.new_name = new_name

    def preprocess(self, repos: 'Repositories'):
        owner, member = split_member_path(self.gir_type)
        if member is None:
            result = repos.find_full_type(owner)
            if result is not None:
                check_free_name(result, self.new_name, self.gir_type)
        super().preprocess(repos)

    def _rename(self, c: CallableAttrs):
        c.name = self.new_name

    def __repr__(self) -> str:
        return f'CallableRenamer({self.gir_type!r} -> {self.new_name!r})'


def rename_callable(gir_type: str, new_name: str) -> Preprocessor:
    """Rename a callable"""
    return CallableRenamer(gir_type, new_name)


def modify_param_directions(gir_type: str, overrides: dict[str, str]) -> Preprocessor:
    """Override parameter directions, e.g. {"value": "out"}"""
    for name, direction in overrides.items():
        if direction not in DIRECTIONS:
            raise ConfigError(f'invalid direction {direction!r} for parameter {name} of {gir_type}', gir_type)

    def modify(c: CallableAttrs):
        for name, direction in overrides.items():
            param = find_parameter(c, name)
            if param is None:
                raise ParameterNotFoundError(f'cannot find parameter {name} for {gir_type}', gir_type)
            param.direction = direction

    return ModifyCallable(gir_type, modify)


_SIGNAL_SELECTOR = re.compile(r'(.+)\.([^.]+)::(.+)')


def modify_signal(selector: str, func: Callable[[Signal], None]) -> Preprocessor:
    """Modify a class or interface signal given as "Ns-V.Type::signal-name" """
    m = _SIGNAL_SELECTOR.fullmatch(selector)
    if m is None:
        raise InvalidSelectorError(f'GIR signal type {selector!r} invalid', selector)
    owner = f'{m.group(1)}.{m.group(2)}'
    name = m.group(3)

    def modify(repos: 'Repositories'):
        if repos.find_full_type(owner) is None:
            logger.warning('GIR type %r not found', selector)
            return
        signal = locate_signal(repos, owner, name)
        if signal is None:
            logger.warning('GIR signal %r not found', selector)
            return
        func(signal)

    return PreprocessorFunc(modify, f'modify_signal({selector!r})')
