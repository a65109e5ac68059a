"""
Main generator module

Loads repositories, applies the configured preprocessors in order, and
renders each configured namespace through its filters.
"""

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Optional
import os

from .callback import CallbackGenerator
from .codegen import CodeGen, as_pascal_case
from .errors import ConfigError
from .filter import FileGenerator, FilterMatcher, filter_type
from .ir import Node, NodeKind, Record, node_c_name, parse_version_name, split_gir_type
from .logging import get_logger
from .preprocess import Preprocessor, apply_preprocessors
from .repository import Namespace, Repositories, Repository, TypeFindResult

logger = get_logger('generator')

RUNTIME_LINK_ENV = 'GIR_BINDGEN_RUNTIME_LINK'


class LinkMode(Enum):
    IMPORT = auto()   # symbols resolved from the host process, which links the library
    RUNTIME = auto()  # shared library opened by soname at import time


def default_link_mode() -> LinkMode:
    """Get the link mode selected by the environment"""
    if os.environ.get(RUNTIME_LINK_ENV) == '1':
        logger.warning('%s is set to 1; runtime linking is experimental', RUNTIME_LINK_ENV)
        return LinkMode.RUNTIME
    return LinkMode.IMPORT


class NamespaceConfig:
    """Configuration for one generated namespace"""

    def __init__(self, namespace: str):
        name, version = parse_version_name(namespace)
        if not version:
            raise ConfigError(f'namespace {namespace!r} missing version', namespace)
        self.namespace = namespace
        self.preprocessors: list[Preprocessor] = []
        self.filters: list[FilterMatcher] = []
        self.output_dir = f'{name.lower()}{version.split(".")[0]}'


class NamespaceGenerator(FileGenerator):
    """Generation context for a single namespace"""

    def __init__(self, repos: Repositories, repository: Repository,
                 filters: list[FilterMatcher], link_mode: LinkMode = LinkMode.IMPORT):
        self.repos = repos
        self.repository = repository
        self._filters = filters
        self.link_mode = link_mode

    @property
    def namespace(self) -> Namespace:
        return self.repository.namespace

    @property
    def filters(self) -> list[FilterMatcher]:
        return self._filters

    def find_type(self, gir_type: str) -> Optional[TypeFindResult]:
        """Resolve a GIR type, preferring this namespace for unversioned names"""
        qualifier, name = split_gir_type(gir_type)
        if '.' in name:
            return None
        if not qualifier:
            qualifier = self.namespace.name
        if parse_version_name(qualifier)[1]:
            return self.repos.find_full_type(gir_type)

        if qualifier == self.namespace.name:
            repo = self.repository
        else:
            repo = self.repos.find_namespace_by_name(qualifier)
        if repo is None:
            return None
        node = repo.namespace.find(name)
        if node is None:
            return None
        return TypeFindResult(node=node, repository=repo)

    def omit(self, node: Node) -> bool:
        """Check whether a top-level node is filtered out"""
        return filter_type(self, node.name, node_c_name(node))

    def included(self) -> list[Node]:
        """Get the top-level nodes that pass the filters"""
        return [node for node in self.namespace.nodes() if not self.omit(node)]


class Renderer(ABC):
    """Turns a filtered namespace into source files"""

    @abstractmethod
    def render(self, gen: NamespaceGenerator) -> dict[str, str]:
        """Return generated file contents keyed by relative path"""
        pass


class TrampolineRenderer(Renderer):
    """Renders the callback trampolines of a namespace"""

    def render(self, gen: NamespaceGenerator) -> dict[str, str]:
        namespace = gen.namespace
        code = CodeGen()

        code.line('# Code generated by gir-bindgen. DO NOT EDIT.')
        code.line()
        code.line('import ctypes')
        code.line()
        code.line('from gir_bindgen import runtime')
        code.line()
        if gen.link_mode == LinkMode.RUNTIME:
            library = namespace.shared_library.split(',')[0]
            code.line(f'lib = ctypes.CDLL({library!r})')
        else:
            code.line('lib = ctypes.CDLL(None)')
        code.line()

        nodes = gen.included()
        records = set()
        for node in nodes:
            if node.kind == NodeKind.RECORD:
                self._gen_record(node, code)
                records.add(node.name)

        callback_gen = CallbackGenerator(namespace, gen.find_type, wrapped_records=records)
        count = 0
        for node in nodes:
            if node.kind == NodeKind.CALLBACK and callback_gen.generate_trampoline(node, code):
                count += 1

        logger.info('  %s: %d trampoline(s)', namespace.versioned_name, count)
        return {f'{namespace.name.lower()}_export.py': code.output()}

    def _gen_record(self, record: Record, code: CodeGen):
        code.line()
        with code.block(f'class {as_pascal_case(record.name)}:'):
            code.line(f'"""{record.c_type or record.name}"""')
            code.line()
            with code.block('def __init__(self, native: runtime.StructView):'):
                code.line('self.native = native')
        code.line()


class Generator:
    """Main binding generator"""

    def __init__(self, output_root: str, renderer: Optional[Renderer] = None,
                 link_mode: Optional[LinkMode] = None):
        self.output_root = output_root
        self.renderer = renderer or TrampolineRenderer()
        self.link_mode = link_mode or default_link_mode()
        self.repos = Repositories()
        self._preprocessors: list[Preprocessor] = []
        self._modules: dict[str, NamespaceConfig] = {}

    def preprocess(self, *preprocs: Preprocessor):
        """Add preprocessors applied to all repositories, before per-namespace ones"""
        self._preprocessors.extend(preprocs)

    def module(self, namespace: str) -> NamespaceConfig:
        """Get or create the configuration of a versioned namespace"""
        if namespace not in self._modules:
            self._modules[namespace] = NamespaceConfig(namespace)
        return self._modules[namespace]

    def load(self, *paths: str):
        """Load GIR files"""
        for path in paths:
            self.repos.load(path)

    def preprocessors(self) -> list[Preprocessor]:
        """Get every preprocessor in application order"""
        preprocs = list(self._preprocessors)
        for config in self._modules.values():
            preprocs.extend(config.preprocessors)
        return preprocs

    def apply_preprocessors(self):
        apply_preprocessors(self.repos, self.preprocessors())

    def namespace_generator(self, namespace: str) -> Optional[NamespaceGenerator]:
        config = self.module(namespace)
        repo = self.repos.find_namespace(namespace)
        if repo is None:
            return None
        return NamespaceGenerator(self.repos, repo, config.filters, self.link_mode)

    def generate_all(self) -> list[str]:
        """Preprocess once, then generate every configured namespace"""
        logger.info('=== Generating bindings:')
        self.apply_preprocessors()
        written = []
        for namespace in self._modules:
            written.extend(self.generate_module(namespace))
        return written

    def generate_module(self, namespace: str) -> list[str]:
        """Generate bindings for a single namespace"""
        gen = self.namespace_generator(namespace)
        if gen is None:
            logger.warning('skipping generation for %s: namespace not loaded', namespace)
            return []

        out_dir = os.path.join(self.output_root, self._modules[namespace].output_dir)
        os.makedirs(out_dir, exist_ok=True)
        logger.info('  %s => %s', gen.repository.path or namespace, out_dir)

        written = []
        for rel_path, content in self.renderer.render(gen).items():
            path = os.path.join(out_dir, rel_path)
            with open(path, 'w', newline='\n') as f:
                f.write(content)
            written.append(path)
        return written
