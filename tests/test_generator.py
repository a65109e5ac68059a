"""Tests for gir_bindgen.generator."""

from __future__ import annotations

import ctypes
import importlib.util
import logging
import sys
from pathlib import Path

import pytest

from gir_bindgen import absolute_filter, remove_record_fields, rename_type
from gir_bindgen.errors import ConfigError, PipelineError
from gir_bindgen.generator import (
    RUNTIME_LINK_ENV, Generator, LinkMode, NamespaceConfig, default_link_mode,
)
from gir_bindgen.preprocess import PreprocessorFunc


def test_default_link_mode_reads_environment(monkeypatch, caplog) -> None:
    monkeypatch.delenv(RUNTIME_LINK_ENV, raising=False)
    assert default_link_mode() == LinkMode.IMPORT

    monkeypatch.setenv(RUNTIME_LINK_ENV, '0')
    assert default_link_mode() == LinkMode.IMPORT

    monkeypatch.setenv(RUNTIME_LINK_ENV, '1')
    with caplog.at_level(logging.WARNING, logger='gir_bindgen'):
        assert default_link_mode() == LinkMode.RUNTIME
    assert 'experimental' in caplog.text


def test_namespace_config_requires_version() -> None:
    with pytest.raises(ConfigError):
        NamespaceConfig('Foo')

    assert NamespaceConfig('Foo-1.0').output_dir == 'foo1'


def test_preprocessors_run_global_first_then_per_module(tmp_path: Path) -> None:
    gen = Generator(str(tmp_path), link_mode=LinkMode.IMPORT)
    first = PreprocessorFunc(lambda repos: None, 'first')
    second = PreprocessorFunc(lambda repos: None, 'second')
    third = PreprocessorFunc(lambda repos: None, 'third')

    gen.module('Foo-1.0').preprocessors.append(second)
    gen.module('Bar-1.0').preprocessors.append(third)
    gen.preprocess(first)

    assert gen.preprocessors() == [first, second, third]
    assert gen.module('Foo-1.0') is gen.module('Foo-1.0')


def test_included_nodes_respect_filters(tmp_path: Path, foo_gir: Path) -> None:
    gen = Generator(str(tmp_path), link_mode=LinkMode.IMPORT)
    gen.load(str(foo_gir))
    gen.module('Foo-1.0').filters.extend([
        absolute_filter('Foo.Widget'),
        absolute_filter('C.FooRect'),
    ])

    names = [node.name for node in gen.namespace_generator('Foo-1.0').included()]

    assert 'Widget' not in names
    assert 'Rect' not in names
    assert 'Location' in names
    assert 'init' in names


def test_namespace_generator_finds_types_relative_to_namespace(tmp_path: Path, foo_gir: Path) -> None:
    gen = Generator(str(tmp_path), link_mode=LinkMode.IMPORT)
    gen.load(str(foo_gir))
    ns_gen = gen.namespace_generator('Foo-1.0')

    assert ns_gen.find_type('Rect').versioned_type == 'Foo-1.0.Rect'
    assert ns_gen.find_type('Foo.Rect').versioned_type == 'Foo-1.0.Rect'
    assert ns_gen.find_type('Foo-1.0.Rect').versioned_type == 'Foo-1.0.Rect'
    assert ns_gen.find_type('GLib.Error') is None
    assert ns_gen.find_type('Foo.Widget.show') is None


def test_generate_all_writes_trampolines(tmp_path: Path, foo_gir: Path) -> None:
    out = tmp_path / 'out'
    gen = Generator(str(out), link_mode=LinkMode.IMPORT)
    gen.load(str(foo_gir))
    foo = gen.module('Foo-1.0')
    foo.preprocessors.append(rename_type('Foo-1.0.Rect', 'Box'))
    foo.filters.append(absolute_filter('Foo.StateFunc'))

    written = gen.generate_all()

    path = out / 'foo1' / 'foo_export.py'
    assert written == [str(path)]
    content = path.read_text(encoding='utf-8')
    assert content.startswith('# Code generated by gir-bindgen. DO NOT EDIT.\n')
    assert 'lib = ctypes.CDLL(None)\n' in content
    assert 'class Box:\n    """FooRect"""\n' in content
    assert 'class Location:\n' in content
    assert "runtime.struct_arg(Location, 'none')," in content
    assert '_gir_foo1_ParseErrorFunc = _gir_foo1_ParseErrorFunc_trampoline.cfunction(' in content
    assert 'StateFunc' not in content
    assert 'CompareFunc' not in content


@pytest.mark.skipif(sys.platform == 'win32', reason='CDLL(None) needs dlopen')
def test_generated_module_imports(tmp_path: Path, foo_gir: Path) -> None:
    gen = Generator(str(tmp_path), link_mode=LinkMode.IMPORT)
    gen.load(str(foo_gir))
    gen.module('Foo-1.0')
    path, = gen.generate_all()

    spec = importlib.util.spec_from_file_location('foo_export_generated', path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    assert isinstance(module.lib, ctypes.CDLL)
    assert module._gir_foo1_ParseErrorFunc_trampoline.name == '_gir_foo1_ParseErrorFunc'
    assert callable(module._gir_foo1_ParseErrorFunc)
    assert module.Location(None).native is None


def test_runtime_link_mode_opens_shared_library(tmp_path: Path, foo_gir: Path) -> None:
    gen = Generator(str(tmp_path), link_mode=LinkMode.RUNTIME)
    gen.load(str(foo_gir))
    gen.module('Foo-1.0')

    path, = gen.generate_all()

    assert "lib = ctypes.CDLL('libfoo-1.so.0')\n" in Path(path).read_text(encoding='utf-8')


def test_unloaded_namespace_is_skipped(tmp_path: Path, foo_gir: Path, caplog) -> None:
    gen = Generator(str(tmp_path), link_mode=LinkMode.IMPORT)
    gen.load(str(foo_gir))
    gen.module('Gtk-4.0')

    with caplog.at_level(logging.WARNING, logger='gir_bindgen'):
        assert gen.generate_all() == []

    assert 'Gtk-4.0: namespace not loaded' in caplog.text


def test_pipeline_errors_stop_generation(tmp_path: Path, foo_gir: Path) -> None:
    out = tmp_path / 'out'
    gen = Generator(str(out), link_mode=LinkMode.IMPORT)
    gen.load(str(foo_gir))
    gen.module('Foo-1.0').preprocessors.append(remove_record_fields('Foo-1.0.Widget', 'x'))

    with pytest.raises(PipelineError):
        gen.generate_all()

    assert not out.exists()
