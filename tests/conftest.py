from __future__ import annotations

import logging
from pathlib import Path

import pytest

from gir_bindgen.generator import LinkMode, NamespaceGenerator
from gir_bindgen.repository import Repositories

FOO_GIR = """<?xml version="1.0"?>
<repository version="1.2"
            xmlns="http://www.gtk.org/introspection/core/1.0"
            xmlns:c="http://www.gtk.org/introspection/c/1.0"
            xmlns:glib="http://www.gtk.org/introspection/glib/1.0">
  <include name="GLib" version="2.0"/>
  <package name="foo-1"/>
  <package name="foo-1-x11"/>
  <package name="foo-1-wayland"/>
  <c:include name="foo/foo.h"/>
  <c:include name="foo/x11/foox11.h"/>
  <namespace name="Foo" version="1.0"
             shared-library="libfoo-1.so.0"
             c:identifier-prefixes="Foo"
             c:symbol-prefixes="foo">
    <class name="Widget" c:type="FooWidget" parent="GObject.InitiallyUnowned">
      <doc xml:space="preserve" filename="foo/foowidget.h" line="10">Base widget.</doc>
      <source-position filename="foo/foowidget.c" line="42"/>
      <constructor name="new" c:identifier="foo_widget_new">
        <return-value transfer-ownership="none">
          <type name="Widget" c:type="FooWidget*"/>
        </return-value>
      </constructor>
      <method name="show" c:identifier="foo_widget_show" introspectable="0">
        <return-value transfer-ownership="none">
          <type name="none" c:type="void"/>
        </return-value>
        <parameters>
          <instance-parameter name="widget" transfer-ownership="none">
            <type name="Widget" c:type="FooWidget*"/>
          </instance-parameter>
        </parameters>
      </method>
      <method name="set_value" c:identifier="foo_widget_set_value">
        <return-value transfer-ownership="none">
          <type name="none" c:type="void"/>
        </return-value>
        <parameters>
          <instance-parameter name="widget" transfer-ownership="none">
            <type name="Widget" c:type="FooWidget*"/>
          </instance-parameter>
          <parameter name="value" transfer-ownership="none">
            <type name="gint" c:type="int*"/>
          </parameter>
        </parameters>
      </method>
      <virtual-method name="size_allocate">
        <return-value transfer-ownership="none">
          <type name="none" c:type="void"/>
        </return-value>
      </virtual-method>
      <field name="parent_instance" readable="0" private="1">
        <type name="GObject.InitiallyUnowned" c:type="GInitiallyUnowned"/>
      </field>
      <glib:signal name="size-changed" when="last">
        <return-value transfer-ownership="none">
          <type name="none" c:type="void"/>
        </return-value>
        <parameters>
          <parameter name="width" transfer-ownership="none">
            <type name="gint" c:type="gint"/>
          </parameter>
        </parameters>
      </glib:signal>
    </class>
    <record name="Rect" c:type="FooRect">
      <source-position filename="foo/foorect.h" line="5"/>
      <field name="x" writable="1">
        <type name="gint" c:type="int"/>
      </field>
      <field name="y" writable="1">
        <type name="gint" c:type="int"/>
      </field>
      <field name="priv" private="1">
        <type name="gpointer" c:type="gpointer"/>
      </field>
      <method name="copy" c:identifier="foo_rect_copy">
        <return-value transfer-ownership="full">
          <type name="Rect" c:type="FooRect*"/>
        </return-value>
        <parameters>
          <instance-parameter name="rect" transfer-ownership="none">
            <type name="Rect" c:type="const FooRect*"/>
          </instance-parameter>
        </parameters>
      </method>
    </record>
    <record name="Location" c:type="FooLocation">
      <doc xml:space="preserve" filename="foo/fooparse.h" line="3">A location in a parsed file.</doc>
    </record>
    <interface name="Paintable" c:type="FooPaintable">
      <source-position filename="foo/foopaintable.h" line="8"/>
      <method name="snapshot" c:identifier="foo_paintable_snapshot">
        <return-value transfer-ownership="none">
          <type name="none" c:type="void"/>
        </return-value>
      </method>
      <virtual-method name="get_flags">
        <return-value transfer-ownership="none">
          <type name="guint" c:type="guint"/>
        </return-value>
      </virtual-method>
      <glib:signal name="invalidate-contents" when="last">
        <return-value transfer-ownership="none">
          <type name="none" c:type="void"/>
        </return-value>
      </glib:signal>
    </interface>
    <enumeration name="Bar" c:type="FooBar">
      <member name="one" value="1" c:identifier="FOO_BAR_ONE"/>
      <member name="two" value="2" c:identifier="FOO_BAR_TWO"/>
    </enumeration>
    <bitfield name="StateFlags" c:type="FooStateFlags">
      <member name="normal" value="0" c:identifier="FOO_STATE_FLAG_NORMAL"/>
      <member name="active" value="1" c:identifier="FOO_STATE_FLAG_ACTIVE"/>
    </bitfield>
    <callback name="ParseErrorFunc" c:type="FooParseErrorFunc">
      <source-position filename="foo/fooparse.h" line="12"/>
      <return-value transfer-ownership="none">
        <type name="none" c:type="void"/>
      </return-value>
      <parameters>
        <parameter name="start" transfer-ownership="none">
          <type name="Location" c:type="const FooLocation*"/>
        </parameter>
        <parameter name="end" transfer-ownership="none">
          <type name="Location" c:type="const FooLocation*"/>
        </parameter>
        <parameter name="error" transfer-ownership="none">
          <type name="GLib.Error" c:type="const GError*"/>
        </parameter>
        <parameter name="user_data" transfer-ownership="none" nullable="1" closure="3">
          <type name="gpointer" c:type="gpointer"/>
        </parameter>
      </parameters>
    </callback>
    <callback name="StateFunc" c:type="FooStateFunc">
      <return-value transfer-ownership="none">
        <type name="none" c:type="void"/>
      </return-value>
      <parameters>
        <parameter name="flags" transfer-ownership="none">
          <type name="StateFlags" c:type="FooStateFlags"/>
        </parameter>
        <parameter name="label" transfer-ownership="none">
          <type name="utf8" c:type="const char*"/>
        </parameter>
        <parameter name="data" transfer-ownership="none">
          <type name="gpointer" c:type="gpointer"/>
        </parameter>
      </parameters>
    </callback>
    <callback name="CompareFunc" c:type="FooCompareFunc">
      <return-value transfer-ownership="none">
        <type name="gint" c:type="gint"/>
      </return-value>
      <parameters>
        <parameter name="a" transfer-ownership="none">
          <type name="gpointer" c:type="gconstpointer"/>
        </parameter>
        <parameter name="b" transfer-ownership="none">
          <type name="gpointer" c:type="gconstpointer"/>
        </parameter>
      </parameters>
    </callback>
    <function name="init" c:identifier="foo_init">
      <return-value transfer-ownership="none">
        <type name="none" c:type="void"/>
      </return-value>
    </function>
  </namespace>
</repository>
"""

FOO2_GIR = """<?xml version="1.0"?>
<repository version="1.2"
            xmlns="http://www.gtk.org/introspection/core/1.0"
            xmlns:c="http://www.gtk.org/introspection/c/1.0">
  <package name="foo-2"/>
  <namespace name="Foo" version="2.0" shared-library="libfoo-2.so.0">
    <record name="Rect" c:type="FooRect"/>
  </namespace>
</repository>
"""


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo configure_logging so caplog keeps receiving records."""
    yield
    logger = logging.getLogger('gir_bindgen')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def foo_gir(tmp_path: Path) -> Path:
    """Write the Foo-1.0 repository into tmp_path."""
    path = tmp_path / 'Foo-1.0.gir'
    path.write_text(FOO_GIR, encoding='utf-8')
    return path


@pytest.fixture
def foo2_gir(tmp_path: Path) -> Path:
    path = tmp_path / 'Foo-2.0.gir'
    path.write_text(FOO2_GIR, encoding='utf-8')
    return path


@pytest.fixture
def repos(foo_gir: Path) -> Repositories:
    repos = Repositories()
    repos.load(str(foo_gir))
    return repos


@pytest.fixture
def make_gen(repos: Repositories):
    """Build a Foo-1.0 generator context with the given filters."""

    def make(*filters) -> NamespaceGenerator:
        repo = repos.find_namespace('Foo-1.0')
        return NamespaceGenerator(repos, repo, list(filters), LinkMode.IMPORT)

    return make
