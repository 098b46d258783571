"""Unit tests for the Go parser module."""

import textwrap
from pathlib import Path

import pytest

pytestmark = pytest.mark.fast

from reexporter.parser import (
    GoImport,
    TypeQualifier,
    assumed_package_name,
    parse_function_signature,
    parse_go_source,
)
from reexporter.parser.comments import comment_text, parse_comment
from reexporter.parser.go_parser import declared_names, type_specs, value_specs
from reexporter.parser.language import field_nodes, node_text
from reexporter.parser.signature import parse_type_parameters
from reexporter.schemas import Parameter, Signature


def parse(code: str, name: str = "file.go"):
    return parse_go_source(textwrap.dedent(code).encode("utf-8"), Path(name))


def functions(go_file):
    return {
        node_text(d.child_by_field_name("name"), go_file.source): d
        for d in go_file.declarations()
        if d.type == "function_declaration"
    }


def signature(code: str, func: str, package: str = "store"):
    go_file = parse(code)
    qualifier = TypeQualifier(package, declared_names(go_file), go_file.imports)
    return parse_function_signature(functions(go_file)[func], go_file.source, qualifier), qualifier


def describe(params):
    return [(p.name, p.type, p.variadic) for p in params]


class TestGoFile:
    def test_package_and_imports(self):
        go_file = parse("""
            package store

            import (
            	"io"
            	yaml "gopkg.in/yaml.v3"
            	_ "embed"
            )

            import "fmt"
        """)
        assert go_file.package == "store"
        assert go_file.imports == [
            GoImport("io"),
            GoImport("gopkg.in/yaml.v3", "yaml"),
            GoImport("embed", "_"),
            GoImport("fmt"),
        ]
        assert go_file.error is None

    def test_stem(self):
        assert parse("package x\n", "store_internal.go").stem == "store_internal"

    def test_syntax_error(self):
        go_file = parse("package x\n\nfunc Broken( {\n")
        assert go_file.error is not None
        line, column, _ = go_file.error
        assert line >= 3

    def test_declared_names_skip_methods(self):
        go_file = parse("""
            package x

            type Client struct{}

            func (c *Client) Close() error { return nil }

            func New() *Client { return &Client{} }

            const (
            	A = iota
            	b
            )

            var _, Seen = 1, 2
        """)
        assert declared_names(go_file) == {"Client", "New", "A", "b", "Seen"}

    def test_value_specs_one_per_line(self):
        go_file = parse("""
            package x

            var (
            	A, B = 1, 2
            	C    = 3
            )
        """)
        decl = [d for d in go_file.declarations() if d.type == "var_declaration"][0]
        specs = value_specs(decl)
        assert len(specs) == 2
        names = [node_text(n, go_file.source) for n in field_nodes(specs[0], "name")]
        assert names == ["A", "B"]


class TestSignatures:
    def test_grouped_names_expand(self):
        sig, _ = signature("""
            package x

            func Add(a, b int) int { return a + b }
        """, "Add")
        assert describe(sig.parameters) == [("a", "int", False), ("b", "int", False)]
        assert describe(sig.results) == [("", "int", False)]

    def test_unnamed_parameters(self):
        sig, _ = signature("""
            package x

            func Apply(int, string) (int, error) { return 0, nil }
        """, "Apply")
        assert describe(sig.parameters) == [("", "int", False), ("", "string", False)]
        assert describe(sig.results) == [("", "int", False), ("", "error", False)]
        assert sig.results_need_parentheses()

    def test_variadic(self):
        sig, _ = signature("""
            package x

            func Join(sep string, parts ...string) string { return "" }
        """, "Join")
        assert describe(sig.parameters) == [("sep", "string", False), ("parts", "string", True)]
        assert sig.parameters[1].parameter() == "parts ...string"
        assert sig.parameters[1].variable() == "parts..."

    def test_named_results(self):
        sig, _ = signature("""
            package x

            func Split(s string) (head, tail string) { return }
        """, "Split")
        assert describe(sig.results) == [("head", "string", False), ("tail", "string", False)]

    def test_no_results(self):
        sig, _ = signature("""
            package x

            func Run() {}
        """, "Run")
        assert sig.parameters == []
        assert sig.results == []

    def test_local_types_are_qualified(self):
        sig, _ = signature("""
            package store

            type Options struct{}

            type Client struct{}

            type Option func(*Client)

            func New(o Options, opts ...Option) (*Client, error) { return nil, nil }
        """, "New")
        assert describe(sig.parameters) == [
            ("o", "store.Options", False),
            ("opts", "store.Option", True),
        ]
        assert describe(sig.results) == [("", "*store.Client", False), ("", "error", False)]

    def test_composite_local_types(self):
        sig, _ = signature("""
            package store

            type Key string

            type Item struct{}

            func Load(m map[Key][]*Item, f func(Key) bool) {}
        """, "Load")
        assert [p.type for p in sig.parameters] == [
            "map[store.Key][]*store.Item",
            "func(store.Key) bool",
        ]

    def test_imports_are_referenced(self):
        sig, qualifier = signature("""
            package store

            import (
            	"io"
            	"strings"
            	y "gopkg.in/yaml.v3"
            )

            func Read(r io.Reader, n *y.Node) []byte { return nil }
        """, "Read")
        assert [p.type for p in sig.parameters] == ["io.Reader", "*y.Node"]
        assert qualifier.referenced == [GoImport("io"), GoImport("gopkg.in/yaml.v3", "y")]

    def test_type_parameters(self):
        sig, _ = signature("""
            package x

            type T int

            func Map[K comparable, V any](m map[K]V, f func(V) T) map[K]V { return m }
        """, "Map", package="x")
        assert describe(sig.types) == [("K", "comparable", False), ("V", "any", False)]
        assert [p.type for p in sig.parameters] == ["map[K]V", "func(V) x.T"]
        assert describe(sig.results) == [("", "map[K]V", False)]

    def test_type_parameter_shadows_local_type(self):
        sig, _ = signature("""
            package x

            type T int

            func Id[T any](v T) T { return v }
        """, "Id", package="x")
        assert describe(sig.parameters) == [("v", "T", False)]
        assert describe(sig.results) == [("", "T", False)]

    def test_union_constraint(self):
        sig, _ = signature("""
            package ab

            func Sum[T int | float64](a, b T) (r T) { return }
        """, "Sum", package="ab")
        assert describe(sig.types) == [("T", "int | float64", False)]
        assert describe(sig.results) == [("r", "T", False)]

    def test_generic_type_parameters(self):
        go_file = parse("""
            package x

            type Pair[K comparable, V any] struct {
            	Key K
            	Val V
            }
        """)
        qualifier = TypeQualifier("x", declared_names(go_file), go_file.imports)
        decl = go_file.declarations()[0]
        params = parse_type_parameters(type_specs(decl)[0], go_file.source, qualifier)
        assert [(p.name, p.type) for p in params] == [("K", "comparable"), ("V", "any")]


class TestForwardedSignature:
    def test_unnamed_get_positional_names(self):
        sig, _ = signature("""
            package x

            func Apply(int, string) {}
        """, "Apply")
        forwarded = sig.forwarded()
        assert [p.name for p in forwarded.parameters] == ["p0", "p1"]
        assert [p.name for p in sig.parameters] == ["", ""]

    def test_blank_names_replaced(self):
        sig, _ = signature("""
            package x

            func Skip(_ int, p1 string, _ ...bool) {}
        """, "Skip")
        forwarded = sig.forwarded()
        assert [p.name for p in forwarded.parameters] == ["p0", "p1", "p2"]
        assert forwarded.parameters[2].variable() == "p2..."

    def test_collision_with_existing_name(self):
        sig, _ = signature("""
            package x

            func Odd(p1 int, _ string) {}
        """, "Odd")
        assert [p.name for p in sig.forwarded().parameters] == ["p1", "_p1"]

    def test_named_signature_unchanged(self):
        sig, _ = signature("""
            package x

            func Add(a, b int) int { return a + b }
        """, "Add")
        assert sig.forwarded() is sig

    def test_names_hiding_the_package(self):
        sig = Signature(
            parameters=[Parameter(name="store", type="string"), Parameter(name="p0", type="int")],
            results=[Parameter(name="store", type="*store.Store"), Parameter(name="err", type="error")],
        )
        forwarded = sig.forwarded("store")
        assert [p.name for p in forwarded.parameters] == ["_p0", "p0"]
        assert [r.name for r in forwarded.results] == ["r0", "err"]
        assert sig.forwarded() is sig

    def test_blank_results_kept(self):
        sig = Signature(results=[Parameter(name="_", type="int"), Parameter(name="err", type="error")])
        assert sig.forwarded("store") is sig


class TestComments:
    def test_comment_text_drops_directives(self):
        raw = ["//go:generate stringer -type=Kind", "// Kind is a kind.", "//", "//", "// More."]
        assert comment_text(raw) == "Kind is a kind.\n\nMore."

    def test_block_comment(self):
        assert comment_text(["/* Block\n   text */"]) == " Block\n   text"

    def test_doc_and_line_comment(self):
        go_file = parse("""
            package x

            // Limit is the maximum.
            // It can be raised.
            const Limit = 10 // items
        """)
        decl = go_file.declarations()[0]
        comment = parse_comment(value_specs(decl)[0], go_file.source, decl)
        assert comment.doc == ["Limit is the maximum.", "It can be raised."]
        assert comment.line == "items"

    def test_grouped_specs(self):
        go_file = parse("""
            package x

            // Colors.
            const (
            	// Red is red.
            	Red = iota // first
            	Green      // second
            )
        """)
        decl = go_file.declarations()[0]
        red, green = value_specs(decl)
        red_comment = parse_comment(red, go_file.source, decl)
        green_comment = parse_comment(green, go_file.source, decl)
        assert red_comment.doc == ["Red is red."]
        assert red_comment.line == "first"
        # A trailing comment of the previous spec is not documentation
        assert green_comment.doc == ["Colors."]
        assert green_comment.line == "second"

    def test_detached_comment_is_not_doc(self):
        go_file = parse("""
            package x

            // Unrelated.

            func F() {}
        """)
        decl = functions(go_file)["F"]
        assert parse_comment(decl, go_file.source).doc == []


class TestImportNames:
    @pytest.mark.parametrize("path,name", [
        ("net/http", "http"),
        ("gopkg.in/yaml.v3", "yaml"),
        ("github.com/redis/go-redis/v9", "redis"),
        ("example.com/app/a/aa", "aa"),
    ])
    def test_assumed_package_name(self, path, name):
        assert assumed_package_name(path) == name

    def test_alias_wins(self):
        assert GoImport("gopkg.in/yaml.v3", "y").name == "y"

    def test_standard_library(self):
        assert GoImport("net/http").is_standard
        assert not GoImport("example.com/x").is_standard
