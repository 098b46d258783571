"""End-to-end tests of the generation pipeline on a Go module on disk."""

import pytest

from reexporter.config import parse_config
from reexporter.exceptions import FormatError, ModuleLoadError
from reexporter.exporter import Exporter, resolve_import_path
from reexporter.parser import BuildContext, PackageLoader

from conftest import write_file

pytestmark = pytest.mark.integration


def generate(go_module, resolver, formatter, yaml_text, package_dir="api"):
    config = parse_config(yaml_text)
    directory = go_module / package_dir
    module = resolver.resolve(directory)
    exporter = Exporter(config.exports, module, module.package_path(str(directory)), formatter=formatter)
    return exporter.generate(), exporter


def test_resolve_import_path():
    assert resolve_import_path("./store", "example.com/app/api") == "example.com/app/api/store"
    assert resolve_import_path("../a/aa", "example.com/app/api") == "example.com/app/a/aa"
    assert resolve_import_path("example.com/x", "example.com/app/api") == "example.com/x"


def test_example_packages(go_module, resolver, formatter):
    code, exporter = generate(go_module, resolver, formatter, """
        exports:
          - import: example.com/app/a/aa
          - import: ../a/ab
    """)

    assert code.startswith("// Code generated by reexporter. DO NOT EDIT.\n\npackage api\n")
    assert '\t"example.com/app/a/aa"\n\t"example.com/app/a/ab"\n' in code
    assert "\t// MyEnum is an example enumeration type\n\tMyEnum = aa.MyEnum\n" in code
    assert "\t// MyVar is an example variable\n\tMyVar = aa.MyVar // MyVar\n" in code
    assert (
        "\tEnumValue1 = aa.EnumValue1 // EnumValue1\n"
        "\tEnumValue2 = aa.EnumValue2 // EnumValue2\n"
        "\tEnumValue3 = aa.EnumValue3 // EnumValue3\n"
    ) in code
    assert (
        "// SayHello prints a greeting message using MyVar.\n"
        "func SayHello() {\n\taa.SayHello()\n}\n"
    ) in code
    assert (
        "func Sum[T int | float64](a T, b T) (r T) {\n"
        "\treturn ab.Sum[T](a, b)\n}\n"
    ) in code
    assert (
        "func SumAll[T int | float64](values ...T) T {\n"
        "\treturn ab.SumAll[T](values...)\n}\n"
    ) in code
    assert exporter.registry.counts() == {"types": 1, "variables": 1, "constants": 3, "functions": 3}


def test_functions_in_discovery_order(go_module, resolver, formatter):
    code, exporter = generate(go_module, resolver, formatter, """
        exports:
          - import: example.com/app/a/ab
          - import: example.com/app/a/aa
    """)
    assert [f.export_name for f in exporter.registry.functions] == ["Sum", "SumAll", "SayHello"]
    assert code.index("func Sum[") < code.index("func SayHello(")


def test_scenario_a_function_exclusion(go_module, resolver, formatter):
    write_file(go_module, "foo/foo.go", """\
        package foo

        type Foo struct{}

        func Bar() {}
    """)
    code, exporter = generate(go_module, resolver, formatter, """
        common:
          output: generated.go
        exports:
          - import: example.com/app/foo
            exclude:
              functions: true
    """)
    assert "Foo = foo.Foo" in code
    assert "Bar" not in code
    rejected = [d for d in exporter.decisions if not d.included]
    assert [(d.name, d.reason) for d in rejected] == [("Bar", "functions excluded")]


def test_scenario_b_rename(go_module, resolver, formatter):
    code, _ = generate(go_module, resolver, formatter, """
        exports:
          - import: example.com/app/a/aa
            rename:
              MyVar: ExportedVar
    """)
    assert "ExportedVar = aa.MyVar // MyVar" in code
    assert "\tMyVar =" not in code


def test_scenario_c_file_filter(go_module, resolver, formatter):
    write_file(go_module, "store/store.go", """\
        package store

        type Store struct{}

        func Open() *Store { return &Store{} }
    """)
    write_file(go_module, "store/store_debug.go", """\
        package store

        type Debugger struct{}

        const Verbose = true

        func Dump(s *Store) {}
    """)
    code, exporter = generate(go_module, resolver, formatter, """
        exports:
          - import: example.com/app/store
            exclude:
              files: ["/_debug$/"]
    """)
    assert "Store = store.Store" in code
    assert "func Open() *store.Store {\n\treturn store.Open()\n}\n" in code
    for name in ("Debugger", "Verbose", "Dump"):
        assert name not in code
    assert ("store_debug.go", "file", False) in [(d.file, d.kind, d.included) for d in exporter.decisions]


def test_scenario_d_variadic(go_module, resolver, formatter):
    write_file(go_module, "nums/nums.go", """\
        package nums

        func F(xs ...int) int { return len(xs) }
    """)
    code, _ = generate(go_module, resolver, formatter, """
        exports:
          - import: example.com/app/nums
    """)
    assert "func F(xs ...int) int {\n\treturn nums.F(xs...)\n}\n" in code


def test_methods_and_unexported_skipped(go_module, resolver, formatter):
    write_file(go_module, "svc/svc.go", """\
        package svc

        type Service struct{}

        type helper int

        func (s *Service) Run() error { return nil }

        func newService() *Service { return nil }
    """)
    code, exporter = generate(go_module, resolver, formatter, """
        exports:
          - import: example.com/app/svc
    """)
    assert "Service = svc.Service" in code
    assert "Run" not in code
    assert "helper" not in code
    assert "newService" not in code
    reasons = {d.name: d.reason for d in exporter.decisions if not d.included}
    assert reasons == {"helper": "not exported", "newService": "not exported"}


def test_signature_types_and_imports(go_module, resolver, formatter):
    write_file(go_module, "rw/rw.go", """\
        package rw

        import (
        	"io"
        	"strings"
        )

        type Options struct{}

        func Copy(dst io.Writer, src io.Reader, o Options) (int64, error) {
        	return 0, nil
        }

        func Upper(s string) string { return strings.ToUpper(s) }
    """)
    code, _ = generate(go_module, resolver, formatter, """
        exports:
          - import: example.com/app/rw
    """)
    assert '\t"example.com/app/rw"\n\t"io"\n)' in code
    assert '"strings"' not in code
    assert (
        "func Copy(dst io.Writer, src io.Reader, o rw.Options) (int64, error) {\n"
        "\treturn rw.Copy(dst, src, o)\n}\n"
    ) in code


def test_unnamed_parameters_forwarded(go_module, resolver, formatter):
    write_file(go_module, "cb/cb.go", """\
        package cb

        func Call(int, string, ...bool) {}
    """)
    code, _ = generate(go_module, resolver, formatter, """
        exports:
          - import: example.com/app/cb
    """)
    assert "func Call(p0 int, p1 string, p2 ...bool) {\n\tcb.Call(p0, p1, p2...)\n}\n" in code


def test_same_export_name_from_two_packages(go_module, resolver):
    write_file(go_module, "one/one.go", "package one\n\nconst Limit = 1\n")
    write_file(go_module, "two/two.go", "package two\n\nconst Limit = 2\n")
    config = parse_config("""
        exports:
          - import: example.com/app/one
          - import: example.com/app/two
    """)
    module = resolver.resolve(go_module / "api")
    exporter = Exporter(config.exports, module, "example.com/app/api")
    registry = exporter.collect()
    assert [(c.export_name, c.package) for c in registry.constants] == [("Limit", "one"), ("Limit", "two")]


def test_duplicate_export_names_both_rendered(go_module, resolver, formatter):
    # Duplicate declarations are valid syntax; only the Go compiler rejects them
    write_file(go_module, "one/one.go", "package one\n\nconst Limit = 1\n")
    write_file(go_module, "two/two.go", "package two\n\nconst Limit = 2\n")
    code, _ = generate(go_module, resolver, formatter, """
        exports:
          - import: example.com/app/one
          - import: example.com/app/two
    """)
    assert code.count("Limit = ") == 2


def test_load_error_aborts(go_module, resolver, formatter):
    with pytest.raises(ModuleLoadError):
        generate(go_module, resolver, formatter, """
            exports:
              - import: example.com/app/a/aa
              - import: example.com/app/missing
        """)


def test_format_error_carries_rendered_code(go_module, resolver):
    def reject(code):
        raise FormatError("rejected", code)

    config = parse_config("exports:\n  - import: example.com/app/a/aa\n")
    module = resolver.resolve(go_module / "api")
    exporter = Exporter(config.exports, module, "example.com/app/api", formatter=reject)
    with pytest.raises(FormatError) as exc:
        exporter.generate()
    assert "MyEnum = aa.MyEnum" in exc.value.code


def test_registry_fresh_per_run(go_module, resolver, formatter):
    config = parse_config("exports:\n  - import: example.com/app/a/aa\n")
    module = resolver.resolve(go_module / "api")
    exporter = Exporter(config.exports, module, "example.com/app/api", formatter=formatter)
    first = exporter.generate()
    assert exporter.generate() == first
    assert len(exporter.registry.types) == 1


def test_package_clause_differs_from_path(go_module, resolver, formatter):
    write_file(go_module, "impl/v1api/client.go", "package api\n\ntype Client struct{}\n")
    code, _ = generate(go_module, resolver, formatter, """
        exports:
          - import: example.com/app/impl/v1api
    """)
    assert 'import (\n\tapi "example.com/app/impl/v1api"\n)\n' in code
    assert "\tClient = api.Client\n" in code


def test_dependency_named_by_package_clause(go_module, resolver, formatter):
    write_file(go_module, "impl/v1api/client.go", "package api\n\ntype Client struct{}\n")
    write_file(go_module, "svc/svc.go", """\
        package svc

        import "example.com/app/impl/v1api"

        func Connect() *api.Client { return nil }
    """)
    code, _ = generate(go_module, resolver, formatter, """
        exports:
          - import: example.com/app/svc
    """)
    assert '\t"example.com/app/svc"\n\tapi "example.com/app/impl/v1api"\n)' in code
    assert "func Connect() *api.Client {\n\treturn svc.Connect()\n}\n" in code


def test_build_constraints_select_files(go_module, resolver, formatter):
    write_file(go_module, "osx/os_linux.go", 'package osx\n\nfunc Name() string { return "linux" }\n')
    write_file(go_module, "osx/os_windows.go", 'package osx\n\nfunc Name() string { return "windows" }\n')
    write_file(go_module, "osx/mkdata.go", "//go:build ignore\n\npackage main\n\nfunc main() {}\n")
    config = parse_config("exports:\n  - import: example.com/app/osx\n")
    module = resolver.resolve(go_module / "api")
    loader = PackageLoader(module, build=BuildContext(goos="linux", goarch="amd64"))
    exporter = Exporter(config.exports, module, "example.com/app/api", loader=loader, formatter=formatter)
    code = exporter.generate()
    assert code.count("func Name() string {\n\treturn osx.Name()\n}\n") == 1
    assert "main" not in code


def test_parameter_named_like_package(go_module, resolver, formatter):
    write_file(go_module, "store/store.go", """\
        package store

        type Store struct{}

        func Open(store string) *Store { return nil }
    """)
    code, _ = generate(go_module, resolver, formatter, """
        exports:
          - import: example.com/app/store
    """)
    assert "func Open(p0 string) *store.Store {\n\treturn store.Open(p0)\n}\n" in code
