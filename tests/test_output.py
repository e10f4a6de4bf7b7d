"""Tests for deps attribute rendering."""

from pydeps_resolver.labels import TargetLabel
from pydeps_resolver.models import DependencySet
from pydeps_resolver.models import TargetResolution
from pydeps_resolver.output import assemble
from pydeps_resolver.output import deps_list
from pydeps_resolver.output import render_deps_attr
from pydeps_resolver.output import render_rule


def test_deps_list_sorted_unique():
    assert deps_list(["@pip//numpy", "//a:lib", "@pip//numpy"]) == ["//a:lib", "@pip//numpy"]


def test_empty_deps_elided():
    assert deps_list(DependencySet()) is None
    assert render_deps_attr([]) is None


def test_single_dep_on_one_line():
    assert render_deps_attr(["//a:lib"]) == 'deps = ["//a:lib"]'


def test_multiple_deps_one_per_line():
    assert render_deps_attr(DependencySet(["@pip//numpy", ":helpers"])) == (
        'deps = [\n        ":helpers",\n        "@pip//numpy",\n    ]'
    )


def test_render_rule():
    assert render_rule("py_library", "app", ["//a:lib"]) == (
        'py_library(\n    name = "app",\n    deps = ["//a:lib"],\n)'
    )


def test_render_rule_without_deps():
    assert render_rule("py_binary", "tool", []) == 'py_binary(\n    name = "tool",\n)'


def test_assemble_skips_empty_targets():
    results = [
        TargetResolution(TargetLabel.parse("//b:lib"), DependencySet(["@pip//numpy"])),
        TargetResolution(TargetLabel.parse("//a:lib")),
        TargetResolution(TargetLabel.parse("//a/c:c"), DependencySet(["//b:lib"])),
    ]

    assert assemble(results) == {"//a/c": ["//b:lib"], "//b:lib": ["@pip//numpy"]}
