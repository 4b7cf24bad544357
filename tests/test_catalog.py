from __future__ import annotations

from rich.console import Console

import create_vite
from create_vite import FRAMEWORKS, TEMPLATES, find_template, format_target_dir, is_known_template


def test_every_template_maps_back_to_one_pair() -> None:
    for name in TEMPLATES:
        assert is_known_template(name)
        owners = [
            (framework, variant)
            for framework in FRAMEWORKS
            for variant in framework.variants
            if variant.name == name
        ]
        assert len(owners) == 1
        assert find_template(name) == owners[0]


def test_template_names_are_unique() -> None:
    assert len(TEMPLATES) == len(set(TEMPLATES))


def test_every_framework_has_variants() -> None:
    assert all(framework.variants for framework in FRAMEWORKS)


def test_unknown_names_are_rejected() -> None:
    assert not is_known_template("bogus-name")
    assert not is_known_template("")
    assert not is_known_template(None)
    assert find_template("bogus-name") is None


def test_react_variant_order() -> None:
    react = next(f for f in FRAMEWORKS if f.name == "react")
    assert [v.name for v in react.variants] == ["react-ts", "react-swc-ts", "react", "react-swc"]


def test_format_target_dir() -> None:
    assert format_target_dir("my-app/") == "my-app"
    assert format_target_dir("  my-app///  ") == "my-app"
    assert format_target_dir("nested/app/") == "nested/app"
    assert format_target_dir("   ") is None
    assert format_target_dir("") is None
    assert format_target_dir(None) is None


def test_templates_table_lists_every_template() -> None:
    console = Console(width=120, record=True, color_system=None)
    console.print(create_vite.render_templates_table())
    text = console.export_text()
    for name in TEMPLATES:
        assert name in text
    assert text.index("vanilla-ts") < text.index("qwik-ts")
