"""Tests for the CSS scoper."""

from __future__ import annotations

import pytest

from lickui.render.scoper import scope_css

_SCOPE = ".scope"


class TestQualifiedRules:
    def test_selector_list_is_prefixed(self) -> None:
        assert scope_css("a, .b { color: red; }", _SCOPE) == ".scope a, .scope .b { color: red; }"

    def test_compact_rule(self) -> None:
        assert scope_css("p{margin:0}", _SCOPE) == ".scope p{margin:0}"

    def test_already_scoped_selector_untouched(self) -> None:
        assert scope_css(".scope h1 { x: y }", _SCOPE) == ".scope h1 { x: y }"

    def test_mixed_list_prefixes_only_unscoped(self) -> None:
        out = scope_css(".scope h1, h2 { x: y }", _SCOPE)
        assert out == ".scope h1, .scope h2 { x: y }"

    def test_commas_inside_functions_do_not_split(self) -> None:
        out = scope_css(":is(h1, h2) span { x: y }", _SCOPE)
        assert out == ".scope :is(h1, h2) span { x: y }"

    def test_scoping_twice_is_a_no_op(self) -> None:
        once = scope_css("a, b { color: red }\n@media print { p { x: y } }", _SCOPE)
        assert scope_css(once, _SCOPE) == once

    def test_empty_stylesheet(self) -> None:
        assert scope_css("", _SCOPE) == ""

    def test_comments_are_preserved(self) -> None:
        out = scope_css("/* From: x.css */\na{b:c}", _SCOPE)
        assert out == "/* From: x.css */\n.scope a{b:c}"


class TestAtRules:
    def test_import_is_dropped(self) -> None:
        out = scope_css('@import url("x.css");\na { b: c }', _SCOPE)
        assert "@import" not in out
        assert ".scope a { b: c }" in out

    def test_media_keeps_condition_and_scopes_inner_rules(self) -> None:
        out = scope_css("@media (max-width: 600px) { a { color: red } }", _SCOPE)
        assert out.startswith("@media (max-width: 600px) {")
        assert ".scope a { color: red }" in out
        assert ".scope @media" not in out

    def test_supports_is_treated_like_media(self) -> None:
        out = scope_css("@supports (display: grid) { .g { display: grid } }", _SCOPE)
        assert out.startswith("@supports (display: grid) {")
        assert ".scope .g { display: grid }" in out

    @pytest.mark.parametrize(
        "css, prelude",
        [
            ("@layer base { h1 { color: red } }", "@layer base {"),
            ("@container (min-width: 400px) { h1 { color: red } }", "@container (min-width: 400px) {"),
            ("@scope (.card) { h1 { color: red } }", "@scope (.card) {"),
        ],
    )
    def test_grouping_rules_scope_inner_rules(self, css: str, prelude: str) -> None:
        out = scope_css(css, _SCOPE)
        assert out.startswith(prelude)
        assert ".scope h1 { color: red }" in out

    def test_layer_statement_passes_through(self) -> None:
        assert scope_css("@layer base, components;", _SCOPE) == "@layer base, components;"

    def test_keyframes_pass_through(self) -> None:
        css = "@keyframes spin { 0% { opacity: 0 } 100% { opacity: 1 } }"
        out = scope_css(css, _SCOPE)
        assert out == css
        assert ".scope 0%" not in out

    @pytest.mark.parametrize(
        "css",
        [
            '@font-face { font-family: "X"; src: url(/x.woff2); }',
            "@page { margin: 1cm }",
            '@charset "utf-8";',
        ],
    )
    def test_other_at_rules_pass_through(self, css: str) -> None:
        assert scope_css(css, _SCOPE) == css

    def test_nested_media_inside_supports(self) -> None:
        out = scope_css("@supports (x: y) { @media print { p { a: b } } }", _SCOPE)
        assert ".scope p { a: b }" in out
        assert out.count("@media print") == 1
