"""Tests for StructuralCipherMatcher - cipher recovery from player code."""

from __future__ import annotations

import pytest
from factories import DECIPHERED_SIGNATURE, PLAYER_JS, SCRAMBLED_SIGNATURE

from tydle.domain.entities import CipherPatternNotFound, OperationKind
from tydle.infrastructure.cipher import StructuralCipherMatcher
from tydle.infrastructure.cipher.matcher import _balanced_block, _classify_helper


class TestBalancedBlock:
    def test_nested(self) -> None:
        text = "x{a{b}c}d"
        assert _balanced_block(text, 1) == ("a{b}c", 8)

    def test_braces_in_strings_ignored(self) -> None:
        text = '{a="}";b}'
        assert _balanced_block(text, 0) == ('a="}";b', len(text))

    def test_unbalanced(self) -> None:
        assert _balanced_block("{a{b}", 0) is None

    def test_not_a_brace(self) -> None:
        assert _balanced_block("abc", 0) is None


class TestClassifyHelper:
    def test_reverse(self) -> None:
        assert _classify_helper(["x"], "x.reverse()") is OperationKind.REVERSE

    def test_splice(self) -> None:
        assert _classify_helper(["x", "y"], "x.splice(0,y)") is OperationKind.SPLICE

    def test_swap(self) -> None:
        body = "var c=x[0];x[0]=x[y%x.length];x[y%x.length]=c"
        assert _classify_helper(["x", "y"], body) is OperationKind.SWAP

    def test_unknown(self) -> None:
        assert _classify_helper(["x", "y"], "x.push(y)") is None


# ---------------------------------------------------------------------------
# Full derivation
# ---------------------------------------------------------------------------
class TestDerive:
    def test_fixture_player(self, matcher: StructuralCipherMatcher) -> None:
        program = matcher.derive(PLAYER_JS)
        assert program.describe() == ["REVERSE", "SWAP(12)", "SPLICE(3)"]
        assert program.apply(SCRAMBLED_SIGNATURE) == DECIPHERED_SIGNATURE

    def test_identifier_names_do_not_matter(
        self, matcher: StructuralCipherMatcher
    ) -> None:
        source = (
            "var $z={q9:function(r,t){r.splice(0,t)},"
            "w_:function(r){r.reverse()},"
            "Hh:function(r,t){var n=r[0];r[0]=r[t%r.length];r[t%r.length]=n}};"
            "function zZ(k){k=k.split(\"\");$z.Hh(k,7);$z.q9(k,2);$z.w_(k,0);return k.join(\"\")}"
        )
        program = matcher.derive(source)
        assert program.describe() == ["SWAP(7)", "SPLICE(2)", "REVERSE"]

    def test_shorthand_methods(self, matcher: StructuralCipherMatcher) -> None:
        source = (
            "const Ob={rv(a){a.reverse()},sp(a,b){a.splice(0,b)}};"
            "var f=function(a){a=a.split('');Ob.sp(a,1);Ob.rv(a,9);return a.join('')};"
        )
        program = matcher.derive(source)
        assert program.apply("abcd") == "dcb"

    def test_missing_routine(self, matcher: StructuralCipherMatcher) -> None:
        with pytest.raises(CipherPatternNotFound) as exc_info:
            matcher.derive("var x=function(a){return a};")
        assert exc_info.value.stage == "routine"

    def test_missing_helper_object(self, matcher: StructuralCipherMatcher) -> None:
        source = 'var f=function(a){a=a.split("");Nx.m(a,1);return a.join("")};'
        with pytest.raises(CipherPatternNotFound) as exc_info:
            matcher.derive(source)
        assert exc_info.value.stage == "helper_object"

    def test_unclassifiable_helper(self, matcher: StructuralCipherMatcher) -> None:
        source = (
            "var Ob={m:function(a,b){a.push(b)}};"
            'var f=function(a){a=a.split("");Ob.m(a,1);return a.join("")};'
        )
        with pytest.raises(CipherPatternNotFound) as exc_info:
            matcher.derive(source)
        assert exc_info.value.stage == "helper"

    def test_missing_operand(self, matcher: StructuralCipherMatcher) -> None:
        source = (
            "var Ob={m:function(a,b){a.splice(0,b)}};"
            'var f=function(a){a=a.split("");Ob.m(a);return a.join("")};'
        )
        with pytest.raises(CipherPatternNotFound) as exc_info:
            matcher.derive(source)
        assert exc_info.value.stage == "operand"

    def test_foreign_statement_between_calls_rejected(
        self, matcher: StructuralCipherMatcher
    ) -> None:
        source = (
            "var Ob={m:function(a,b){a.splice(0,b)}};"
            'var f=function(a){a=a.split("");Ob.m(a,1);alert(a);return a.join("")};'
        )
        with pytest.raises(CipherPatternNotFound):
            matcher.derive(source)
