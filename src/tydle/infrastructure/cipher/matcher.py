"""Structural matcher that recovers the signature transform from player code.

The player defines, in every version and under fresh identifier names:

1. a helper object whose methods are the cipher primitives::

       var Xy={aB:function(a){a.reverse()},
               cD:function(a,b){var c=a[0];a[0]=a[b%a.length];a[b%a.length]=c},
               eF:function(a,b){a.splice(0,b)}};

2. a one-argument routine that splits the signature into a character array,
   calls those primitives in a fixed order and joins the array back::

       Ab=function(a){a=a.split("");Xy.cD(a,12);Xy.aB(a,45);Xy.eF(a,3);return a.join("")};

Nothing here depends on names: the routine is found by its split/calls/join
shape and each helper is classified by the body it executes.
"""

from __future__ import annotations

import re

import structlog

from tydle.domain.entities.cipher import CipherOperation, DecipherProgram, OperationKind
from tydle.domain.entities.errors import CipherPatternNotFound

log = structlog.get_logger(__name__)

_IDENT = r"[A-Za-z_$][\w$]*"

# Start of any one-parameter function: `function(a){`, `function Ab(a){`
_FUNC_START_RE = re.compile(rf"function(?:\s+{_IDENT})?\s*\(\s*({_IDENT})\s*\)\s*\{{")

# Object methods: `aB:function(a){`, `"aB":function(a,b){`, `aB(a,b){`
_METHOD_RE = re.compile(
    rf"""(?:^|[{{,\s])(["']?)(?P<key>{_IDENT})\1\s*(?::\s*function\s*)?"""
    rf"""\(\s*(?P<params>(?:{_IDENT}(?:\s*,\s*{_IDENT})*)?)\s*\)\s*\{{"""
)

_QUOTES = "\"'`"


def _balanced_block(text: str, open_index: int) -> tuple[str, int] | None:
    """Return the content of the ``{...}`` block opening at *open_index*.

    Skips string literals so braces inside quotes do not count. Returns
    ``(inner_text, index_after_closing_brace)`` or None if unbalanced.
    """
    if open_index >= len(text) or text[open_index] != "{":
        return None

    depth = 0
    i = open_index
    quote: str | None = None
    while i < len(text):
        ch = text[i]
        if quote is not None:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[open_index + 1 : i], i + 1
        i += 1
    return None


def _routine_body_re(arg: str) -> re.Pattern[str]:
    a = re.escape(arg)
    return re.compile(
        rf"^\s*{a}\s*=\s*{a}\.split\([^)]*\)\s*[;,]"
        rf"(?P<calls>.*?)"
        rf"[;,]?\s*return\s+{a}\.join\([^)]*\)\s*;?\s*$",
        re.DOTALL,
    )


def _call_re(arg: str) -> re.Pattern[str]:
    a = re.escape(arg)
    return re.compile(
        rf"""(?P<obj>{_IDENT})"""
        rf"""(?:\.(?P<method>{_IDENT})|\[\s*(["'])(?P<qmethod>{_IDENT})\3\s*\])"""
        rf"""\s*\(\s*{a}\s*(?:,\s*(?P<operand>\d+)\s*)?\)"""
    )


def _classify_helper(params: list[str], body: str) -> OperationKind | None:
    """Classify a helper method by what its body does to the array argument."""
    if not params:
        return None
    arr = re.escape(params[0])

    if re.search(rf"{arr}\.reverse\(\s*\)", body):
        return OperationKind.REVERSE

    if len(params) < 2:
        return None
    idx = re.escape(params[1])

    if re.search(rf"{arr}\.splice\(\s*0\s*,\s*{idx}\s*\)", body):
        return OperationKind.SPLICE

    if re.search(rf"{idx}\s*%\s*{arr}\.length", body) and re.search(
        rf"{arr}\[\s*0\s*\]\s*=", body
    ):
        return OperationKind.SWAP

    return None


class StructuralCipherMatcher:
    """Derives a DecipherProgram from player source (``CipherMatcherPort``)."""

    def derive(self, player_source: str) -> DecipherProgram:
        """Locate the transform routine and its helpers in *player_source*.

        Raises:
            CipherPatternNotFound: With ``stage`` naming the step that failed
                (``routine``, ``helper_object`` or ``helper``).
        """
        routine = self._find_routine(player_source)
        if routine is None:
            raise CipherPatternNotFound("routine")
        helper_name, calls = routine

        helpers = self._find_helpers(player_source, helper_name)
        if helpers is None:
            raise CipherPatternNotFound("helper_object")

        operations: list[CipherOperation] = []
        for method, operand in calls:
            kind = helpers.get(method)
            if kind is None:
                log.debug("cipher_helper_unclassified", helper=helper_name, method=method)
                raise CipherPatternNotFound("helper")
            if kind is OperationKind.REVERSE:
                operations.append(CipherOperation(kind))
                continue
            if operand is None:
                raise CipherPatternNotFound("operand")
            operations.append(CipherOperation(kind, operand))

        program = DecipherProgram(tuple(operations))
        log.debug(
            "cipher_program_derived",
            helper=helper_name,
            operations=program.describe(),
        )
        return program

    # ------------------------------------------------------------------
    # Routine discovery
    # ------------------------------------------------------------------

    def _find_routine(
        self, source: str
    ) -> tuple[str, list[tuple[str, int | None]]] | None:
        """Return ``(helper_object_name, [(method, operand), ...])``."""
        for m in _FUNC_START_RE.finditer(source):
            arg = m.group(1)
            open_index = m.end() - 1

            # Cheap prefix check before balancing the whole block
            head = source[open_index + 1 : open_index + 200]
            if not re.match(rf"\s*{re.escape(arg)}\s*=\s*{re.escape(arg)}\.split\(", head):
                continue

            block = _balanced_block(source, open_index)
            if block is None:
                continue
            body_match = _routine_body_re(arg).match(block[0])
            if body_match is None:
                continue

            parsed = self._parse_calls(body_match.group("calls"), arg)
            if parsed is not None:
                return parsed
        return None

    def _parse_calls(
        self, calls_text: str, arg: str
    ) -> tuple[str, list[tuple[str, int | None]]] | None:
        calls: list[tuple[str, int | None]] = []
        helper_name: str | None = None
        last_end = 0

        for m in _call_re(arg).finditer(calls_text):
            # Only separators may sit between consecutive calls
            if calls_text[last_end : m.start()].strip(" \t\r\n;,"):
                return None
            last_end = m.end()

            obj = m.group("obj")
            if helper_name is None:
                helper_name = obj
            elif obj != helper_name:
                return None

            method = m.group("method") or m.group("qmethod")
            operand = m.group("operand")
            calls.append((method, int(operand) if operand is not None else None))

        if calls_text[last_end:].strip(" \t\r\n;,"):
            return None
        if helper_name is None or not calls:
            return None
        return helper_name, calls

    # ------------------------------------------------------------------
    # Helper object discovery
    # ------------------------------------------------------------------

    def _find_helpers(
        self, source: str, helper_name: str
    ) -> dict[str, OperationKind | None] | None:
        decl_re = re.compile(rf"(?:^|[^\w$.]){re.escape(helper_name)}\s*=\s*\{{")
        for m in decl_re.finditer(source):
            block = _balanced_block(source, m.end() - 1)
            if block is None:
                continue
            methods = self._parse_methods(block[0])
            if methods:
                return methods
        return None

    def _parse_methods(self, body: str) -> dict[str, OperationKind | None]:
        methods: dict[str, OperationKind | None] = {}
        pos = 0
        while True:
            m = _METHOD_RE.search(body, pos)
            if m is None:
                break
            block = _balanced_block(body, m.end() - 1)
            if block is None:
                break
            params = [p.strip() for p in m.group("params").split(",") if p.strip()]
            methods[m.group("key")] = _classify_helper(params, block[0])
            pos = block[1]
        return methods
