# File: site_mirror/purge.py
"""site_mirror.purge: Удаление неиспользуемых CSS-правил.

Правило остаётся, если хотя бы один его селектор «используется»: все имена
классов, id и тегов селектора встречаются как токены в HTML/JS страницы.
Группирующие at-правила (``@media``, ``@supports`` …) чистятся рекурсивно,
остальные (``@font-face``, ``@keyframes``, ``@import`` …) сохраняются как есть.
"""

from __future__ import annotations

import re
from typing import Callable, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

__all__ = ["PurgeFn", "purge_css", "split_statements", "selector_names", "used_tokens"]

PurgeFn = Callable[[str, Sequence[str]], str]

_Statement = Tuple[str, Optional[str]]

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_TOKEN_RE = re.compile(r"[A-Za-z0-9_-]+")
_WORD_RE = re.compile(r"[^\s<>\"'`=]+")

_ATTR_RE = re.compile(r"\[[^\]]*\]")
_PSEUDO_RE = re.compile(r"(?<!\\)::?[A-Za-z-]+(?:\((?:[^()]|\([^()]*\))*\))?")
_CLASS_RE = re.compile(r"\.((?:\\.|[\w-])+)")
_ID_RE = re.compile(r"#((?:\\.|[\w-])+)")
_TYPE_RE = re.compile(r"(?:^|[\s>+~(,])([A-Za-z][A-Za-z0-9-]*)")
_ESCAPE_RE = re.compile(r"\\(.)")

_GROUPING_AT_RULES = ("@media", "@supports", "@document", "@-moz-document", "@layer", "@container")
_ALWAYS_USED = frozenset({"html", "body"})


def _strip_comments(css: str) -> str:
    return _COMMENT_RE.sub("", css)


def _skip_quoted(css: str, i: int) -> int:
    """Return the index just past the quoted string that starts at *i*."""
    quote = css[i]
    i += 1
    n = len(css)
    while i < n:
        if css[i] == "\\":
            i += 2
            continue
        if css[i] == quote:
            return i + 1
        i += 1
    return n


def split_statements(css: str) -> List[_Statement]:
    """Split *css* into top-level ``(head, body)`` pairs.

    ``body`` is None for statement at-rules such as ``@import url(x);``.
    Braces inside quoted strings are not counted.
    """
    css = _strip_comments(css)
    out: List[_Statement] = []
    i, n = 0, len(css)
    while i < n:
        while i < n and css[i].isspace():
            i += 1
        if i >= n:
            break

        start = i
        is_at_rule = css[i] == "@"
        while i < n:
            ch = css[i]
            if ch in "\"'":
                i = _skip_quoted(css, i)
                continue
            if ch == "{" or ch == "}" or (ch == ";" and is_at_rule):
                break
            i += 1

        if i >= n:
            tail = css[start:].strip()
            if tail:
                out.append((tail, None))
            break
        if css[i] == "}":
            # stray closing brace
            i += 1
            continue
        if css[i] == ";":
            out.append((css[start:i].strip(), None))
            i += 1
            continue

        head = css[start:i].strip()
        i += 1
        depth = 1
        body_start = i
        while i < n and depth > 0:
            ch = css[i]
            if ch in "\"'":
                i = _skip_quoted(css, i)
                continue
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
            i += 1
        body = css[body_start : i - 1] if depth == 0 else css[body_start:]
        out.append((head, body))
    return out


def _split_selector_list(head: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for ch in head:
        if ch in "([":
            depth += 1
        elif ch in ")]":
            depth = max(0, depth - 1)
        elif ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    parts.append("".join(current).strip())
    return [p for p in parts if p]


def selector_names(selector: str) -> Tuple[Set[str], Set[str]]:
    """Return ``(class_and_id_names, type_names)`` referenced by one selector."""
    s = _ATTR_RE.sub(" ", selector)
    s = _PSEUDO_RE.sub(" ", s)
    names = {_ESCAPE_RE.sub(r"\1", m) for m in _CLASS_RE.findall(s)}
    names |= {_ESCAPE_RE.sub(r"\1", m) for m in _ID_RE.findall(s)}
    bare = _ID_RE.sub(" ", _CLASS_RE.sub(" ", s))
    types = {t.lower() for t in _TYPE_RE.findall(bare)}
    return names, types


def used_tokens(contents: Iterable[str]) -> FrozenSet[str]:
    tokens: Set[str] = set()
    for text in contents:
        if not text:
            continue
        tokens.update(_TOKEN_RE.findall(text))
        tokens.update(_WORD_RE.findall(text))
    return frozenset(tokens)


class _Purger:
    def __init__(self, tokens: FrozenSet[str], safelist: Iterable[str]) -> None:
        self.tokens = tokens
        self.lowered = frozenset(t.lower() for t in tokens)
        self.safelist = _ALWAYS_USED | frozenset(safelist)

    def selector_used(self, selector: str) -> bool:
        names, types = selector_names(selector)
        if not all(name in self.tokens or name in self.safelist for name in names):
            return False
        return all(t in self.lowered or t in self.safelist for t in types)

    def purge_block(self, css: str) -> str:
        pieces: List[str] = []
        for head, body in split_statements(css):
            if body is None:
                pieces.append(f"{head};")
                continue
            if head.startswith("@"):
                keyword = head.split(None, 1)[0].lower()
                if keyword in _GROUPING_AT_RULES:
                    inner = self.purge_block(body)
                    if inner.strip():
                        pieces.append(f"{head}{{{inner}}}")
                else:
                    pieces.append(f"{head}{{{body}}}")
                continue
            selectors = _split_selector_list(head)
            kept = [sel for sel in selectors if self.selector_used(sel)]
            if not kept:
                continue
            if len(kept) == len(selectors):
                pieces.append(f"{head}{{{body}}}")
            else:
                pieces.append(f"{','.join(kept)}{{{body}}}")
        return "\n".join(pieces)


def purge_css(css: str, contents: Sequence[str], safelist: Iterable[str] = ()) -> str:
    """Return only the rules of *css* whose selectors are referenced by *contents*."""
    return _Purger(used_tokens(contents), safelist).purge_block(css)
