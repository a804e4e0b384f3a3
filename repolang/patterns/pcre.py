"""Ruby/PCRE regex dialect → Python ``re`` dialect conversion.

The linguist tables (vendor list, generated-file list, heuristics) are written
for Ruby's Onigmo engine.  Most of the syntax is shared with Python; this module
rewrites the constructs that differ:

    \\z            end of string                → \\Z
    \\Z            end of string or before \\n   → (?=\\n?\\Z)
    \\h / \\H       hex digit (Onigmo)            → [0-9a-fA-F] / [^0-9a-fA-F]
    (?<name>...)   named group                   → (?P<name>...)
    \\k<name>       named backreference           → (?P=name)
    (?m)           dot matches newline (Ruby)    → re.DOTALL
    (?i) mid-way   global flag group             → hoisted to compile flags
    [[:alpha:]]    POSIX bracket classes         → explicit ranges

``^`` and ``$`` are always line anchors in Ruby, so every converted pattern is
compiled with ``re.MULTILINE``.
"""

from __future__ import annotations

import re

_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.DOTALL,
    "x": re.VERBOSE,
}

# Ruby flag letter -> Python inline flag letter (for scoped groups).
_SCOPED_FLAG_MAP = {"i": "i", "m": "s", "x": "x"}

_POSIX_CLASSES = {
    "alpha": "a-zA-Z",
    "digit": "0-9",
    "alnum": "a-zA-Z0-9",
    "upper": "A-Z",
    "lower": "a-z",
    "space": r"\s",
    "blank": r" \t",
    "xdigit": "0-9a-fA-F",
    "word": r"\w",
    "punct": r"!-/:-@\[-`{-~",
}

_FLAG_GROUP_RE = re.compile(r"\(\?([imx]*)(?:-([imx]*))?(\)|:)")
_POSIX_RE = re.compile(r"\[:(\^?)([a-z]+):\]")
_NAMED_GROUP_RE = re.compile(r"\(\?<([A-Za-z_]\w*)>")
_NAMED_BACKREF_RE = re.compile(r"\\k<([A-Za-z_]\w*)>")


def convert(pattern: str) -> tuple[str, int]:
    """Convert a Ruby-dialect regex to ``(python_pattern, flags)``.

    Raises ValueError for constructs Python's ``re`` cannot express.
    """
    out: list[str] = []
    flags = re.MULTILINE
    in_class = False
    i = 0
    n = len(pattern)

    while i < n:
        ch = pattern[i]

        if ch == "\\":
            if i + 1 >= n:
                raise ValueError("trailing backslash")
            nxt = pattern[i + 1]
            if nxt in "pP" and i + 2 < n and pattern[i + 2] == "{":
                raise ValueError(f"unicode property escape \\{nxt}{{...}} is not supported")
            if nxt == "G":
                raise ValueError("\\G anchor is not supported")
            if nxt == "k":
                m = _NAMED_BACKREF_RE.match(pattern, i)
                if not m:
                    raise ValueError("malformed named backreference")
                out.append(f"(?P={m.group(1)})")
                i = m.end()
                continue
            if nxt == "h":
                out.append("0-9a-fA-F" if in_class else "[0-9a-fA-F]")
            elif nxt == "H":
                if in_class:
                    raise ValueError("\\H inside a character class is not supported")
                out.append("[^0-9a-fA-F]")
            elif nxt == "z" and not in_class:
                out.append(r"\Z")
            elif nxt == "Z" and not in_class:
                out.append(r"(?=\n?\Z)")
            else:
                out.append(pattern[i : i + 2])
            i += 2
            continue

        if in_class:
            if ch == "[":
                m = _POSIX_RE.match(pattern, i)
                if m:
                    negated, name = m.group(1), m.group(2)
                    if negated:
                        raise ValueError(f"negated POSIX class [:^{name}:] is not supported")
                    if name not in _POSIX_CLASSES:
                        raise ValueError(f"unknown POSIX class [:{name}:]")
                    out.append(_POSIX_CLASSES[name])
                    i = m.end()
                    continue
                out.append(r"\[")
                i += 1
                continue
            if ch == "]":
                in_class = False
            out.append(ch)
            i += 1
            continue

        if ch == "[":
            in_class = True
            out.append(ch)
            i += 1
            # A leading ']' (or '^]') is a literal inside the class.
            if i < n and pattern[i] == "^":
                out.append("^")
                i += 1
            if i < n and pattern[i] == "]":
                out.append("]")
                i += 1
            continue

        if ch == "(" and pattern.startswith("(?", i):
            m = _NAMED_GROUP_RE.match(pattern, i)
            if m:
                out.append(f"(?P<{m.group(1)}>")
                i = m.end()
                continue
            m = _FLAG_GROUP_RE.match(pattern, i)
            if m and (m.group(1) or m.group(2) is not None):
                on, off, end = m.group(1), m.group(2) or "", m.group(3)
                if end == ")":
                    # Global flag group: hoist the enabled flags.
                    for letter in on:
                        flags |= _FLAG_MAP[letter]
                else:
                    py_on = "".join(_SCOPED_FLAG_MAP[c] for c in on)
                    py_off = "".join(_SCOPED_FLAG_MAP[c] for c in off)
                    out.append(f"(?{py_on}-{py_off}:" if py_off else f"(?{py_on}:")
                i = m.end()
                continue

        out.append(ch)
        i += 1

    if in_class:
        raise ValueError("unterminated character class")
    return "".join(out), flags
