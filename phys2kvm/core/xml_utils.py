# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""Shared XML escaping and name checks

Uses xml.sax.saxutils for standard escaping with quote entities added so the
result is safe in double-quoted attributes as well as text content.
"""
from __future__ import annotations

import re
from xml.sax.saxutils import escape as _sax_escape

# Conservative subset of XML Name: no namespaces, ASCII only.
_XML_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")


def xml_escape(s: object) -> str:
    """Escape for XML text and attribute contexts.

    Example:
        >>> xml_escape("a < b & c > d")
        'a &lt; b &amp; c &gt; d'
        >>> xml_escape('say "hello"')
        'say &quot;hello&quot;'
    """
    return _sax_escape(str(s), entities={"'": "&apos;", '"': "&quot;"})


def is_xml_name(name: str) -> bool:
    """True if ``name`` is usable as an element or attribute name."""
    return bool(name) and _XML_NAME_RE.match(name) is not None


def is_xml_comment(text: str) -> bool:
    """True if ``text`` may appear inside ``<!-- -->``.

    XML forbids ``--`` inside a comment and a trailing ``-``.
    """
    return "--" not in text and not text.endswith("-")


__all__ = [
    "xml_escape",
    "is_xml_name",
    "is_xml_comment",
]
