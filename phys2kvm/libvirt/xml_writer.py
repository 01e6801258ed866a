# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# phys2kvm/libvirt/xml_writer.py
"""Streaming XML text writer

A small forward-only writer in the manner of libxml2's xmlTextWriter:
elements are opened and closed explicitly, attributes may only be set while
the start tag is still open, and every failure is raised as XmlWriterError
carrying the operation name and the element path it happened at.

Output shape:
  - ``<?xml version="1.0" encoding="UTF-8"?>`` declaration
  - two-space indentation per nesting level
  - text content kept on the same line as its element
  - elements with no content are self-closed
"""
from __future__ import annotations

import io
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator, List, Optional, Union

from ..core.exceptions import XmlWriterError
from ..core.xml_utils import is_xml_comment, is_xml_name, xml_escape

INDENT = "  "


@dataclass
class _Open:
    name: str
    tag_open: bool = True  # start tag not yet terminated with '>'
    has_text: bool = False
    has_children: bool = False


class XmlTextWriter:
    """
    Write one XML document to a text stream.

    Use ``XmlTextWriter.open(path)`` for a file destination; the writer then
    owns the handle and releases it in ``close()`` (also on failure when used
    as a context manager).
    """

    def __init__(self, stream: IO[str], *, indent: str = INDENT, path: Optional[Path] = None) -> None:
        self._stream = stream
        self._indent = indent
        self._path = path
        self._owns_stream = False
        self._stack: List[_Open] = []
        self._started = False
        self._ended = False
        self._has_root = False

    @classmethod
    def open(cls, path: Union[str, Path], *, indent: str = INDENT) -> "XmlTextWriter":
        p = Path(path)
        try:
            f = p.open("w", encoding="utf-8", newline="\n")
        except OSError as e:
            raise XmlWriterError(
                msg=f"cannot open XML destination {p}: {e.strerror or e}",
                cause=e,
                context={"op": "open", "where": "/", "path": str(p)},
            ) from e
        w = cls(f, indent=indent, path=p)
        w._owns_stream = True
        return w

    @classmethod
    def to_string(cls, *, indent: str = INDENT) -> "XmlTextWriter":
        return cls(io.StringIO(), indent=indent)

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    @property
    def where(self) -> str:
        return "/" + "/".join(e.name for e in self._stack)

    @property
    def depth(self) -> int:
        return len(self._stack)

    def _fail(self, op: str, msg: str, cause: Optional[BaseException] = None) -> XmlWriterError:
        ctx = {"op": op, "where": self.where}
        if self._path is not None:
            ctx["path"] = str(self._path)
        return XmlWriterError(msg=f"error constructing XML near call to {op!r}: {msg}", cause=cause, context=ctx)

    def _emit(self, op: str, s: str) -> None:
        try:
            self._stream.write(s)
        except (OSError, ValueError) as e:
            # ValueError: write to a closed stream
            raise self._fail(op, str(e), e) from e

    def _require_document(self, op: str) -> None:
        if not self._started:
            raise self._fail(op, "document not started")
        if self._ended:
            raise self._fail(op, "document already ended")

    def _close_start_tag(self, op: str, *, newline: bool) -> None:
        if self._stack and self._stack[-1].tag_open:
            self._stack[-1].tag_open = False
            self._emit(op, ">\n" if newline else ">")

    def _begin_child(self, op: str) -> None:
        if not self._stack:
            return
        parent = self._stack[-1]
        if parent.has_text:
            raise self._fail(op, f"mixed content is not supported in <{parent.name}>")
        self._close_start_tag(op, newline=True)
        parent.has_children = True

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------

    def start_document(self) -> None:
        if self._started:
            raise self._fail("start_document", "document already started")
        self._started = True
        self._emit("start_document", '<?xml version="1.0" encoding="UTF-8"?>\n')

    def comment(self, text: str) -> None:
        self._require_document("comment")
        if not is_xml_comment(text):
            raise self._fail("comment", "comment text may not contain '--' or end with '-'")
        self._begin_child("comment")
        self._emit("comment", f"{self._indent * self.depth}<!--{text}-->\n")

    def start_element(self, name: str) -> None:
        self._require_document("start_element")
        if not is_xml_name(name):
            raise self._fail("start_element", f"invalid element name {name!r}")
        if not self._stack and self._has_root:
            raise self._fail("start_element", "document already has a root element")
        self._begin_child("start_element")
        self._emit("start_element", f"{self._indent * self.depth}<{name}")
        self._stack.append(_Open(name))
        self._has_root = True

    def attribute(self, name: str, value: object) -> None:
        self._require_document("attribute")
        if not self._stack or not self._stack[-1].tag_open:
            raise self._fail("attribute", f"attribute {name!r} outside of a start tag")
        if not is_xml_name(name):
            raise self._fail("attribute", f"invalid attribute name {name!r}")
        self._emit("attribute", f' {name}="{xml_escape(value)}"')

    def text(self, value: object) -> None:
        self._require_document("text")
        if not self._stack:
            raise self._fail("text", "text outside of the root element")
        top = self._stack[-1]
        if top.has_children:
            raise self._fail("text", f"mixed content is not supported in <{top.name}>")
        self._close_start_tag("text", newline=False)
        top.has_text = True
        self._emit("text", xml_escape(value))

    def end_element(self) -> None:
        self._require_document("end_element")
        if not self._stack:
            raise self._fail("end_element", "no open element")
        top = self._stack[-1]
        if top.tag_open:
            self._emit("end_element", "/>\n")
        elif top.has_text:
            self._emit("end_element", f"</{top.name}>\n")
        else:
            self._emit("end_element", f"{self._indent * (self.depth - 1)}</{top.name}>\n")
        self._stack.pop()

    def end_document(self) -> None:
        """Close any still-open elements and flush."""
        self._require_document("end_document")
        while self._stack:
            self.end_element()
        self._ended = True
        try:
            self._stream.flush()
        except (OSError, ValueError) as e:
            raise self._fail("end_document", str(e), e) from e

    # convenience -------------------------------------------------------

    @contextmanager
    def element(self, tag: str, /, **attrs: object) -> Iterator["XmlTextWriter"]:
        """
        ``with w.element("disk", type="network"):`` opens the element, sets
        the attributes in keyword order, and closes it on normal exit.
        """
        self.start_element(tag)
        for k, v in attrs.items():
            self.attribute(k, v)
        yield self
        self.end_element()

    def single_element(self, tag: str, value: object) -> None:
        """``<tag>value</tag>``"""
        self.start_element(tag)
        self.text(value)
        self.end_element()

    def empty_element(self, tag: str, /, **attrs: object) -> None:
        """``<tag attr="..."/>``"""
        with self.element(tag, **attrs):
            pass

    def getvalue(self) -> str:
        if not isinstance(self._stream, io.StringIO):
            raise TypeError("getvalue() is only available on in-memory writers")
        return self._stream.getvalue()

    def close(self) -> None:
        if self._owns_stream and not self._stream.closed:
            try:
                self._stream.close()
            except OSError as e:
                raise self._fail("close", str(e), e) from e

    def __enter__(self) -> "XmlTextWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["XmlTextWriter", "INDENT"]
