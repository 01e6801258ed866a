# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""Shared plumbing: errors, logging, XML escaping."""

from .exceptions import ConfigError, Fatal, Phys2KvmError, XmlWriterError, format_exception_for_cli
from .logger import Log

__all__ = [
    "Phys2KvmError",
    "Fatal",
    "ConfigError",
    "XmlWriterError",
    "format_exception_for_cli",
    "Log",
]
