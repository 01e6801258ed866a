# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# phys2kvm/p2v/drive_name.py
"""Target device naming for disks in the physical-machine descriptor"""
from __future__ import annotations

TARGET_DEV_PREFIX = "sd"

# Longest literal target name passed through unchanged.
MAX_TARGET_DEV_LEN = 63


def drive_name(index: int) -> str:
    """Bijective base-26 suffix for a zero-based drive index.

    Example:
        >>> [drive_name(i) for i in (0, 1, 25, 26, 27, 701, 702)]
        ['a', 'b', 'z', 'aa', 'ab', 'zz', 'aaa']
    """
    if index < 0:
        raise ValueError(f"drive index must be >= 0, got: {index}")
    prefix = drive_name(index // 26 - 1) if index >= 26 else ""
    return prefix + chr(ord("a") + index % 26)


def positional_target_dev(index: int) -> str:
    """``sda``, ``sdb``, ... ``sdz``, ``sdaa`` for index 0, 1, ... 25, 26."""
    return TARGET_DEV_PREFIX + drive_name(index)


def target_dev(disk: str, index: int) -> str:
    """
    Target device for the disk at ``index`` of the full disk list.

    Absolute paths always get the positional name. Anything else is taken as
    a literal target name unless it is longer than MAX_TARGET_DEV_LEN, in
    which case the positional name is used instead. The index is the global
    position, so literal names earlier in the list leave gaps in the
    positional sequence.
    """
    if disk.startswith("/") or len(disk) > MAX_TARGET_DEV_LEN:
        return positional_target_dev(index)
    return disk


__all__ = [
    "TARGET_DEV_PREFIX",
    "MAX_TARGET_DEV_LEN",
    "drive_name",
    "positional_target_dev",
    "target_dev",
]
