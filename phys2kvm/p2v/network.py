# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# phys2kvm/p2v/network.py
"""Interface -> target network mapping, and MAC address lookup"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from .config import P2vConfig

DEFAULT_NETWORK = "default"
SYSFS_NET_DIR = Path("/sys/class/net")

logger = logging.getLogger("phys2kvm.p2v.network")


def map_interface_to_network(config: P2vConfig, interface: str) -> str:
    """
    Map ``interface`` to a target network name using ``config.network_map``.

    Rules are checked in order and the first one that applies wins:
      - ``"net"`` (no colon) maps every interface to ``net``
      - ``"eth0:net"`` maps only ``eth0`` to ``net``
    With no map, or when nothing applies, the result is ``"default"``.
    """
    if config.network_map is None:
        return DEFAULT_NETWORK

    want = interface + ":"
    for rule in config.network_map:
        if ":" not in rule:
            return rule
        if rule.startswith(want):
            return rule[len(want):]

    return DEFAULT_NETWORK


def read_mac_address(interface: str, *, sysfs_net_dir: Union[str, Path] = SYSFS_NET_DIR) -> Optional[str]:
    """
    Best-effort read of ``<sysfs_net_dir>/<interface>/address``.

    Returns None when the file cannot be read; one trailing newline is
    stripped otherwise. Undecodable bytes are kept as U+FFFD, not dropped.
    """
    path = Path(sysfs_net_dir) / interface / "address"
    try:
        raw = path.read_bytes()
    except OSError as e:
        logger.debug("No MAC address for %s (%s): %s", interface, path, e)
        return None

    mac = raw.decode("utf-8", errors="replace")
    if mac.endswith("\n"):
        mac = mac[:-1]
    return mac


__all__ = [
    "DEFAULT_NETWORK",
    "SYSFS_NET_DIR",
    "map_interface_to_network",
    "read_mac_address",
]
