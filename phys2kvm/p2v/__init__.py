# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""Collector-side machine model and device resolution."""

from .config import (
    Basis,
    CpuConfig,
    DataConn,
    P2vConfig,
    RtcConfig,
    check_data_conns,
    config_from_mapping,
    data_conns_from_ports,
    load_config,
)
from .drive_name import MAX_TARGET_DEV_LEN, drive_name, target_dev
from .network import DEFAULT_NETWORK, map_interface_to_network, read_mac_address

__all__ = [
    "Basis",
    "CpuConfig",
    "DataConn",
    "P2vConfig",
    "RtcConfig",
    "check_data_conns",
    "config_from_mapping",
    "data_conns_from_ports",
    "load_config",
    "MAX_TARGET_DEV_LEN",
    "drive_name",
    "target_dev",
    "DEFAULT_NETWORK",
    "map_interface_to_network",
    "read_mac_address",
]
