# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# phys2kvm/__init__.py
"""
phys2kvm - physical machine descriptor for P2V conversion

Turns the collector's view of a physical machine (CPU, memory, clock,
disks, removable media, NICs) into the phony libvirt ``physical.xml`` that
virt-v2v reads on the conversion server.

Usage as a library:

    from phys2kvm import P2vConfig, DataConn, generate_physical_xml

    config = P2vConfig(guestname="db01", memory=8 << 30, vcpus=4, disks=("/dev/sda",))
    generate_physical_xml(config, [DataConn(nbd_remote_port=50123)], "physical.xml")
"""

__version__ = "0.1.0"

from .core.exceptions import ConfigError, Fatal, Phys2KvmError, XmlWriterError
from .p2v import Basis, CpuConfig, DataConn, P2vConfig, RtcConfig, load_config
from .libvirt import generate_physical_xml, render_physical_xml

__all__ = [
    "__version__",

    # Configuration
    "P2vConfig",
    "CpuConfig",
    "RtcConfig",
    "Basis",
    "DataConn",
    "load_config",

    # Document generation
    "generate_physical_xml",
    "render_physical_xml",

    # Errors
    "Phys2KvmError",
    "Fatal",
    "ConfigError",
    "XmlWriterError",
]
