#!/usr/bin/env python3
# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Example: write physical.xml for a machine described in code.

This example demonstrates:
- Building a P2vConfig by hand
- Pairing each disk with its NBD data connection
- Writing the descriptor and handling writer failures

Usage:
    python library_physical_xml.py /tmp/physical.xml
"""

import logging
import sys

from phys2kvm import (
    Basis,
    CpuConfig,
    DataConn,
    P2vConfig,
    RtcConfig,
    XmlWriterError,
    generate_physical_xml,
)

logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main(output: str) -> int:
    config = P2vConfig(
        guestname="fileserver",
        memory=16 * 1024 * 1024 * 1024,
        vcpus=8,
        cpu=CpuConfig(vendor="AMD", sockets=1, cores=8, threads=1, acpi=True, apic=True, pae=True),
        rtc=RtcConfig(basis=Basis.UTC),
        disks=("/dev/sda", "/dev/nvme0n1"),
        removable=("hdc",),
        interfaces=("eth0", "eth1"),
        network_map=("eth1:backup", "lan"),
    )
    # One NBD endpoint per disk, same order as config.disks.
    data_conns = [DataConn(nbd_remote_port=50123), DataConn(nbd_remote_port=50124)]

    try:
        path = generate_physical_xml(config, data_conns, output, logger=logger)
    except XmlWriterError as e:
        logger.error(e.user_message(include_context=True, include_cause=True))
        return e.code

    logger.info(f"Wrote {path}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    sys.exit(main(sys.argv[1]))
