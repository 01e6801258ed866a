# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# phys2kvm/libvirt/physical_xml.py
"""
Write ``physical.xml``: a piece of phony libvirt XML describing the physical
machine, handed to virt-v2v on the conversion server.

It is not input for libvirt. virt-v2v will (if necessary) generate the real
target libvirt XML.
"""
from __future__ import annotations

import logging
import platform
from pathlib import Path
from typing import Optional, Sequence, Union

from .. import __version__
from ..core.logger import Log
from ..p2v.config import Basis, DataConn, P2vConfig
from ..p2v.drive_name import target_dev
from ..p2v.network import SYSFS_NET_DIR, map_interface_to_network, read_mac_address
from .xml_writer import XmlTextWriter

PROGRAM_NAME = "phys2kvm"

NOTE_COMMENT = (
    " NOTE!\n"
    "\n"
    "  This libvirt XML is generated by the phys2kvm collector, in\n"
    "  order to communicate with the backend virt-v2v process running\n"
    "  on the conversion server.  It is a minimal description of the\n"
    "  physical machine.  If the target of the conversion is libvirt,\n"
    "  then virt-v2v will generate the real target libvirt XML, which\n"
    "  has only a little to do with the XML in this file.\n"
    "\n"
    "  TL;DR: Don't try to load this XML into libvirt. "
)

_log = logging.getLogger("phys2kvm.libvirt.physical_xml")


def host_arch() -> str:
    return platform.machine() or "x86_64"


def _write_cpu(w: XmlTextWriter, config: P2vConfig) -> None:
    # https://libvirt.org/formatdomain.html#elementsCPU
    cpu = config.cpu
    if not cpu.is_known:
        return
    with w.element("cpu", match="minimum"):
        if cpu.vendor is not None:
            w.single_element("vendor", cpu.vendor)
        if cpu.model is not None:
            with w.element("model", fallback="allow"):
                w.text(cpu.model)
        if cpu.has_topology:
            with w.element("topology"):
                if cpu.sockets:
                    w.attribute("sockets", cpu.sockets)
                if cpu.cores:
                    w.attribute("cores", cpu.cores)
                if cpu.threads:
                    w.attribute("threads", cpu.threads)


def _write_clock(w: XmlTextWriter, config: P2vConfig) -> None:
    rtc = config.rtc
    if rtc.basis is Basis.UTC:
        if rtc.offset == 0:
            w.empty_element("clock", offset="utc")
        else:
            w.empty_element("clock", offset="variable", basis="utc", adjustment=rtc.offset)
    elif rtc.basis is Basis.LOCALTIME:
        w.empty_element("clock", offset="localtime")
    # Basis.UNKNOWN: no <clock> at all


def _write_features(w: XmlTextWriter, config: P2vConfig) -> None:
    with w.element("features"):
        if config.cpu.acpi:
            w.empty_element("acpi")
        if config.cpu.apic:
            w.empty_element("apic")
        if config.cpu.pae:
            w.empty_element("pae")


def _write_disks(w: XmlTextWriter, config: P2vConfig, data_conns: Sequence[DataConn], log) -> None:
    for i, disk in enumerate(config.disks):
        dev = target_dev(disk, i)
        port = data_conns[i].nbd_remote_port
        log.debug("disk %d: %s -> target %s (nbd port %d)", i, disk, dev, port)

        with w.element("disk", type="network", device="disk"):
            w.empty_element("driver", name="qemu", type="raw")
            with w.element("source", protocol="nbd"):
                w.empty_element("host", name="localhost", port=port)
            # TODO: set bus="ide"/"scsi" once the collector reports the controller type.
            w.empty_element("target", dev=dev)


def _write_removable(w: XmlTextWriter, config: P2vConfig, log) -> None:
    for dev in config.removable or ():
        log.debug("removable: target %s", dev)
        with w.element("disk", type="network", device="cdrom"):
            w.empty_element("driver", name="qemu", type="raw")
            w.empty_element("target", dev=dev)


def _write_interfaces(w: XmlTextWriter, config: P2vConfig, sysfs_net_dir: Union[str, Path], log) -> None:
    for iface in config.interfaces or ():
        network = map_interface_to_network(config, iface)
        mac = read_mac_address(iface, sysfs_net_dir=sysfs_net_dir)
        log.debug("interface %s -> network %s (mac=%s)", iface, network, mac or "-")

        with w.element("interface", type="network"):
            w.empty_element("source", network=network)
            w.empty_element("target", dev=iface)
            if mac is not None:
                w.empty_element("mac", address=mac)


def write_physical_xml(
    w: XmlTextWriter,
    config: P2vConfig,
    data_conns: Sequence[DataConn],
    *,
    host_cpu: Optional[str] = None,
    program_name: str = PROGRAM_NAME,
    sysfs_net_dir: Union[str, Path] = SYSFS_NET_DIR,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Drive ``w`` through the whole document, start to end."""
    log = Log.bind(logger or _log, guest=config.guestname)
    memkb = config.memory // 1024

    w.start_document()
    w.comment(f" {program_name} {__version__} ")
    w.comment(NOTE_COMMENT)

    with w.element("domain", type="physical"):
        w.single_element("name", config.guestname)

        with w.element("memory", unit="KiB"):
            w.text(memkb)
        with w.element("currentMemory", unit="KiB"):
            w.text(memkb)

        w.single_element("vcpu", config.vcpus)

        _write_cpu(w, config)
        _write_clock(w, config)

        with w.element("os"):
            with w.element("type", arch=host_cpu or host_arch()):
                w.text("hvm")

        _write_features(w, config)

        with w.element("devices"):
            _write_disks(w, config, data_conns, log)
            _write_removable(w, config, log)
            _write_interfaces(w, config, sysfs_net_dir, log)

    w.end_document()


def render_physical_xml(
    config: P2vConfig,
    data_conns: Sequence[DataConn],
    *,
    host_cpu: Optional[str] = None,
    program_name: str = PROGRAM_NAME,
    sysfs_net_dir: Union[str, Path] = SYSFS_NET_DIR,
    logger: Optional[logging.Logger] = None,
) -> str:
    """Same document as generate_physical_xml(), returned as a string."""
    w = XmlTextWriter.to_string()
    write_physical_xml(
        w,
        config,
        data_conns,
        host_cpu=host_cpu,
        program_name=program_name,
        sysfs_net_dir=sysfs_net_dir,
        logger=logger,
    )
    return w.getvalue()


def generate_physical_xml(
    config: P2vConfig,
    data_conns: Sequence[DataConn],
    filename: Union[str, Path],
    *,
    host_cpu: Optional[str] = None,
    program_name: str = PROGRAM_NAME,
    sysfs_net_dir: Union[str, Path] = SYSFS_NET_DIR,
    logger: Optional[logging.Logger] = None,
) -> Path:
    """
    Write the physical-machine descriptor to ``filename``.

    Raises XmlWriterError (a Fatal) on any writer failure. The file handle is
    closed on every path and a partially written file is removed.
    """
    path = Path(filename)
    lg = logger or _log
    Log.trace(lg, "writing %s", path)

    w = XmlTextWriter.open(path)
    try:
        with w:
            write_physical_xml(
                w,
                config,
                data_conns,
                host_cpu=host_cpu,
                program_name=program_name,
                sysfs_net_dir=sysfs_net_dir,
                logger=lg,
            )
    except Exception:
        _remove_partial(path, lg)
        raise

    return path


def _remove_partial(path: Path, logger) -> None:
    # Device nodes and FIFOs (-o /dev/stdout) are never ours to delete.
    if not path.is_file():
        return
    try:
        path.unlink()
    except OSError as e:
        Log.trace(logger, "could not remove partial %s: %s", path, e)


__all__ = [
    "PROGRAM_NAME",
    "NOTE_COMMENT",
    "host_arch",
    "write_physical_xml",
    "render_physical_xml",
    "generate_physical_xml",
]
