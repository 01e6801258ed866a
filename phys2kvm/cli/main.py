# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# phys2kvm/cli/main.py
from __future__ import annotations

import argparse
import sys
import traceback
from typing import List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel

from .. import __version__
from ..core.exceptions import Fatal, format_exception_for_cli
from ..core.logger import Log, c, is_tty
from ..core.logging_utils import log_step
from ..libvirt.physical_xml import generate_physical_xml, host_arch, render_physical_xml
from ..p2v.config import P2vConfig, check_data_conns, data_conns_from_ports, load_config
from ..p2v.network import SYSFS_NET_DIR

YAML_EXAMPLE = """\
  guestname: db01
  memory: 8589934592        # bytes
  vcpus: 4
  cpu: {vendor: Intel, model: Skylake-Client, sockets: 1, cores: 4, threads: 1,
        acpi: true, apic: true, pae: true}
  rtc: {basis: utc, offset: 0}
  disks: [/dev/sda, /dev/sdb]
  removable: [sr0]
  interfaces: [eth0, eth1]
  network_map: ["eth1:storage", "lan"]
  nbd_ports: [50123, 50124]
"""


class HelpFormatter(argparse.RawDescriptionHelpFormatter, argparse.ArgumentDefaultsHelpFormatter):
    """Raw description formatting plus default values in help."""


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="phys2kvm",
        description=c("phys2kvm: write physical.xml for virt-v2v", "green", ["bold"], enable=is_tty(sys.stdout)),
        formatter_class=HelpFormatter,
        epilog="Config example (YAML):\n" + YAML_EXAMPLE,
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    g = p.add_argument_group("Logging")
    g.add_argument("-v", "--verbose", action="count", default=0, help="More output (-vv debug, -vvv trace).")
    g.add_argument("-q", "--quiet", action="count", default=0, help="Less output (-qq errors only).")
    g.add_argument("--log-file", default=None, help="Also write logs to this file.")
    g.add_argument("--json-logs", action="store_true", help="Emit NDJSON log lines.")
    g.add_argument("--no-color", dest="color", action="store_false", help="Disable colored log output.")

    g = p.add_argument_group("Input")
    g.add_argument("--config", required=True, help="Machine description (.yaml/.yml/.json).")
    g.add_argument(
        "--nbd-port",
        dest="nbd_ports",
        action="append",
        type=int,
        default=None,
        metavar="PORT",
        help="Remote NBD port for each disk, in disk order (overrides `nbd_ports:`).",
    )
    g.add_argument("--host-cpu", default=None, help="Architecture for <os><type arch=...> (default: this host's).")
    g.add_argument("--sysfs-net-dir", default=str(SYSFS_NET_DIR), help="Where <iface>/address is read from.")

    g = p.add_argument_group("Output")
    out = g.add_mutually_exclusive_group(required=True)
    out.add_argument("-o", "--output", default=None, help="Write the document to this path.")
    out.add_argument("--stdout", action="store_true", help="Print the document instead of writing a file.")
    return p


def _summary(config: P2vConfig, output: str, host_cpu: str) -> str:
    lines: List[str] = [
        f"guest:      {config.guestname}",
        f"memory:     {config.memory // 1024} KiB, vcpus: {config.vcpus}",
        f"arch:       {host_cpu}",
        f"disks:      {len(config.disks)}",
        f"removable:  {len(config.removable or ())}",
        f"interfaces: {len(config.interfaces or ())}",
        f"output:     {output}",
    ]
    return "\n".join(lines)


def run(args: argparse.Namespace, logger) -> int:
    config, file_ports = load_config(args.config)
    data_conns = data_conns_from_ports(args.nbd_ports if args.nbd_ports is not None else file_ports)
    check_data_conns(config, data_conns)

    host_cpu = args.host_cpu or host_arch()
    Log.trace(logger, "config loaded", guest=config.guestname, disks=len(config.disks), arch=host_cpu)

    if args.stdout:
        sys.stdout.write(
            render_physical_xml(
                config,
                data_conns,
                host_cpu=host_cpu,
                sysfs_net_dir=args.sysfs_net_dir,
                logger=logger,
            )
        )
        Log.ok(logger, "physical.xml written to stdout", guest=config.guestname)
        return 0

    with log_step(logger, f"Writing {args.output}"):
        path = generate_physical_xml(
            config,
            data_conns,
            args.output,
            host_cpu=host_cpu,
            sysfs_net_dir=args.sysfs_net_dir,
            logger=logger,
        )

    if is_tty(sys.stdout):
        Console(stderr=False).print(Panel(_summary(config, str(path), host_cpu), title="physical.xml", expand=False))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = Log.setup(
        args.verbose,
        args.log_file,
        quiet=args.quiet,
        color=args.color,
        json_logs=args.json_logs,
    )

    try:
        return run(args, logger)
    except Fatal as e:
        Log.fail(logger, format_exception_for_cli(e, verbose=args.verbose))
        return e.code
    except KeyboardInterrupt:
        Log.warn(logger, "Interrupted by user (Ctrl+C).")
        return 130
    except Exception as e:
        logger.error("💥 UNHANDLED %s: %s", type(e).__name__, e)
        logger.debug(traceback.format_exc())
        return 1
