# SPDX-License-Identifier: LGPL-3.0-or-later
import os
import sys
from pathlib import Path

import pytest

_THIS_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _THIS_DIR.parent

if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

os.environ.setdefault("PYTHONPATH", str(_REPO_ROOT))

from phys2kvm.p2v.config import Basis, CpuConfig, DataConn, P2vConfig, RtcConfig  # noqa: E402


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no system dependencies")


@pytest.fixture
def sysfs_net(tmp_path):
    """A fake /sys/class/net with eth0 (newline-terminated) and eth1 (bare)."""
    root = tmp_path / "net"
    (root / "eth0").mkdir(parents=True)
    (root / "eth0" / "address").write_text("52:54:00:12:34:56\n", encoding="utf-8")
    (root / "eth1").mkdir()
    (root / "eth1" / "address").write_text("52:54:00:ab:cd:ef", encoding="utf-8")
    return root


@pytest.fixture
def full_config():
    return P2vConfig(
        guestname="db01",
        memory=2097152,
        vcpus=4,
        cpu=CpuConfig(
            vendor="Intel",
            model="Skylake-Client",
            sockets=1,
            cores=4,
            threads=2,
            acpi=True,
            apic=True,
            pae=True,
        ),
        rtc=RtcConfig(basis=Basis.UTC, offset=0),
        disks=("/dev/sda", "/dev/sdb"),
        removable=("hdc",),
        interfaces=("eth0", "eth1"),
        network_map=("eth1:storage", "lan"),
    )


@pytest.fixture
def full_conns():
    return [DataConn(nbd_remote_port=50123), DataConn(nbd_remote_port=50124)]
