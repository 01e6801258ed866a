# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Unit tests for the phys2kvm command line.
"""
import tempfile
import unittest
import xml.etree.ElementTree as ET
from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path

import yaml

from phys2kvm.cli.main import build_parser, main

MACHINE = {
    "guestname": "web01",
    "memory": 4194304,
    "vcpus": 2,
    "cpu": {"vendor": "Intel", "acpi": True, "apic": True},
    "rtc": {"basis": "utc", "offset": 3600},
    "disks": ["/dev/sda", "/dev/sdb"],
    "removable": ["hdc"],
    "interfaces": ["eth0"],
    "network_map": ["eth0:lan"],
    "nbd_ports": [50123, 50124],
}


class TestCLI(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.td = Path(self._td.name)
        self.cfg = self.td / "machine.yaml"
        self.cfg.write_text(yaml.safe_dump(MACHINE), encoding="utf-8")
        self.sysfs = self.td / "net"
        (self.sysfs / "eth0").mkdir(parents=True)
        (self.sysfs / "eth0" / "address").write_text("00:11:22:33:44:55\n", encoding="utf-8")

    def tearDown(self):
        self._td.cleanup()

    def _argv(self, *extra):
        return ["-q", "--config", str(self.cfg), "--host-cpu", "x86_64", "--sysfs-net-dir", str(self.sysfs), *extra]

    def test_output_required(self):
        with self.assertRaises(SystemExit):
            build_parser().parse_args(["--config", str(self.cfg)])

    def test_writes_file(self):
        out = self.td / "physical.xml"

        rc = main(self._argv("-o", str(out)))

        self.assertEqual(rc, 0)
        root = ET.parse(out).getroot()
        self.assertEqual(root.findtext("name"), "web01")
        self.assertEqual(root.findtext("memory"), "4096")
        self.assertEqual(root.find("clock").get("adjustment"), "3600")
        ports = [h.get("port") for h in root.findall("devices/disk/source/host")]
        self.assertEqual(ports, ["50123", "50124"])
        iface = root.find("devices/interface")
        self.assertEqual(iface.find("source").get("network"), "lan")
        self.assertEqual(iface.find("mac").get("address"), "00:11:22:33:44:55")

    def test_cli_ports_override_config(self):
        out = self.td / "physical.xml"

        rc = main(self._argv("--nbd-port", "1", "--nbd-port", "2", "-o", str(out)))

        self.assertEqual(rc, 0)
        ports = [h.get("port") for h in ET.parse(out).getroot().findall("devices/disk/source/host")]
        self.assertEqual(ports, ["1", "2"])

    def test_stdout(self):
        buf = StringIO()
        with redirect_stdout(buf):
            rc = main(self._argv("--stdout"))

        self.assertEqual(rc, 0)
        root = ET.fromstring(buf.getvalue().encode("utf-8"))
        self.assertEqual(root.find("os/type").get("arch"), "x86_64")

    def test_port_count_mismatch_is_config_error(self):
        out = self.td / "physical.xml"

        rc = main(self._argv("--nbd-port", "1", "-o", str(out)))

        self.assertEqual(rc, 2)
        self.assertFalse(out.exists())

    def test_missing_config_file(self):
        rc = main(["-q", "--config", str(self.td / "nope.yaml"), "--stdout"])
        self.assertEqual(rc, 2)

    def test_unwritable_output_is_writer_error(self):
        rc = main(self._argv("-o", str(self.td / "missing" / "physical.xml")))
        self.assertEqual(rc, 3)


if __name__ == "__main__":
    unittest.main()
