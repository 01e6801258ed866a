# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Unit tests for machine-description loading (YAML/JSON -> P2vConfig).
"""
import json
import tempfile
import unittest
from pathlib import Path

import yaml

from phys2kvm.core.exceptions import ConfigError
from phys2kvm.p2v.config import (
    Basis,
    CpuConfig,
    DataConn,
    P2vConfig,
    check_data_conns,
    config_from_mapping,
    data_conns_from_ports,
    load_config,
)


class TestConfigFromMapping(unittest.TestCase):
    def test_minimal(self):
        cfg = config_from_mapping({"guestname": "g", "memory": 1024, "vcpus": 1})

        self.assertEqual(cfg.guestname, "g")
        self.assertEqual(cfg.cpu, CpuConfig())
        self.assertIs(cfg.rtc.basis, Basis.UNKNOWN)
        self.assertEqual(cfg.disks, ())
        self.assertIsNone(cfg.removable)
        self.assertIsNone(cfg.interfaces)
        self.assertIsNone(cfg.network_map)

    def test_full(self):
        cfg = config_from_mapping(
            {
                "guestname": "db01",
                "memory": "2097152",
                "vcpus": 2,
                "cpu": {"vendor": "AMD", "sockets": 2, "acpi": True},
                "rtc": {"basis": "UTC", "offset": -3600},
                "disks": ["/dev/sda", "vdb"],
                "removable": ["hdc"],
                "interfaces": ["eth0"],
                "network_map": ["lan"],
            }
        )

        self.assertEqual(cfg.memory, 2097152)
        self.assertEqual(cfg.cpu.vendor, "AMD")
        self.assertIsNone(cfg.cpu.model)
        self.assertEqual(cfg.cpu.sockets, 2)
        self.assertTrue(cfg.cpu.acpi)
        self.assertFalse(cfg.cpu.pae)
        self.assertIs(cfg.rtc.basis, Basis.UTC)
        self.assertEqual(cfg.rtc.offset, -3600)
        self.assertEqual(cfg.disks, ("/dev/sda", "vdb"))
        self.assertEqual(cfg.network_map, ("lan",))

    def test_localtime_drops_offset(self):
        cfg = config_from_mapping(
            {"guestname": "g", "memory": 0, "vcpus": 1, "rtc": {"basis": "localtime", "offset": 7200}}
        )
        self.assertIs(cfg.rtc.basis, Basis.LOCALTIME)
        self.assertEqual(cfg.rtc.offset, 0)

    def test_invalid_basis(self):
        with self.assertRaises(ConfigError) as cm:
            config_from_mapping({"guestname": "g", "memory": 0, "vcpus": 1, "rtc": {"basis": "gps"}})
        self.assertEqual(cm.exception.code, 2)
        self.assertEqual(cm.exception.context["field"], "rtc.basis")

    def test_missing_guestname(self):
        with self.assertRaises(ConfigError):
            config_from_mapping({"memory": 0, "vcpus": 1})

    def test_missing_memory(self):
        with self.assertRaises(ConfigError):
            config_from_mapping({"guestname": "g", "vcpus": 1})

    def test_disks_must_be_list(self):
        with self.assertRaises(ConfigError):
            config_from_mapping({"guestname": "g", "memory": 0, "vcpus": 1, "disks": "/dev/sda"})

    def test_feature_flags_must_be_booleans(self):
        for flag in ("acpi", "apic", "pae"):
            for bad in ("false", "true", 1, 0):
                with self.subTest(flag=flag, value=bad):
                    with self.assertRaises(ConfigError) as cm:
                        config_from_mapping({"guestname": "g", "memory": 0, "vcpus": 1, "cpu": {flag: bad}})
                    self.assertEqual(cm.exception.context["field"], f"cpu.{flag}")
                    self.assertEqual(cm.exception.code, 2)

    def test_quoted_yaml_false_is_rejected(self):
        doc = yaml.safe_load('guestname: g\nmemory: 0\nvcpus: 1\ncpu: {acpi: "false"}\n')
        with self.assertRaises(ConfigError):
            config_from_mapping(doc)

    def test_feature_flags_default_false(self):
        cfg = config_from_mapping({"guestname": "g", "memory": 0, "vcpus": 1, "cpu": {"apic": True}})
        self.assertFalse(cfg.cpu.acpi)
        self.assertTrue(cfg.cpu.apic)
        self.assertFalse(cfg.cpu.pae)

    def test_list_entries_must_be_strings(self):
        for key in ("disks", "removable", "interfaces", "network_map"):
            for bad in (None, 7, {"name": "sda"}):
                with self.subTest(key=key, value=bad):
                    with self.assertRaises(ConfigError) as cm:
                        config_from_mapping({"guestname": "g", "memory": 0, "vcpus": 1, key: ["ok", bad]})
                    self.assertEqual(cm.exception.context, {"field": key, "index": 1})

    def test_null_disk_from_yaml_is_rejected(self):
        doc = yaml.safe_load("guestname: g\nmemory: 0\nvcpus: 1\ndisks: [~]\n")
        with self.assertRaises(ConfigError) as cm:
            config_from_mapping(doc)
        self.assertEqual(cm.exception.context["index"], 0)

    def test_cpu_strings_must_be_strings(self):
        with self.assertRaises(ConfigError) as cm:
            config_from_mapping({"guestname": "g", "memory": 0, "vcpus": 1, "cpu": {"vendor": 123}})
        self.assertEqual(cm.exception.context["field"], "cpu.vendor")

        with self.assertRaises(ConfigError) as cm:
            config_from_mapping({"guestname": "g", "memory": 0, "vcpus": 1, "cpu": {"model": ["Skylake"]}})
        self.assertEqual(cm.exception.context["field"], "cpu.model")

    def test_guestname_must_be_string(self):
        with self.assertRaises(ConfigError) as cm:
            config_from_mapping({"guestname": 1234, "memory": 0, "vcpus": 1})
        self.assertEqual(cm.exception.context["field"], "guestname")

    def test_config_is_frozen(self):
        cfg = P2vConfig(guestname="g", memory=0, vcpus=1)
        with self.assertRaises(Exception):
            cfg.memory = 5  # type: ignore[misc]


class TestDataConns(unittest.TestCase):
    def test_from_ports(self):
        self.assertEqual(data_conns_from_ports([1, "2"]), [DataConn(1), DataConn(2)])

    def test_bad_port(self):
        with self.assertRaises(ConfigError):
            data_conns_from_ports(["nbd"])

    def test_count_mismatch(self):
        cfg = P2vConfig(guestname="g", memory=0, vcpus=1, disks=("/dev/sda", "/dev/sdb"))
        with self.assertRaises(ConfigError):
            check_data_conns(cfg, [DataConn(1)])
        check_data_conns(cfg, [DataConn(1), DataConn(2)])


class TestLoadConfig(unittest.TestCase):
    def test_yaml(self):
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "machine.yaml"
            p.write_text(
                yaml.safe_dump(
                    {
                        "guestname": "web",
                        "memory": 4096,
                        "vcpus": 2,
                        "disks": ["/dev/sda"],
                        "nbd_ports": [10809],
                    }
                ),
                encoding="utf-8",
            )

            cfg, ports = load_config(p)

            self.assertEqual(cfg.guestname, "web")
            self.assertEqual(ports, [10809])

    def test_json(self):
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "machine.json"
            p.write_text(json.dumps({"guestname": "web", "memory": 1, "vcpus": 1}), encoding="utf-8")

            cfg, ports = load_config(p)

            self.assertEqual(cfg.vcpus, 1)
            self.assertEqual(ports, [])

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            load_config("/nonexistent/machine.yaml")

    def test_bad_extension(self):
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "machine.ini"
            p.write_text("guestname=x", encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_config(p)

    def test_unparseable_yaml(self):
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "machine.yaml"
            p.write_text("guestname: [unterminated\n", encoding="utf-8")
            with self.assertRaises(ConfigError) as cm:
                load_config(p)
            self.assertIsNotNone(cm.exception.cause)


if __name__ == "__main__":
    unittest.main()
