# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# phys2kvm/p2v/config.py

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

import yaml

from ..core.exceptions import ConfigError


class Basis(str, Enum):
    """What the physical machine's RTC counts from."""
    UNKNOWN = "unknown"
    UTC = "utc"
    LOCALTIME = "localtime"


@dataclass(frozen=True)
class CpuConfig:
    vendor: Optional[str] = None
    model: Optional[str] = None
    sockets: int = 0  # 0 => unknown
    cores: int = 0
    threads: int = 0
    acpi: bool = False
    apic: bool = False
    pae: bool = False

    @property
    def has_topology(self) -> bool:
        return bool(self.sockets or self.cores or self.threads)

    @property
    def is_known(self) -> bool:
        return self.vendor is not None or self.model is not None or self.has_topology


@dataclass(frozen=True)
class RtcConfig:
    basis: Basis = Basis.UNKNOWN
    offset: int = 0  # seconds, only meaningful for Basis.UTC


@dataclass(frozen=True)
class P2vConfig:
    """
    Snapshot of the physical machine, as collected on the source host.

    ``disks`` entries are either absolute device paths (the target name is
    then derived from the position) or literal target names such as "sda".
    ``removable`` and ``interfaces`` are None when not collected at all.
    """
    guestname: str
    memory: int  # bytes
    vcpus: int
    cpu: CpuConfig = field(default_factory=CpuConfig)
    rtc: RtcConfig = field(default_factory=RtcConfig)
    disks: Tuple[str, ...] = ()
    removable: Optional[Tuple[str, ...]] = None
    interfaces: Optional[Tuple[str, ...]] = None
    network_map: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class DataConn:
    """One NBD data connection, parallel to P2vConfig.disks."""
    nbd_remote_port: int


# --------------------------------------------------------------------------------------
# Building from plain data (YAML/JSON)
# --------------------------------------------------------------------------------------

def _int(data: Mapping[str, Any], key: str, default: Optional[int] = None) -> int:
    v = data.get(key)
    if v is None:
        if default is not None:
            return default
        raise ConfigError(msg=f"missing required field `{key}`", context={"field": key})
    if isinstance(v, bool):
        raise ConfigError(msg=f"`{key}` must be an integer, got: {v!r}", context={"field": key})
    try:
        return int(v)
    except (TypeError, ValueError) as e:
        raise ConfigError(msg=f"`{key}` must be an integer, got: {v!r}", cause=e, context={"field": key}) from e


def _bool(data: Mapping[str, Any], key: str, *, label: str) -> bool:
    v = data.get(key, False)
    if not isinstance(v, bool):
        raise ConfigError(msg=f"`{label}` must be true or false, got: {v!r}", context={"field": label})
    return v


def _opt_str(data: Mapping[str, Any], key: str, *, label: Optional[str] = None) -> Optional[str]:
    v = data.get(key)
    if v is None or isinstance(v, str):
        return v
    name = label or key
    raise ConfigError(msg=f"`{name}` must be a string, got: {v!r}", context={"field": name})


def _str_list(data: Mapping[str, Any], key: str) -> Optional[Tuple[str, ...]]:
    v = data.get(key)
    if v is None:
        return None
    if isinstance(v, str) or not isinstance(v, (list, tuple)):
        raise ConfigError(msg=f"`{key}` must be a list of strings, got: {v!r}", context={"field": key})
    for i, x in enumerate(v):
        if not isinstance(x, str):
            raise ConfigError(
                msg=f"`{key}[{i}]` must be a string, got: {x!r}",
                context={"field": key, "index": i},
            )
    return tuple(v)


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    v = data.get(key) or {}
    if not isinstance(v, Mapping):
        raise ConfigError(msg=f"`{key}` must be a mapping, got: {v!r}", context={"field": key})
    return v


def _basis(v: Any) -> Basis:
    if isinstance(v, Basis):
        return v
    try:
        return Basis(str(v or "unknown").strip().lower())
    except ValueError as e:
        raise ConfigError(
            msg=f"invalid rtc basis {v!r} (use unknown|utc|localtime)",
            cause=e,
            context={"field": "rtc.basis"},
        ) from e


def config_from_mapping(data: Mapping[str, Any]) -> P2vConfig:
    """Build a P2vConfig from a decoded YAML/JSON document."""
    if not isinstance(data, Mapping):
        raise ConfigError(msg="top-level config must be a mapping")

    name = _opt_str(data, "guestname")
    if not name:
        raise ConfigError(msg="missing required field `guestname`", context={"field": "guestname"})

    cpu = _section(data, "cpu")
    rtc = _section(data, "rtc")
    basis = _basis(rtc.get("basis"))

    return P2vConfig(
        guestname=name,
        memory=_int(data, "memory"),
        vcpus=_int(data, "vcpus"),
        cpu=CpuConfig(
            vendor=_opt_str(cpu, "vendor", label="cpu.vendor"),
            model=_opt_str(cpu, "model", label="cpu.model"),
            sockets=_int(cpu, "sockets", 0),
            cores=_int(cpu, "cores", 0),
            threads=_int(cpu, "threads", 0),
            acpi=_bool(cpu, "acpi", label="cpu.acpi"),
            apic=_bool(cpu, "apic", label="cpu.apic"),
            pae=_bool(cpu, "pae", label="cpu.pae"),
        ),
        # Only UTC carries an offset.
        rtc=RtcConfig(basis=basis, offset=_int(rtc, "offset", 0) if basis is Basis.UTC else 0),
        disks=_str_list(data, "disks") or (),
        removable=_str_list(data, "removable"),
        interfaces=_str_list(data, "interfaces"),
        network_map=_str_list(data, "network_map"),
    )


def data_conns_from_ports(ports: Sequence[Any]) -> List[DataConn]:
    out: List[DataConn] = []
    for i, p in enumerate(ports):
        try:
            out.append(DataConn(nbd_remote_port=int(p)))
        except (TypeError, ValueError) as e:
            raise ConfigError(msg=f"invalid NBD port {p!r}", cause=e, context={"index": i}) from e
    return out


def check_data_conns(config: P2vConfig, data_conns: Sequence[DataConn]) -> None:
    """Disks and data connections are index-parallel; refuse anything else."""
    if len(config.disks) != len(data_conns):
        raise ConfigError(
            msg=f"{len(config.disks)} disk(s) but {len(data_conns)} NBD port(s); they must match one-to-one",
            context={"disks": len(config.disks), "ports": len(data_conns)},
        )


def _read_document(path: Path) -> Any:
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(raw)
    return yaml.safe_load(raw) or {}


def load_config(path: Union[str, Path]) -> Tuple[P2vConfig, List[Any]]:
    """
    Load a machine description from YAML (.yaml/.yml) or JSON (.json).

    Returns the typed config and the raw ``nbd_ports`` list (empty when the
    file does not carry one); see data_conns_from_ports().
    """
    p = Path(path).expanduser()
    if not p.is_file():
        raise ConfigError(msg=f"config file not found: {p}", context={"path": str(p)})
    if p.suffix.lower() not in (".json", ".yaml", ".yml"):
        raise ConfigError(msg=f"config must be .json/.yaml/.yml, got: {p}", context={"path": str(p)})

    try:
        data = _read_document(p)
    except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(msg=f"cannot parse config {p}: {e}", cause=e, context={"path": str(p)}) from e

    config = config_from_mapping(data)
    ports = data.get("nbd_ports") or []
    if not isinstance(ports, list):
        raise ConfigError(msg=f"`nbd_ports` must be a list, got: {ports!r}", context={"path": str(p)})
    return config, list(ports)
