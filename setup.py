# SPDX-License-Identifier: LGPL-3.0-or-later
from setuptools import setup, find_packages

setup(
    name="phys2kvm",
    version="0.1.0",
    description="Write the physical.xml machine descriptor consumed by virt-v2v",
    packages=find_packages(include=["phys2kvm", "phys2kvm.*"]),
    python_requires=">=3.9",
    install_requires=[l.strip() for l in open("requirements.txt", encoding="utf-8") if l.strip() and not l.startswith("#")],
    extras_require={"test": ["pytest>=7"]},
    entry_points={"console_scripts": ["phys2kvm=phys2kvm.__main__:main"]},
)
