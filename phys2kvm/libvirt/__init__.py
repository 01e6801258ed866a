# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""physical.xml generation."""

from .physical_xml import generate_physical_xml, render_physical_xml, write_physical_xml
from .xml_writer import XmlTextWriter

__all__ = [
    "XmlTextWriter",
    "generate_physical_xml",
    "render_physical_xml",
    "write_physical_xml",
]
