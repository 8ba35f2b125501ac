# SPDX-License-Identifier: MIT
"""Build file generators for vcxgen."""

from vcxgen.generators.generator import BaseGenerator, ExportResult, Generator
from vcxgen.generators.msvc import MsvcGenerator

__all__ = [
    "BaseGenerator",
    "ExportResult",
    "Generator",
    "MsvcGenerator",
]
