# SPDX-License-Identifier: MIT
"""Build file generators for antimony."""

from antimony.generators.generator import BaseGenerator, Generator
from antimony.generators.ninja import NinjaGenerator, NinjaWriter

__all__ = [
    "BaseGenerator",
    "Generator",
    "NinjaGenerator",
    "NinjaWriter",
]
