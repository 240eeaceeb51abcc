# SPDX-License-Identifier: MIT
"""
Antimony: a build-graph generator for BUILD.gn descriptions.

Antimony reads a tree of per-directory description files written in a
small declarative language, evaluates them into build targets, resolves
their dependency closure, and writes a Ninja build file.
"""

from __future__ import annotations

__version__ = "0.1.0"

# Re-export commonly used classes for convenient imports
# These imports must be after __version__ is defined but we use noqa to allow it
from antimony.core.errors import AntimonyError  # noqa: E402
from antimony.core.label import Label  # noqa: E402
from antimony.core.resolver import Resolver  # noqa: E402
from antimony.generators.ninja import NinjaGenerator  # noqa: E402

__all__ = [
    "AntimonyError",
    "Label",
    "NinjaGenerator",
    "Resolver",
    "__version__",
]
