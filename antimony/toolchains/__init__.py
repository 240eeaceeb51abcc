# SPDX-License-Identifier: MIT
"""Toolchain definitions."""

from antimony.toolchains.swift import SwiftToolchain

__all__ = [
    "SwiftToolchain",
]
