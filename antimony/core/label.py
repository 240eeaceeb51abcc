# SPDX-License-Identifier: MIT
"""Labels: the unique identifiers of build targets.

A label names a target by the absolute directory of the description file
that declares it plus the target's name within that file. Textual
references resolve to labels as follows:

- ``"path:name"`` splits at the last ``:``;
- ``"path/name"`` splits at the last ``/``;
- a bare ``"name"`` names target ``name`` in sub-directory ``name``.

A path beginning with ``//`` is rooted at the workspace root; an absolute
path is used as is; anything else is relative to the referencing
directory (the workspace root when none is given).

Examples:
    Label.resolve(":foo", root)       # root, "foo"
    Label.resolve("//a/b:c", root)    # root/a/b, "c"
    Label.resolve("//a/b", root)      # root/a, "b"
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass
from pathlib import Path

from antimony.core.errors import ResolutionError


@functools.total_ordering
@dataclass(frozen=True)
class Label:
    """A (directory, name) pair identifying one target.

    Labels order by directory path, then by name; the ordering exists for
    deterministic output only.
    """

    directory: Path
    name: str

    @classmethod
    def resolve(
        cls, reference: str, root: Path | str, directory: Path | str | None = None
    ) -> Label:
        """Resolve a textual reference into a Label.

        Args:
            reference: The label text, e.g. ``"//lib:core"`` or ``":core"``.
            root: The workspace root that ``//`` refers to.
            directory: Directory relative references are resolved against.
                Defaults to ``root``.

        Raises:
            ResolutionError: If the reference cannot be split into a
                path and a non-empty name.
        """
        if not reference:
            raise ResolutionError("empty label")

        if ":" in reference:
            path, _, name = reference.rpartition(":")
        elif reference.startswith("//"):
            head, _, name = reference[2:].rpartition("/")
            path = "//" + head
        elif "/" in reference:
            path, _, name = reference.rpartition("/")
            if not path:
                path = "/"
        else:
            path = name = reference

        if not name:
            raise ResolutionError(f"label '{reference}' does not name a target")
        if ":" in path:
            raise ResolutionError(f"label '{reference}' has more than one ':'")

        base = Path(directory) if directory is not None else Path(root)
        if path.startswith("//"):
            location = Path(root) / path[2:]
        elif os.path.isabs(path):
            location = Path(path)
        else:
            location = base / path
        return cls(Path(os.path.normpath(os.path.abspath(location))), name)

    def format(self, root: Path | str | None = None) -> str:
        """Render the label, relative to ``root`` when it lies beneath it."""
        if root is not None:
            try:
                relative = self.directory.relative_to(Path(root))
            except ValueError:
                pass
            else:
                path = relative.as_posix()
                return f"//{'' if path == '.' else path}:{self.name}"
        return f"{self.directory.as_posix()}:{self.name}"

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Label):
            return NotImplemented
        return (str(self.directory), self.name) < (str(other.directory), other.name)

    def __str__(self) -> str:
        return self.format()
