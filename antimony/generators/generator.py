# SPDX-License-Identifier: MIT
"""Generator protocol for build file generation.

Generators take a resolved BuildGraph and produce the files a build
executor runs (e.g., ``build.ninja``). Output is always written
atomically: readers see either the previous file or the complete new
one, never a partial write.
"""

from __future__ import annotations

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from antimony.core.errors import GenerateError

if TYPE_CHECKING:
    from antimony.core.graph import BuildGraph

logger = logging.getLogger(__name__)


def write_atomic(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` in one step.

    The text goes to a temporary file in the same directory, which is then
    renamed over the destination.

    Raises:
        OSError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temporary = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.replace(temporary, path)
    except BaseException:
        os.unlink(temporary)
        raise


@runtime_checkable
class Generator(Protocol):
    """Protocol for build file generators."""

    @property
    def name(self) -> str:
        """Generator name (e.g., 'ninja')."""
        ...

    def generate(self, graph: BuildGraph, output_dir: Path) -> Path:
        """Write the build file for a graph.

        Args:
            graph: The resolved targets to generate for.
            output_dir: Directory to write the build file to.

        Returns:
            Path of the written file.
        """
        ...


class BaseGenerator(ABC):
    """Base class for generators that write a single file.

    Subclasses render the graph to text; writing, error conversion and
    logging are shared.
    """

    def __init__(self, name: str, filename: str) -> None:
        """Initialize a generator.

        Args:
            name: Generator name.
            filename: Name of the file written into the output directory.
        """
        self._name = name
        self.filename = filename

    @property
    def name(self) -> str:
        return self._name

    @abstractmethod
    def render(self, graph: BuildGraph, output_dir: Path) -> str:
        """Produce the complete contents of the build file."""
        ...

    def generate(self, graph: BuildGraph, output_dir: Path) -> Path:
        """Render the graph and write it to ``output_dir/filename``.

        Raises:
            GenerateError: If the file cannot be written.
        """
        path = Path(output_dir) / self.filename
        text = self.render(graph, Path(output_dir))
        try:
            write_atomic(path, text)
        except OSError as e:
            raise GenerateError(f"cannot write '{path}': {e}") from e
        logger.info("Generated %s (%d targets)", path, len(graph))
        return path

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"
