# SPDX-License-Identifier: MIT
"""Swift toolchain implementation.

Plans Swift targets as whole-module builds:
- emit-module: writes ``<module>.swiftmodule`` for libraries, so that
  dependents can import them
- compile: compiles all sources into one object file
- link: produces the executable, shared library or static archive
"""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING

from antimony.core.errors import GenerateError
from antimony.core.target import (
    DynamicLibraryTarget,
    ExecutableTarget,
    StaticLibraryTarget,
)
from antimony.tools.toolchain import ActionKind, BaseToolchain, BuildAction

if TYPE_CHECKING:
    from antimony.core.target import Module

LIBRARY_SUFFIXES = (".a", ".lib", ".so", ".dylib", ".dll")


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise GenerateError(f"invalid compiler invocation: {message}")


def _parser(program: str) -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog=program, add_help=False, allow_abbrev=False)
    parser.add_argument("-module-name", dest="module_name", required=True)
    parser.add_argument("-emit-executable", action="store_true")
    parser.add_argument("-emit-library", action="store_true")
    parser.add_argument("-static", action="store_true")
    parser.add_argument("-o", dest="output", required=True)
    parser.add_argument("-I", dest="includes", action="append", default=[])
    parser.add_argument("-D", dest="defines", action="append", default=[])
    parser.add_argument("-l", dest="libs", action="append", default=[])
    return parser


class SwiftToolchain(BaseToolchain):
    """Swift toolchain using the ``swiftc`` driver.

    Example:
        toolchain = SwiftToolchain()
        for action in toolchain.actions(target, graph):
            print(action.kind, action.command_line)
    """

    def __init__(self, program: str | None = None) -> None:
        if program is None:
            program = "swiftc.exe" if sys.platform.startswith("win") else "swiftc"
        super().__init__("swift", program)

    def mode(self, target: Module) -> list[str]:
        if isinstance(target, ExecutableTarget):
            return ["-emit-executable"]
        if isinstance(target, DynamicLibraryTarget):
            return ["-emit-library"]
        if isinstance(target, StaticLibraryTarget):
            return ["-emit-library", "-static"]
        raise GenerateError(f"cannot build '{target.target_type}' targets with swift")

    def plan(self, arguments: list[str], objdir: str) -> list[BuildAction]:
        program, *rest = arguments
        passthrough: list[str] = []
        if "--" in rest:
            split = rest.index("--")
            rest, passthrough = rest[:split], rest[split + 1 :]
        options, extras = _parser(program).parse_known_args(rest)

        sources: list[str] = []
        libraries: list[str] = []
        flags: list[str] = []
        for argument in extras:
            if argument.endswith(".swift"):
                sources.append(argument)
            elif argument.endswith(LIBRARY_SUFFIXES) and not argument.startswith("-"):
                libraries.append(argument)
            else:
                flags.append(argument)

        name = options.module_name
        library = options.emit_library
        module = f"{objdir}/swift/{name}.swiftmodule"
        object_file = f"{objdir}/{name}.o"

        common = ["-module-name", name]
        if library:
            common.append("-parse-as-library")
        for include in options.includes:
            common += ["-I", include]
        for define in options.defines:
            common += ["-D", define]
        common += flags
        common += passthrough

        actions: list[BuildAction] = []
        if library:
            actions.append(
                BuildAction(
                    kind=ActionKind.EMIT_MODULE,
                    description=f"Emitting module {name}",
                    inputs=tuple(sources),
                    outputs=(module,),
                    command=(
                        program,
                        "-emit-module",
                        "-emit-module-path",
                        module,
                        *common,
                        *sources,
                    ),
                    implicit_inputs=tuple(libraries),
                )
            )

        actions.append(
            BuildAction(
                kind=ActionKind.COMPILE,
                description=f"Compiling {name}",
                inputs=tuple(sources),
                outputs=(object_file,),
                command=(
                    program, "-c", "-wmo", *common, *sources, "-o", object_file
                ),
                implicit_inputs=tuple(libraries),
            )
        )

        if options.static:
            link = (
                program, "-emit-library", "-static", object_file, "-o", options.output
            )
            inputs: tuple[str, ...] = (object_file,)
            implicit = (module, *libraries)
        else:
            mode = "-emit-library" if library else "-emit-executable"
            link = (
                program,
                mode,
                object_file,
                *libraries,
                *(f"-l{lib}" for lib in options.libs),
                "-o",
                options.output,
            )
            inputs = (object_file, *libraries)
            implicit = (module,) if library else ()

        actions.append(
            BuildAction(
                kind=ActionKind.LINK,
                description=f"Linking {options.output}",
                inputs=inputs,
                outputs=(options.output,),
                command=link,
                implicit_inputs=implicit,
            )
        )
        return actions
