# SPDX-License-Identifier: MIT
"""Tests for antimony.toolchains.swift."""

from pathlib import Path

import pytest

from antimony.core.errors import GenerateError
from antimony.core.graph import BuildGraph
from antimony.core.label import Label
from antimony.core.target import (
    Dependencies,
    DynamicLibraryTarget,
    ExecutableTarget,
    GroupTarget,
    StaticLibraryTarget,
)
from antimony.tools.toolchain import ActionKind, BuildAction, Toolchain
from antimony.toolchains.swift import SwiftToolchain

ROOT = Path("/ws")


def module(kind, directory, name, *deps, extension, **attributes):
    return kind(
        label=Label(ROOT / directory, name),
        dependencies=Dependencies(private=deps),
        module_name=name,
        output_name=name,
        output_extension=extension,
        sources=(f"/ws/{directory}/{name}.swift",),
        **attributes,
    )


def graph_of(*targets):
    return BuildGraph(ROOT, targets={target.label: target for target in targets})


@pytest.fixture
def graph():
    return graph_of(
        module(
            ExecutableTarget,
            "app",
            "app",
            "//lib:lib",
            extension="",
            swiftflags=("-O",),
        ),
        module(StaticLibraryTarget, "lib", "lib", extension="a"),
    )


def target(graph, directory, name):
    return graph[Label(ROOT / directory, name)]


class TestSwiftToolchain:
    def test_creation(self):
        """Test basic toolchain creation."""
        toolchain = SwiftToolchain("swiftc")
        assert toolchain.name == "swift"
        assert toolchain.program == "swiftc"
        assert isinstance(toolchain, Toolchain)

    def test_default_program(self):
        assert SwiftToolchain().program in ("swiftc", "swiftc.exe")

    def test_mode(self):
        """Test the mode flags of each module kind."""
        toolchain = SwiftToolchain("swiftc")
        lib = module(StaticLibraryTarget, "lib", "lib", extension="a")
        dylib = module(DynamicLibraryTarget, "lib", "lib", extension="so")
        exe = module(ExecutableTarget, "app", "app", extension="")
        assert toolchain.mode(lib) == ["-emit-library", "-static"]
        assert toolchain.mode(dylib) == ["-emit-library"]
        assert toolchain.mode(exe) == ["-emit-executable"]

    def test_layout(self, graph):
        """Test object directory and output paths."""
        toolchain = SwiftToolchain("swiftc")
        lib = target(graph, "lib", "lib")
        app = target(graph, "app", "app")
        assert toolchain.token(lib, ROOT) == "lib/lib"
        assert toolchain.objdir(lib, ROOT) == "lib/lib.dir"
        assert toolchain.output(lib, ROOT) == "lib/lib.a"
        assert toolchain.output(app, ROOT) == "bin/app"
        assert toolchain.module_dir(lib, ROOT) == "lib/lib.dir/swift"

    def test_token_at_root(self):
        """Test the token of a target in the workspace root."""
        group = GroupTarget(label=Label(ROOT, "all"))
        assert SwiftToolchain.token(group, ROOT) == "all"


class TestInvocation:
    def test_executable(self, graph):
        """Test the invocation of an executable with one dependency."""
        toolchain = SwiftToolchain("swiftc")
        arguments = toolchain.invocation(target(graph, "app", "app"), graph)
        assert arguments == [
            "swiftc",
            "-module-name",
            "app",
            "-emit-executable",
            "-o",
            "bin/app",
            "-I",
            "lib/lib.dir/swift",
            "lib/lib.a",
            "/ws/app/app.swift",
            "--",
            "-O",
        ]

    def test_transitive_dependencies(self):
        """Test include paths and link order for indirect dependencies."""
        graph = graph_of(
            module(ExecutableTarget, "app", "app", "//mid:mid", extension=""),
            module(StaticLibraryTarget, "mid", "mid", "//base:base", extension="a"),
            module(StaticLibraryTarget, "base", "base", extension="a"),
        )
        arguments = SwiftToolchain("swiftc").invocation(
            target(graph, "app", "app"), graph
        )
        includes = [
            arguments[i + 1] for i, arg in enumerate(arguments) if arg == "-I"
        ]
        assert includes == ["base/base.dir/swift", "mid/mid.dir/swift"]
        assert arguments.index("mid/mid.a") < arguments.index("base/base.a")

    def test_defines_and_libs(self):
        """Test that defines and libs become -D and -l options."""
        lib = module(
            DynamicLibraryTarget,
            "net",
            "net",
            extension="so",
            defines=("DEBUG",),
            libs=("z",),
        )
        arguments = SwiftToolchain("swiftc").invocation(lib, graph_of(lib))
        assert arguments[arguments.index("-D") + 1] == "DEBUG"
        assert arguments[arguments.index("-l") + 1] == "z"
        assert "--" not in arguments

    def test_swiftflags_follow_separator(self):
        """Test that swiftflags are placed after a -- separator."""
        app = module(
            ExecutableTarget, "app", "app", extension="", swiftflags=("-lz", "-O")
        )
        arguments = SwiftToolchain("swiftc").invocation(app, graph_of(app))
        assert arguments[-3:] == ["--", "-lz", "-O"]
        assert "-l" not in arguments


class TestPlan:
    def test_executable_actions(self, graph):
        """Test compiling and linking an executable."""
        actions = SwiftToolchain("swiftc").actions(target(graph, "app", "app"), graph)
        assert [a.kind for a in actions] == [ActionKind.COMPILE, ActionKind.LINK]

        compile_, link = actions
        assert compile_.inputs == ("/ws/app/app.swift",)
        assert compile_.outputs == ("app/app.dir/app.o",)
        assert compile_.implicit_inputs == ("lib/lib.a",)
        assert compile_.command == (
            "swiftc",
            "-c",
            "-wmo",
            "-module-name",
            "app",
            "-I",
            "lib/lib.dir/swift",
            "-O",
            "/ws/app/app.swift",
            "-o",
            "app/app.dir/app.o",
        )
        assert link.inputs == ("app/app.dir/app.o", "lib/lib.a")
        assert link.outputs == ("bin/app",)
        assert link.command == (
            "swiftc",
            "-emit-executable",
            "app/app.dir/app.o",
            "lib/lib.a",
            "-o",
            "bin/app",
        )

    def test_static_library_actions(self, graph):
        """Test that a static library emits a module and an archive."""
        actions = SwiftToolchain("swiftc").actions(target(graph, "lib", "lib"), graph)
        assert [a.kind for a in actions] == [
            ActionKind.EMIT_MODULE,
            ActionKind.COMPILE,
            ActionKind.LINK,
        ]
        emit, compile_, link = actions
        assert emit.outputs == ("lib/lib.dir/swift/lib.swiftmodule",)
        assert "-parse-as-library" in compile_.command
        assert link.command == (
            "swiftc",
            "-emit-library",
            "-static",
            "lib/lib.dir/lib.o",
            "-o",
            "lib/lib.a",
        )
        assert link.implicit_inputs == ("lib/lib.dir/swift/lib.swiftmodule",)

    def test_shared_library_links_system_libraries(self):
        """Test that a shared library links its system libraries."""
        lib = module(
            DynamicLibraryTarget, "net", "net", extension="so", libs=("z",)
        )
        actions = SwiftToolchain("swiftc").actions(lib, graph_of(lib))
        link = actions[-1]
        assert link.command[:3] == ("swiftc", "-emit-library", "net/net.dir/net.o")
        assert "-lz" in link.command
        assert link.outputs == ("bin/net.so",)

    def test_user_flags_are_not_parsed_as_options(self):
        """Test that swiftflags resembling -o, -l, -I or -D pass through intact."""
        flags = ("-lto=llvm-thin", "-output-file-map", "ofm.json", "-Ionly", "-Dx")
        app = module(ExecutableTarget, "app", "app", extension="", swiftflags=flags)
        compile_, link = SwiftToolchain("swiftc").actions(app, graph_of(app))

        start = compile_.command.index("-lto=llvm-thin")
        assert compile_.command[start : start + len(flags)] == flags
        assert compile_.command[-2:] == ("-o", "app/app.dir/app.o")
        assert compile_.inputs == ("/ws/app/app.swift",)
        assert link.outputs == ("bin/app",)
        assert link.command == (
            "swiftc",
            "-emit-executable",
            "app/app.dir/app.o",
            "-o",
            "bin/app",
        )

    def test_separator_without_user_flags(self):
        """Test that a trailing separator leaves nothing to pass through."""
        actions = SwiftToolchain("swiftc").plan(
            ["swiftc", "-module-name", "m", "-o", "bin/m", "m.swift", "--"], "m.dir"
        )
        assert actions[0].command == (
            "swiftc", "-c", "-wmo", "-module-name", "m", "m.swift", "-o", "m.dir/m.o"
        )

    def test_group_has_no_actions(self):
        """Test that groups need no build actions."""
        group = GroupTarget(label=Label(ROOT, "all"))
        assert SwiftToolchain("swiftc").actions(group, graph_of(group)) == []

    def test_invalid_invocation(self):
        """Test that an invocation without required options is rejected."""
        with pytest.raises(GenerateError, match="invalid compiler invocation"):
            SwiftToolchain("swiftc").plan(["swiftc", "main.swift"], "obj")


class TestBuildAction:
    def test_command_line_quotes_spaces(self):
        """Test quoting arguments that contain spaces."""
        action = BuildAction(
            kind=ActionKind.OTHER,
            description="copy",
            inputs=("a b",),
            outputs=("c",),
            command=("cp", "a b", "c"),
        )
        assert action.command_line == 'cp "a b" c'
