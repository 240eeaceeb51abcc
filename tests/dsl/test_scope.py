# SPDX-License-Identifier: MIT
"""Tests for antimony.dsl.scope and antimony.dsl.value."""

from pathlib import Path

from antimony import __version__
from antimony.dsl.scope import Scope, Variable, default_variables, host_os
from antimony.dsl.value import (
    FALSE,
    NIL,
    TRUE,
    BooleanValue,
    IntegerValue,
    ListValue,
    ScopeValue,
    StringValue,
    boolean,
)

ROOT = Path("/workspace")


class TestScope:
    def test_root_is_seeded(self):
        """Test the default variables of a root scope."""
        scope = Scope.root(ROOT)
        assert scope[Variable.ANTIMONY_VERSION] == StringValue(__version__)
        assert scope[Variable.HOST_OS] == StringValue(host_os())
        for variable, value in default_variables():
            assert scope.local(variable) == value

    def test_root_overrides(self):
        """Test overriding default variables."""
        scope = Scope.root(ROOT, target_os=StringValue("linux"))
        assert scope["target_os"] == StringValue("linux")

    def test_lookup_walks_parents(self):
        """Test that lookup finds bindings in enclosing scopes."""
        root = Scope(ROOT)
        root["x"] = IntegerValue(1)
        grandchild = root.child().child()
        assert grandchild.lookup("x") == IntegerValue(1)
        assert grandchild.local("x") is None
        assert "x" in grandchild

    def test_assignment_binds_locally(self):
        """Test that setting a name never touches the parent."""
        root = Scope(ROOT)
        root["x"] = IntegerValue(1)
        child = root.child()
        child["x"] = IntegerValue(2)
        assert child["x"] == IntegerValue(2)
        assert root["x"] == IntegerValue(1)
        assert child.bindings() == {"x": IntegerValue(2)}

    def test_variable_enum_keys(self):
        """Test indexing a scope with Variable members."""
        scope = Scope(ROOT)
        scope[Variable.SOURCES] = ListValue()
        assert scope.local("sources") == ListValue()

    def test_children_share_collector(self):
        """Test that child scopes share the parent's collector."""
        root = Scope(ROOT)
        child = root.child()
        assert child.collector is root.collector
        assert child.child().collector is root.collector

    def test_children_inherit_flags(self):
        """Test that importing and configuring pass to children."""
        root = Scope(ROOT, importing=True)
        child = root.child()
        assert child.importing
        assert not child.configuring
        configuring = child.child(configuring=True)
        assert configuring.configuring
        assert configuring.importing

    def test_child_directory(self):
        root = Scope(ROOT)
        assert root.child().directory == ROOT
        assert root.child(ROOT / "sub").directory == ROOT / "sub"

    def test_within_template(self):
        """Test that descendants of a template invocation know they are in it."""
        root = Scope(ROOT)
        invocation = root.child()
        invocation.invoking = "tool"
        nested = invocation.child().child()
        assert nested.within("tool")
        assert not nested.within("other")
        assert not root.within("tool")

    def test_missing_name(self):
        """Test that indexing an unbound name raises KeyError."""
        scope = Scope(ROOT)
        assert scope.lookup("nope") is None
        assert "nope" not in scope


class TestValues:
    def test_accessors(self):
        assert IntegerValue(3).integer == 3
        assert IntegerValue(3).string is None
        assert StringValue("a").string == "a"
        assert TRUE.boolean is True
        assert NIL.list is None

    def test_strings(self):
        assert ListValue.of_strings(["a", "b"]).strings() == ["a", "b"]
        assert ListValue((StringValue("a"), IntegerValue(1))).strings() is None
        assert StringValue("a").strings() is None

    def test_structural_equality(self):
        assert ListValue.of_strings(["a"]) == ListValue((StringValue("a"),))
        assert BooleanValue(True) == TRUE
        assert IntegerValue(1) != StringValue("1")

    def test_scope_values_compare_by_identity(self):
        """Test that scope values are equal only to themselves."""
        scope = Scope(ROOT)
        assert ScopeValue(scope) == ScopeValue(scope)
        assert ScopeValue(scope) != ScopeValue(Scope(ROOT))

    def test_boolean_singletons(self):
        """Test that booleans are the TRUE and FALSE singletons."""
        assert boolean(True) is TRUE
        assert boolean(False) is FALSE

    def test_str(self):
        assert str(StringValue('say "hi"')) == '"say \\"hi\\""'
        assert str(ListValue.of_strings(["a"])) == '["a"]'
        assert str(NIL) == "nil"
        assert str(FALSE) == "false"
