"""Tests for the pattern-language parser."""

from __future__ import annotations

import pytest

from peephole.errors import PatternSyntaxError
from peephole.parser import parse_patterns
from peephole.tree import NodeKind, match_elements, replacement_statements, rules_of


def _kinds(nodes):
    return [node.kind for node in nodes]


def _single_rule(source: str):
    (rule,) = rules_of(parse_patterns(source))
    return rule


class TestDeclarations:
    def test_declaration_layout(self):
        tree = parse_patterns("int_oper = { iadd | isub };")
        (declaration,) = tree.children
        assert declaration.kind == NodeKind.DECLARATION
        assert declaration.children[0].text == "int_oper"
        instruction_set = declaration.children[1]
        assert instruction_set.kind == NodeKind.INSTRUCTION_SET
        assert [c.text for c in instruction_set.children] == ["iadd", "isub"]

    def test_declarations_precede_rules(self):
        tree = parse_patterns(
            """
            a = { iadd };
            b = { isub | imul };
            rule r { iadd; } --> { }
            """
        )
        assert _kinds(tree.children) == [
            NodeKind.DECLARATION,
            NodeKind.DECLARATION,
            NodeKind.RULE,
        ]

    def test_comments_are_ignored(self):
        tree = parse_patterns("// loads\na = { iload }; // trailing\n")
        assert len(tree.children) == 1


class TestMatchSide:
    def test_named_instruction_with_arguments(self):
        rule = _single_rule("rule r { x: iload n; } --> { }")
        (element,) = match_elements(rule)
        assert element.kind == NodeKind.NAMED_INSTRUCTION
        name, target, argument = element.children
        assert name.text == "x"
        assert target.kind == NodeKind.INSTRUCTION
        assert target.children[0].text == "iload"
        assert argument.kind == NodeKind.VARIABLE
        assert argument.text == "n"

    def test_unnamed_instruction_with_inline_set(self):
        rule = _single_rule("rule r { { iload | aload } k; } --> { }")
        (element,) = match_elements(rule)
        assert element.kind == NodeKind.UNNAMED_INSTRUCTION
        target, argument = element.children
        assert target.kind == NodeKind.INSTRUCTION_SET
        assert [c.text for c in target.children] == ["iload", "aload"]
        assert argument.text == "k"

    def test_instruction_count_marker(self):
        rule = _single_rule("rule r { dup; !end; } --> { }")
        assert _kinds(match_elements(rule)) == [
            NodeKind.UNNAMED_INSTRUCTION,
            NodeKind.INSTRUCTION_COUNT,
        ]

    def test_rule_name_is_first_child(self):
        rule = _single_rule("rule drop_nop { nop; } --> { }")
        assert rule.children[0].text == "drop_nop"

    def test_parent_links_point_at_enclosing_instruction(self):
        rule = _single_rule("rule r { x: iload n; } --> { }")
        (element,) = match_elements(rule)
        target = element.children[1]
        assert target.parent is element
        assert element.parent is rule


class TestReplacementSide:
    def test_bare_matched_name_is_reuse(self):
        rule = _single_rule("rule R { x: int_oper; } --> { x; }")
        (statement,) = replacement_statements(rule)
        assert statement.kind == NodeKind.STATEMENT_VARIABLE
        assert statement.children[0].text == "x"

    def test_bare_unknown_name_is_construct(self):
        rule = _single_rule("rule r { x: iload n; } --> { iadd; }")
        (statement,) = replacement_statements(rule)
        assert statement.kind == NodeKind.STATEMENT_INSTRUCTION
        assert [c.text for c in statement.children] == ["iadd"]

    def test_construct_with_arguments(self):
        rule = _single_rule("rule r { iload a; iload b; } --> { iinc a, 1; }")
        (statement,) = replacement_statements(rule)
        opcode, first, second = statement.children
        assert opcode.text == "iinc"
        assert first.kind == NodeKind.VARIABLE
        assert second.kind == NodeKind.INT
        assert second.text == "1"

    def test_switch_and_cases(self):
        rule = _single_rule(
            """
            rule r { op: { iadd | isub }; } --> {
                switch op {
                    case iadd: isub;
                    case isub: iadd;
                }
            }
            """
        )
        (switch,) = replacement_statements(rule)
        assert switch.kind == NodeKind.STATEMENT_SWITCH
        assert switch.children[0].text == "op"
        cases = switch.children[1:]
        assert _kinds(cases) == [NodeKind.STATEMENT_CASE, NodeKind.STATEMENT_CASE]
        assert cases[0].children[0].text == "iadd"
        assert cases[0].children[1].kind == NodeKind.STATEMENT_INSTRUCTION

    def test_if_else_chain(self):
        rule = _single_rule(
            """
            rule r { iload n; } --> {
                if (n == 0) { iconst_0; }
                else if (n == 1) { iconst_1; }
                else { }
            }
            """
        )
        (compound,) = replacement_statements(rule)
        assert compound.kind == NodeKind.STATEMENT_COMPOUND
        assert _kinds(compound.children) == [
            NodeKind.STATEMENT_IF,
            NodeKind.STATEMENT_IF,
            NodeKind.STATEMENT_ELSE,
        ]
        condition = compound.children[0].children[0]
        assert condition.kind == NodeKind.CONDITION_EQUAL

    def test_empty_replacement(self):
        rule = _single_rule("rule r { dup; pop; } --> { }")
        assert replacement_statements(rule) == []


class TestExpressions:
    def _argument(self, expression: str):
        rule = _single_rule(f"rule r {{ iload a; }} --> {{ ldc_int {expression}; }}")
        (statement,) = replacement_statements(rule)
        return statement.children[1]

    def test_same_operator_run_is_n_ary(self):
        node = self._argument("a + b + c")
        assert node.kind == NodeKind.EXPRESSION_ADD
        assert [c.text for c in node.children] == ["a", "b", "c"]

    def test_mixed_additive_operators_fold_left(self):
        node = self._argument("a + b - c")
        assert node.kind == NodeKind.EXPRESSION_SUBTRACT
        left, right = node.children
        assert left.kind == NodeKind.EXPRESSION_ADD
        assert right.text == "c"

    def test_multiplication_binds_tighter(self):
        node = self._argument("a + b * 2")
        assert node.kind == NodeKind.EXPRESSION_ADD
        assert node.children[1].kind == NodeKind.EXPRESSION_MULTIPLY

    def test_parentheses_are_not_flattened(self):
        node = self._argument("(a + b) + c")
        assert node.kind == NodeKind.EXPRESSION_ADD
        assert len(node.children) == 2
        assert node.children[0].kind == NodeKind.EXPRESSION_ADD

    def test_logical_operators(self):
        rule = _single_rule(
            "rule r { iload a; } --> { if (a > 0 && a < 5 || a == 9) { nop; } }"
        )
        (compound,) = replacement_statements(rule)
        condition = compound.children[0].children[0]
        assert condition.kind == NodeKind.CONDITION_OR
        assert condition.children[0].kind == NodeKind.CONDITION_AND
        assert _kinds(condition.children[0].children) == [
            NodeKind.CONDITION_GT,
            NodeKind.CONDITION_LT,
        ]


class TestSyntaxErrors:
    def test_missing_rule_name(self):
        with pytest.raises(PatternSyntaxError):
            parse_patterns("rule { dup; } --> { }")

    def test_unexpected_character_reports_position(self):
        with pytest.raises(PatternSyntaxError, match="line 1") as info:
            parse_patterns("rule r { dup @; } --> { }")
        assert info.value.line == 1

    def test_truncated_input(self):
        with pytest.raises(PatternSyntaxError, match="unexpected end of input"):
            parse_patterns("rule r { dup; } -->")
