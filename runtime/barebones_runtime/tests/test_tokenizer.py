"""
Test suite for the Barebones tokenizer and arity validation
"""

import pytest
import sys
import os
from dataclasses import FrozenInstanceError

# Add grandparent directory to path for imports (to find barebones_runtime package)
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from barebones_runtime.barebones_runtime import (
    BarebonesTokenizer, Clear, Incr, Decr, While, If, End, Unknown,
    correct_arguments, build_instruction, split_fields,
)
from barebones_runtime.errors import E_ARITY, StructuralError


class TestStatements:
    """Test splitting source into statements"""

    def test_one_per_line(self):
        tokenizer = BarebonesTokenizer('clear X\nincr X\n')
        assert list(tokenizer.statements()) == [(1, 'clear X'), (2, 'incr X')]

    def test_semicolons(self):
        tokenizer = BarebonesTokenizer('clear X; incr X;incr Y')
        assert [s for _, s in tokenizer.statements()] == ['clear X', 'incr X', 'incr Y']

    def test_empty_statements_dropped(self):
        tokenizer = BarebonesTokenizer('\n  ;; clear X ;\n\n\t\n')
        assert list(tokenizer.statements()) == [(2, 'clear X')]

    def test_custom_separator(self):
        tokenizer = BarebonesTokenizer('clear X | incr X', separator='|')
        assert [s for _, s in tokenizer.statements()] == ['clear X', 'incr X']

    def test_empty_separator_rejected(self):
        with pytest.raises(ValueError):
            BarebonesTokenizer('clear X', separator='')


class TestFields:
    """Test field splitting and arity"""

    def test_whitespace_runs(self):
        assert split_fields('while  X\tnot 0') == ['while', 'X', 'not', '0']

    def test_arity_single_operand(self):
        for command in ('clear', 'incr', 'decr', 'end'):
            assert correct_arguments([command, 'X'])
            assert not correct_arguments([command])
            assert not correct_arguments([command, 'X', 'Y'])

    def test_arity_conditionals(self):
        for command in ('while', 'if'):
            assert correct_arguments([command, 'X', '==', '0'])
            assert not correct_arguments([command, 'X', '=='])
            assert not correct_arguments([command, 'X', '==', '0', 'extra'])

    def test_trailing_do_accepted(self):
        assert correct_arguments(['while', 'X', 'not', '0', 'do'])
        instr = build_instruction(['while', 'X', 'not', '0', 'do'], 0, 1)
        assert instr.fields() == ('while', 'X', 'not', '0')

    def test_unknown_command_not_checked(self):
        assert correct_arguments(['print', 'X'])
        assert correct_arguments(['nop'])


class TestInstructions:
    """Test building instruction variants"""

    def test_variants(self):
        program = BarebonesTokenizer(
            'clear A; incr A; decr A\nwhile A not 0\nend while\nif A == 0; end if'
        ).tokenize()
        assert [type(i) for i in program] == [Clear, Incr, Decr, While, End, If, End]

    def test_positions_are_sequential(self):
        program = BarebonesTokenizer('clear A; incr A\n\nincr A').tokenize()
        assert [i.position for i in program] == [0, 1, 2]
        assert [i.line for i in program] == [1, 1, 3]

    def test_conditional_operands(self):
        instr = build_instruction(['while', 'X', '>', '3'], 0, 1)
        assert isinstance(instr, While)
        assert (instr.var, instr.op, instr.literal) == ('X', '>', '3')
        assert instr.fields() == ('while', 'X', '>', '3')
        assert str(instr) == 'while X > 3'

    def test_unknown_command(self):
        instr = build_instruction(['print', 'X'], 4, 2)
        assert isinstance(instr, Unknown)
        assert instr.fields() == ('print', 'X')

    def test_instructions_are_immutable(self):
        instr = build_instruction(['incr', 'X'], 0, 1)
        with pytest.raises(FrozenInstanceError):
            instr.var = 'Y'


class TestArityErrors:
    """Test load-time arity failures"""

    def test_single_error(self):
        with pytest.raises(StructuralError) as exc:
            BarebonesTokenizer('clear X\nincr\n').tokenize()
        assert len(exc.value.errors) == 1
        assert exc.value.errors[0].code == E_ARITY
        assert exc.value.errors[0].line == 2

    def test_all_errors_collected(self):
        tokenizer = BarebonesTokenizer('incr\nclear X Y\nwhile X ==\nend while')
        with pytest.raises(StructuralError) as exc:
            tokenizer.tokenize()
        assert [e.line for e in exc.value.errors] == [1, 2, 3]
        assert tokenizer.errors == exc.value.errors

    def test_error_message_names_fragment(self):
        with pytest.raises(StructuralError) as exc:
            BarebonesTokenizer('if X ==').tokenize()
        assert "if X ==" in exc.value.errors[0].message
        assert exc.value.errors[0].describe().startswith("Error on line: 1")
