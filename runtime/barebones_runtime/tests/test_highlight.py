"""
Test suite for syntax highlight sections
"""

import sys
import os

# Add grandparent directory to path for imports (to find barebones_runtime package)
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from barebones_runtime.highlight import (
    HighlightSection, SectionType, find_section_type, highlight_sections,
)


def kinds(sections):
    return [(s.text, s.kind) for s in sections if s.kind is not SectionType.SEP]


class TestSectionType:
    """Test single-part classification"""

    def test_command_at_start(self):
        for command in ('clear', 'incr', 'decr', 'while', 'if', 'end'):
            assert find_section_type(command, 0) is SectionType.INSTR

    def test_command_not_at_start(self):
        assert find_section_type('while', 1) is SectionType.NORM

    def test_operand(self):
        assert find_section_type('X', 0) is SectionType.NORM


class TestSections:
    """Test whole-source highlighting"""

    def test_simple_statement(self):
        assert highlight_sections('incr X') == [
            HighlightSection('incr', SectionType.INSTR),
            HighlightSection(' ', SectionType.SEP),
            HighlightSection('X', SectionType.NORM),
        ]

    def test_end_while(self):
        assert kinds(highlight_sections('end while')) == [
            ('end', SectionType.INSTR), ('while', SectionType.NORM),
        ]

    def test_separators(self):
        sections = highlight_sections('clear X; incr X\ndecr X')
        seps = [s.text for s in sections if s.kind is SectionType.SEP and not s.text.isspace()]
        assert seps == [';', '\n']

    def test_malformed_statement_is_plain(self):
        assert kinds(highlight_sections('while X')) == [
            ('while', SectionType.NORM), ('X', SectionType.NORM),
        ]

    def test_unknown_command_is_plain(self):
        assert kinds(highlight_sections('print X'))[0] == ('print', SectionType.NORM)

    def test_custom_separator(self):
        sections = highlight_sections('clear X | incr X', separator='|')
        assert [s.kind for s in sections] == [
            SectionType.INSTR, SectionType.SEP, SectionType.NORM, SectionType.SEP,
            SectionType.SEP,
            SectionType.SEP, SectionType.INSTR, SectionType.SEP, SectionType.NORM,
        ]

    def test_sections_reassemble_source(self):
        code = 'clear X\nwhile X == 0\n    incr  X ;\tdecr X\n  end while\n'
        sections = highlight_sections(code)
        assert ''.join(s.text for s in sections) == code

    def test_indentation_is_separate(self):
        sections = highlight_sections('    incr X')
        assert sections[0] == HighlightSection('    ', SectionType.SEP)
        assert sections[1] == HighlightSection('incr', SectionType.INSTR)
