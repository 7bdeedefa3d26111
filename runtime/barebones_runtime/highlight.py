"""
Barebones syntax highlighting

Splits source into sections a presentation layer can colour. The walk
mirrors the tokenizer: lines, then statements on the separator, then
whitespace-delimited fields. Only the first field of a statement with
valid arity can be an instruction keyword.
"""

from dataclasses import dataclass
import re
from enum import Enum
from typing import List

from .barebones_runtime import COMMANDS, STATEMENT_SEPARATOR, correct_arguments, split_fields

_WHITESPACE_RE = re.compile(r"(\s+)")


class SectionType(Enum):
    INSTR = 'instr'
    NORM = 'norm'
    SEP = 'sep'


@dataclass(frozen=True)
class HighlightSection:
    text: str
    kind: SectionType


def find_section_type(part: str, position: int) -> SectionType:
    """Instruction keyword only at the start of a statement"""
    if position == 0 and part in COMMANDS:
        return SectionType.INSTR
    return SectionType.NORM


def highlight_sections(code: str, separator: str = STATEMENT_SEPARATOR) -> List[HighlightSection]:
    """
    Classify every part of the source.

    Whitespace runs, separators and line breaks come back as SEP sections,
    so joining all section texts gives back `code` unchanged.
    """
    sections: List[HighlightSection] = []
    lines = code.split("\n")
    for line_index, line in enumerate(lines):
        statements = line.split(separator)
        for statement_index, statement in enumerate(statements):
            fields = split_fields(statement)
            valid = bool(fields) and correct_arguments(fields)
            position = 0
            for part in _WHITESPACE_RE.split(statement):
                if not part:
                    continue
                if part.isspace():
                    sections.append(HighlightSection(part, SectionType.SEP))
                    continue
                kind = find_section_type(part, position) if valid else SectionType.NORM
                sections.append(HighlightSection(part, kind))
                position += 1
            if statement_index < len(statements) - 1:
                sections.append(HighlightSection(separator, SectionType.SEP))
        if line_index < len(lines) - 1:
            sections.append(HighlightSection("\n", SectionType.SEP))
    return sections


__all__ = ['SectionType', 'HighlightSection', 'find_section_type', 'highlight_sections']
