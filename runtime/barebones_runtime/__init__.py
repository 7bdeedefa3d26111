"""
Barebones Runtime - Execution engine for the Barebones language

This package provides:

**Language Runtime:**
- Tokenizer: statements and arity validation
- Block Resolver: while/if to end jump table
- Engine: single-step and run-to-end execution over a variable store

**Observers:**
- InterpreterListener and the stock logging/recording listeners

**Tooling:**
- Syntax highlight sections
- `barebones` command line front end

Version: 1.0.0
"""

__version__ = '1.0.0'

# ============================================================================
# Language Runtime
# ============================================================================

from .barebones_runtime import (
    STATEMENT_SEPARATOR, COMMANDS, COMPARISON_OPERATORS, ARITY,
    RuntimeConfig,
    Instruction, Clear, Incr, Decr, Conditional, While, If, End, Unknown,
    BarebonesTokenizer, BlockResolver, BlockKind, JumpTarget, JumpTable,
    EngineState, BarebonesEngine, BarebonesRuntime,
    load_program, execute_barebones,
)

# ============================================================================
# Errors
# ============================================================================

from .errors import (
    E_ARITY, E_BLOCK_MISMATCH, E_OPERAND, E_UNKNOWN_COMMAND,
    E_INTERNAL, E_UNKNOWN,
    BarebonesError, StructuralError, OperandError, InternalError,
)

# ============================================================================
# Observers
# ============================================================================

from .listeners import (
    OUTPUT_TEXT, OUTPUT_ERROR, OUTPUT_REPORT,
    InterpreterListener, LoggingListener, RecordingListener,
)

# ============================================================================
# Tooling
# ============================================================================

from .highlight import SectionType, HighlightSection, find_section_type, highlight_sections
from .log import set_level, get_logger, install_console_handler

# ============================================================================
# Exports
# ============================================================================

__all__ = [
    # Version
    '__version__',

    # Runtime
    'STATEMENT_SEPARATOR', 'COMMANDS', 'COMPARISON_OPERATORS', 'ARITY',
    'RuntimeConfig',
    'Instruction', 'Clear', 'Incr', 'Decr', 'Conditional', 'While', 'If', 'End', 'Unknown',
    'BarebonesTokenizer', 'BlockResolver', 'BlockKind', 'JumpTarget', 'JumpTable',
    'EngineState', 'BarebonesEngine', 'BarebonesRuntime',
    'load_program', 'execute_barebones',

    # Errors
    'BarebonesError', 'StructuralError', 'OperandError', 'InternalError',
    'E_ARITY', 'E_BLOCK_MISMATCH', 'E_OPERAND', 'E_UNKNOWN_COMMAND',
    'E_INTERNAL', 'E_UNKNOWN',

    # Observers
    'OUTPUT_TEXT', 'OUTPUT_ERROR', 'OUTPUT_REPORT',
    'InterpreterListener', 'LoggingListener', 'RecordingListener',

    # Highlighting
    'SectionType', 'HighlightSection', 'find_section_type', 'highlight_sections',

    # Logging
    'set_level', 'get_logger', 'install_console_handler',
]
