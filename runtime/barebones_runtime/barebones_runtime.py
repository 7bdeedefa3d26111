"""
Barebones Runtime - Tokenizer, Block Resolver and Execution Engine

Barebones is a minimal imperative language over non-negative integers.
Its only primitives are clear/incr/decr on variables and while/if blocks
closed by a generic `end`.

Architecture:
- Tokenizer: split source into statements, validate arity, build Instructions
- Block Resolver: match every while/if with its end (single LIFO pass)
- Engine: program counter state machine with step and run modes
- Runtime: load + execute facade with listener wiring

Syntax Examples:
    clear X
    incr X; incr X
    while X not 0
        decr X
        incr Y
    end while
    if Y == 2
        clear Y
    end if

Comparison operators: ==, not, >, <. Literals are non-negative integers.
"""

from typing import Dict, Iterable, List, Optional, Tuple, Union
from dataclasses import dataclass
from enum import Enum
import logging
import re
import time

from .errors import (
    E_ARITY, E_BLOCK_MISMATCH, E_UNKNOWN, E_UNKNOWN_COMMAND,
    BarebonesError, StructuralError, OperandError, InternalError,
)
from .listeners import (
    OUTPUT_ERROR, OUTPUT_REPORT, OUTPUT_TEXT, InterpreterListener,
)
from .log import get_logger, set_level

log = get_logger("engine")


# ============================================================================
# Language Constants
# ============================================================================

STATEMENT_SEPARATOR = ";"

COMMANDS = ('clear', 'incr', 'decr', 'while', 'if', 'end')

COMPARISON_OPERATORS = ('==', 'not', '>', '<')

# Field count per command, command name included
ARITY = {
    'clear': 2,
    'incr': 2,
    'decr': 2,
    'while': 4,
    'if': 4,
    'end': 2,
}

# Optional trailing keyword on block openers: `while X not 0 do`
DO_KEYWORD = 'do'

_LITERAL_RE = re.compile(r'[0-9]+')


def _shorten(text, limit: int = 40) -> str:
    text = str(text)
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


@dataclass
class RuntimeConfig:
    """Knobs for a BarebonesRuntime"""
    separator: str = STATEMENT_SEPARATOR
    log_level: Optional[Union[int, str]] = None
    sorted_memory: bool = True


# ============================================================================
# Instructions
# ============================================================================

@dataclass(frozen=True)
class Instruction:
    """Base instruction: program position plus 1-based source line"""
    position: int
    line: int

    command = ''

    def operands(self) -> Tuple[str, ...]:
        return ()

    def fields(self) -> Tuple[str, ...]:
        """The instruction as (command, operand1, ...)"""
        return (self.command,) + self.operands()

    def __str__(self) -> str:
        return ' '.join(self.fields())


@dataclass(frozen=True)
class Clear(Instruction):
    var: str

    command = 'clear'

    def operands(self) -> Tuple[str, ...]:
        return (self.var,)


@dataclass(frozen=True)
class Incr(Instruction):
    var: str

    command = 'incr'

    def operands(self) -> Tuple[str, ...]:
        return (self.var,)


@dataclass(frozen=True)
class Decr(Instruction):
    var: str

    command = 'decr'

    def operands(self) -> Tuple[str, ...]:
        return (self.var,)


@dataclass(frozen=True)
class Conditional(Instruction):
    """Block opener guarded by `var op literal`"""
    var: str
    op: str
    literal: str

    def operands(self) -> Tuple[str, ...]:
        return (self.var, self.op, self.literal)


@dataclass(frozen=True)
class While(Conditional):
    command = 'while'


@dataclass(frozen=True)
class If(Conditional):
    command = 'if'


@dataclass(frozen=True)
class End(Instruction):
    kind: str

    command = 'end'

    def operands(self) -> Tuple[str, ...]:
        return (self.kind,)


@dataclass(frozen=True)
class Unknown(Instruction):
    """Statement whose command is not part of the language; skipped at run time"""
    name: str
    args: Tuple[str, ...]

    def operands(self) -> Tuple[str, ...]:
        return self.args

    def fields(self) -> Tuple[str, ...]:
        return (self.name,) + self.args


_INSTRUCTION_TYPES = {
    'clear': Clear,
    'incr': Incr,
    'decr': Decr,
    'while': While,
    'if': If,
    'end': End,
}


# ============================================================================
# Tokenizer & Validator
# ============================================================================

def split_fields(statement: str) -> List[str]:
    """Split a trimmed statement into whitespace-delimited fields"""
    return statement.split()


def correct_arguments(fields: List[str]) -> bool:
    """Arity check. Commands outside the language are not checked here."""
    if not fields:
        return False
    expected = ARITY.get(fields[0])
    if expected is None:
        return True
    if fields[0] in ('while', 'if') and len(fields) == expected + 1:
        return fields[-1] == DO_KEYWORD
    return len(fields) == expected


def build_instruction(fields: List[str], position: int, line: int) -> Instruction:
    """Turn validated fields into the matching Instruction variant"""
    command = fields[0]
    if command in ('while', 'if') and len(fields) == ARITY[command] + 1:
        fields = fields[:-1]
    cls = _INSTRUCTION_TYPES.get(command)
    if cls is None:
        return Unknown(position, line, command, tuple(fields[1:]))
    return cls(position, line, *fields[1:])


class BarebonesTokenizer:
    """Tokenize Barebones source into a flat list of Instructions"""

    def __init__(self, source: str, separator: str = STATEMENT_SEPARATOR):
        if not separator:
            raise ValueError("Statement separator must not be empty")
        self.source = source
        self.separator = separator
        self.errors: List[BarebonesError] = []

    def statements(self) -> Iterable[Tuple[int, str]]:
        """Yield (line, statement) for every non-empty statement"""
        for line_number, line in enumerate(self.source.splitlines(), start=1):
            for part in line.split(self.separator):
                part = part.strip()
                if part:
                    yield line_number, part

    def tokenize(self) -> List[Instruction]:
        """
        Build the program, collecting every arity error.

        Raises:
            StructuralError: if any statement has the wrong arity
        """
        program: List[Instruction] = []
        self.errors = []
        for line_number, statement in self.statements():
            fields = split_fields(statement)
            if not correct_arguments(fields):
                expected = ARITY[fields[0]] - 1
                self.errors.append(BarebonesError(
                    E_ARITY,
                    f"Incorrect arguments: '{statement}' ({fields[0]} takes {expected}, got {len(fields) - 1})",
                    line=line_number,
                ))
                continue
            program.append(build_instruction(fields, len(program), line_number))

        if self.errors:
            raise StructuralError(self.errors)
        return program


# ============================================================================
# Block Resolver
# ============================================================================

class BlockKind(Enum):
    WHILE = 'while'
    IF = 'if'


@dataclass(frozen=True)
class JumpTarget:
    """Where an opener's block ends, and what kind of block it is"""
    end: int
    kind: BlockKind


class JumpTable:
    """Read-only map from opener position to its JumpTarget"""

    def __init__(self, targets: Dict[int, JumpTarget]):
        self._targets = dict(targets)
        self._openers = {target.end: opener for opener, target in self._targets.items()}

    def target(self, opener: int) -> JumpTarget:
        return self._targets[opener]

    def opener_of(self, end: int) -> int:
        """Position of the block opener closed by the end at `end`"""
        return self._openers[end]

    def items(self):
        return self._targets.items()

    def __contains__(self, opener: int) -> bool:
        return opener in self._targets

    def __len__(self) -> int:
        return len(self._targets)

    def __eq__(self, other) -> bool:
        if isinstance(other, JumpTable):
            return self._targets == other._targets
        if isinstance(other, dict):
            return {p: t.end for p, t in self._targets.items()} == other
        return NotImplemented

    def __repr__(self) -> str:
        pairs = ', '.join(f"{p}->{t.end}:{t.kind.value}" for p, t in sorted(self._targets.items()))
        return f"JumpTable({pairs})"


class BlockResolver:
    """Match block openers with their `end` using a stack"""

    def __init__(self, program: List[Instruction]):
        self.program = program
        self.errors: List[BarebonesError] = []

    def resolve(self) -> JumpTable:
        """
        Build the jump table in one forward pass.

        Raises:
            StructuralError: on a stray `end` or an unterminated block
        """
        self.errors = []
        targets: Dict[int, JumpTarget] = {}
        pending: List[Instruction] = []

        for instr in self.program:
            if isinstance(instr, (While, If)):
                pending.append(instr)
            elif isinstance(instr, End):
                if not pending:
                    self.errors.append(BarebonesError(
                        E_BLOCK_MISMATCH, "while/if-end mismatch",
                        position=instr.position, line=instr.line,
                    ))
                    continue
                opener = pending.pop()
                kind = BlockKind.WHILE if isinstance(opener, While) else BlockKind.IF
                if (kind is BlockKind.WHILE) != (instr.kind == 'while'):
                    log.warning("line %d: 'end %s' closes the %s opened on line %d",
                                instr.line, instr.kind, kind.value, opener.line)
                targets[opener.position] = JumpTarget(instr.position, kind)

        if pending:
            self.errors.append(BarebonesError(E_BLOCK_MISMATCH, "while/if-end mismatch"))

        if self.errors:
            raise StructuralError(self.errors)
        return JumpTable(targets)


def load_program(source: str, separator: str = STATEMENT_SEPARATOR) -> Tuple[List[Instruction], JumpTable]:
    """Tokenize and resolve; all-or-nothing"""
    program = BarebonesTokenizer(source, separator).tokenize()
    jump_table = BlockResolver(program).resolve()
    return program, jump_table


# ============================================================================
# Execution Engine
# ============================================================================

class EngineState(Enum):
    NOT_STARTED = 'not_started'
    RUNNING = 'running'
    STOPPED = 'stopped'
    FINISHED = 'finished'


class BarebonesEngine:
    """Execute a resolved program against a variable store"""

    def __init__(self, program: List[Instruction], jump_table: JumpTable,
                 listeners: Optional[Iterable[InterpreterListener]] = None,
                 sorted_memory: bool = True):
        self.program = tuple(program)
        self.jump_table = jump_table
        self.listeners: List[InterpreterListener] = list(listeners or [])
        self.sorted_memory = sorted_memory
        self._in_run = False
        self._reset()

    def _reset(self):
        """Fresh cursor and store"""
        self.pc = 0
        self.last = -1
        self.store: Dict[str, int] = {}
        self.while_stack: List[int] = []
        self.state = EngineState.NOT_STARTED
        self.elapsed_ms: Optional[float] = None
        self.error: Optional[BarebonesError] = None
        self._stop_requested = False

    def add_listener(self, listener: InterpreterListener):
        self.listeners.append(listener)

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start(self, stepping: bool = False) -> bool:
        """
        Begin a fresh run.

        With stepping the engine is left RUNNING at position 0 and the
        caller drives it with step(); otherwise the whole program runs.
        """
        if not stepping:
            return self.run()
        self._reset()
        self.state = EngineState.RUNNING
        return True

    def step(self) -> bool:
        """Execute one instruction. Returns False once the run is over."""
        if self.state in (EngineState.STOPPED, EngineState.FINISHED):
            return False
        self.state = EngineState.RUNNING

        if self.pc >= len(self.program):
            self._finish(EngineState.FINISHED)
            return False

        try:
            self._execute_current()
        except BarebonesError as e:
            self._abort(e)
            return False
        except Exception:
            log.exception("unexpected failure at position %d", self.pc)
            self._abort(BarebonesError(E_UNKNOWN, "An unknown error occurred"))
            return False

        # a listener may have stopped the engine during the instruction
        if self.state is EngineState.STOPPED:
            return False

        self._emit_step_finished()
        return True

    def run(self) -> bool:
        """
        Run a fresh execution to the end without step events.

        Returns True if the program finished naturally.
        """
        self._reset()
        self.state = EngineState.RUNNING
        program = self.program
        start_time = time.perf_counter()
        self._in_run = True
        try:
            while self.pc < len(program) and not self._stop_requested:
                self._execute_current()
        except BarebonesError as e:
            self._abort(e)
            return False
        except Exception:
            log.exception("unexpected failure at position %d", self.pc)
            self._abort(BarebonesError(E_UNKNOWN, "An unknown error occurred"))
            return False
        finally:
            self._in_run = False

        if self._stop_requested:
            self._finish(EngineState.STOPPED)
            return False

        self.elapsed_ms = (time.perf_counter() - start_time) * 1000
        self._finish(EngineState.FINISHED)
        return True

    def stop(self):
        """Request termination; honoured before the next instruction"""
        if self.state in (EngineState.STOPPED, EngineState.FINISHED):
            return
        self._stop_requested = True
        if not self._in_run:
            self._finish(EngineState.STOPPED)

    @property
    def finished(self) -> bool:
        return self.state in (EngineState.STOPPED, EngineState.FINISHED)

    # ------------------------------------------------------------------
    # Instruction execution
    # ------------------------------------------------------------------

    def _execute_current(self):
        instr = self.program[self.pc]
        if log.isEnabledFor(logging.DEBUG):
            log.debug("%4d: %s", self.pc, instr)
        next_pc = self._execute(instr)
        self.last = self.pc
        self.pc = next_pc

    def _execute(self, instr: Instruction) -> int:
        """Execute one instruction and return the next position"""
        p = instr.position

        if isinstance(instr, Clear):
            self.store[instr.var] = 0
            return p + 1

        elif isinstance(instr, Incr):
            self.store[instr.var] = self.store.get(instr.var, 0) + 1
            return p + 1

        elif isinstance(instr, Decr):
            value = self._load(instr.var)
            self.store[instr.var] = value - 1 if value > 0 else 0
            return p + 1

        elif isinstance(instr, While):
            if self._condition_met(instr):
                self.while_stack.append(p)
                return p + 1
            return self.jump_table.target(p).end + 1

        elif isinstance(instr, If):
            if self._condition_met(instr):
                return p + 1
            return self.jump_table.target(p).end + 1

        elif isinstance(instr, End):
            opener = self.jump_table.opener_of(p)
            if self.jump_table.target(opener).kind is BlockKind.WHILE:
                if not self.while_stack:
                    raise InternalError("loop return stack is empty", position=p, line=instr.line)
                back = self.while_stack.pop()
                if back != opener:
                    raise InternalError(
                        f"loop return position {back} does not match opener {opener}",
                        position=p, line=instr.line,
                    )
                return back
            return p + 1

        elif isinstance(instr, Unknown):
            message = f"Invalid command: {instr.name}"
            log.warning("line %d: %s, skipped", instr.line, message)
            self._emit_output(
                "\n" + BarebonesError(E_UNKNOWN_COMMAND, message, position=p, line=instr.line).describe(),
                OUTPUT_ERROR,
            )
            return p + 1

        raise InternalError(f"Unhandled instruction type: {type(instr).__name__}", position=p, line=instr.line)

    def _load(self, name: str) -> int:
        """Read a variable, declaring it as 0 if unseen"""
        return self.store.setdefault(name, 0)

    def _condition_met(self, instr: Conditional) -> bool:
        if instr.op not in COMPARISON_OPERATORS:
            raise OperandError(f"Operator not found: {instr.op} in '{_shorten(instr)}'",
                               position=instr.position, line=instr.line)
        if not _LITERAL_RE.fullmatch(instr.literal):
            raise OperandError(f"Invalid operand: {_shorten(instr.literal)} in '{_shorten(instr)}'",
                               position=instr.position, line=instr.line)
        # digit strings order by (length, text) once leading zeros are stripped
        digits = instr.literal.lstrip('0') or '0'
        expected = (len(digits), digits)
        value_digits = str(self._load(instr.var))
        value = (len(value_digits), value_digits)

        if instr.op == '==':
            return value == expected
        elif instr.op == 'not':
            return value != expected
        elif instr.op == '>':
            return value > expected
        else:
            return value < expected

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _finish(self, state: EngineState):
        self.state = state
        self._stop_requested = False
        log.debug("run %s at position %d", state.value, self.pc)
        for listener in self.listeners:
            listener.on_run_finished()

    def _abort(self, error: BarebonesError):
        self.error = error
        log.error("run aborted: %s", error.describe())
        try:
            self._emit_output("\n" + error.describe(), OUTPUT_ERROR)
        except Exception:
            # the failure may have come from a listener; still reach completion
            log.exception("listener failed while reporting an aborted run")
        self._finish(EngineState.STOPPED)

    def _emit_step_finished(self):
        for listener in self.listeners:
            listener.on_step_finished()

    def _emit_output(self, text: str, kind: str = OUTPUT_TEXT):
        for listener in self.listeners:
            listener.on_output(text, kind)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def current_position(self) -> int:
        return self.pc

    @property
    def last_position(self) -> int:
        """Position of the last executed instruction, -1 before the first"""
        return self.last

    @property
    def variables(self) -> Dict[str, int]:
        return dict(self.store)

    def format_memory(self) -> str:
        """All variables as `name <- value` lines"""
        names = sorted(self.store) if self.sorted_memory else list(self.store)
        s = "\nMemory:"
        for name in names:
            s += f"\n{name} <- {self.store[name]}"
        return s

    def format_time_taken(self) -> str:
        """Timing of the last natural, non-stepped run"""
        if self.elapsed_ms is None:
            return "\nExecution time unavailable"
        return f"\nExecution finished in {self.elapsed_ms:f}ms"

    def report_memory(self):
        """Push the memory dump to listeners"""
        self._emit_output(self.format_memory(), OUTPUT_REPORT)

    def report_time_taken(self):
        """Push the timing report to listeners"""
        self._emit_output(self.format_time_taken(), OUTPUT_REPORT)


# ============================================================================
# Runtime Interface
# ============================================================================

class BarebonesRuntime:
    """Main Barebones runtime interface"""

    def __init__(self, config: Optional[RuntimeConfig] = None,
                 listeners: Optional[Iterable[InterpreterListener]] = None):
        self.config = config or RuntimeConfig()
        self.listeners: List[InterpreterListener] = list(listeners or [])
        self.engine: Optional[BarebonesEngine] = None
        if self.config.log_level is not None:
            set_level(self.config.log_level)

    def add_listener(self, listener: InterpreterListener):
        self.listeners.append(listener)
        if self.engine is not None:
            self.engine.add_listener(listener)

    def load(self, source: str) -> BarebonesEngine:
        """
        Tokenize and resolve source, then build a fresh engine.

        Every structural error is pushed to the listeners before the
        StructuralError is raised; nothing is executed in that case.
        """
        self.engine = None
        try:
            program, jump_table = load_program(source, self.config.separator)
        except StructuralError as e:
            log.error("load failed with %d structural error(s)", len(e.errors))
            for error in e.errors:
                for listener in self.listeners:
                    listener.on_output("\n" + error.describe(), OUTPUT_ERROR)
            raise

        self.engine = BarebonesEngine(program, jump_table, self.listeners,
                                      sorted_memory=self.config.sorted_memory)
        return self.engine

    def execute(self, source: str, stepping: bool = False) -> Dict[str, int]:
        """
        Execute Barebones source code and return the final variables.

        Raises:
            StructuralError: if the source does not load
            BarebonesError: if the run was aborted
        """
        engine = self.load(source)
        if stepping:
            engine.start(stepping=True)
            while engine.step():
                pass
        else:
            engine.run()

        if engine.error is not None:
            raise engine.error
        return engine.variables

    def get_var(self, name: str) -> int:
        """Get a variable from the last run"""
        env = self.get_env()
        if name not in env:
            raise KeyError(name)
        return env[name]

    def get_env(self) -> Dict[str, int]:
        """Copy of the last run's variable store"""
        if self.engine is None:
            return {}
        return self.engine.variables


# ============================================================================
# Convenience Function
# ============================================================================

def execute_barebones(source: str) -> Dict[str, int]:
    """
    Execute Barebones source code (convenience function)

    Args:
        source: Barebones source code

    Returns:
        Final variable store

    Example:
        >>> execute_barebones('clear X; incr X; incr X')
        {'X': 2}
    """
    runtime = BarebonesRuntime()
    return runtime.execute(source)


__all__ = [
    'STATEMENT_SEPARATOR', 'COMMANDS', 'COMPARISON_OPERATORS', 'ARITY',
    'RuntimeConfig',
    'Instruction', 'Clear', 'Incr', 'Decr', 'Conditional', 'While', 'If', 'End', 'Unknown',
    'split_fields', 'correct_arguments', 'build_instruction', 'BarebonesTokenizer',
    'BlockKind', 'JumpTarget', 'JumpTable', 'BlockResolver', 'load_program',
    'EngineState', 'BarebonesEngine',
    'BarebonesRuntime', 'execute_barebones',
]
