"""
Barebones Listeners - observer side of the execution engine

The engine only pushes notifications; it never reads anything back from
a listener. Listeners are called synchronously, in registration order,
on the thread driving the engine.

Output kinds:
    OUTPUT_TEXT   - normal program output
    OUTPUT_ERROR  - diagnostics (structural, operand, unknown command)
    OUTPUT_REPORT - memory and timing dumps requested by a collaborator
"""

from typing import List, Tuple

from .log import get_logger

OUTPUT_TEXT = "output"
OUTPUT_ERROR = "error"
OUTPUT_REPORT = "report"


class InterpreterListener:
    """Base listener; override the events you care about"""

    def on_step_finished(self) -> None:
        pass

    def on_run_finished(self) -> None:
        pass

    def on_output(self, text: str, kind: str = OUTPUT_TEXT) -> None:
        pass


class LoggingListener(InterpreterListener):
    """Forward engine events to the runtime logger"""

    def __init__(self, name: str = "events"):
        self.log = get_logger(name)

    def on_step_finished(self) -> None:
        self.log.debug("step finished")

    def on_run_finished(self) -> None:
        self.log.info("run finished")

    def on_output(self, text: str, kind: str = OUTPUT_TEXT) -> None:
        if kind == OUTPUT_ERROR:
            self.log.error(text.strip())
        else:
            self.log.info(text.strip())


class RecordingListener(InterpreterListener):
    """Keep every event for later inspection"""

    def __init__(self):
        self.steps = 0
        self.finished = 0
        self.outputs: List[Tuple[str, str]] = []

    def on_step_finished(self) -> None:
        self.steps += 1

    def on_run_finished(self) -> None:
        self.finished += 1

    def on_output(self, text: str, kind: str = OUTPUT_TEXT) -> None:
        self.outputs.append((kind, text))

    def errors(self) -> List[str]:
        """Texts of all error outputs, in order"""
        return [text for kind, text in self.outputs if kind == OUTPUT_ERROR]


__all__ = [
    'OUTPUT_TEXT', 'OUTPUT_ERROR', 'OUTPUT_REPORT',
    'InterpreterListener', 'LoggingListener', 'RecordingListener',
]
