"""
Logging setup for the Barebones runtime.

One named logger ("barebones"); the colour-per-level console handler is
installed on demand by the command line front end.
Diagnostics only: program output and errors meant for users go through
the listener channel, not through here.
"""

import logging

LOGGER_NAME = "barebones"

level = logging.WARNING


class CustomFormatter(logging.Formatter):
    grey = "\x1b[38;20m"
    light_green = "\x1b[92m"
    yellow = "\x1b[33;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"
    fmt = "%(levelname)6s: %(message)s"

    FORMATS = {
        logging.DEBUG: grey + fmt + reset,
        logging.INFO: light_green + fmt + reset,
        logging.WARNING: yellow + fmt + reset,
        logging.ERROR: red + fmt + reset,
        logging.CRITICAL: bold_red + fmt + reset
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno, self.fmt)
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)


log = logging.getLogger(LOGGER_NAME)
log.setLevel(level)

ch = None


def install_console_handler() -> logging.Handler:
    """
    Attach the coloured console handler to the runtime logger.

    Called by the command line front end; embedding applications keep
    their own logging configuration. Records still propagate upward.
    """
    global ch
    if ch is None:
        ch = logging.StreamHandler()
        ch.setLevel(logging.DEBUG)
        ch.setFormatter(CustomFormatter())
        log.addHandler(ch)
    return ch


def set_level(new_level) -> None:
    """Change the runtime log level (int or level name)"""
    global level
    if isinstance(new_level, str):
        resolved = logging.getLevelName(new_level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {new_level}")
        new_level = resolved
    level = new_level
    log.setLevel(level)


def get_logger(name: str = None) -> logging.Logger:
    """Return the runtime logger or one of its children"""
    if name:
        return log.getChild(name)
    return log
