import logging
import os
import opentelemetry.trace

# Get a tracer for the package (for distributed tracing)
tracer = opentelemetry.trace.get_tracer("gear_console")

# Configure the logger
logger = logging.getLogger("gear_console")

_level_name = os.environ.get("GEAR_CONSOLE_LOG_LEVEL", "INFO").upper()
_level = logging.getLevelName(_level_name)
if not isinstance(_level, int):
    _level = logging.INFO

logger.setLevel(_level)

if not logger.handlers:
    # Console handler for local runs and the CLI
    console_handler = logging.StreamHandler()
    console_handler.setLevel(_level)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)


def get_child_logger(name):
    """Get a child logger with the given name."""
    return logger.getChild(name)
