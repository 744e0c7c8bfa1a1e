"""Run context for log tracing.

Every analysis run gets a short run ID and a generation number. Both are
carried in context variables so that records emitted from worker threads
can be tied back to the run that produced them.
"""

import uuid
import logging
import contextvars


# Context variable for the analysis run ID (thread-safe, async-safe)
run_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)

# Context variable for the analysis generation
generation_var: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "generation", default=None
)


def generate_run_id() -> str:
    """Generate unique run ID."""
    return str(uuid.uuid4())[:8]


def get_run_id() -> str | None:
    """Get current run ID from context."""
    return run_id_var.get()


def set_run_id(rid: str | None):
    """Set run ID in context."""
    run_id_var.set(rid)


def get_generation() -> int | None:
    """Get current analysis generation from context."""
    return generation_var.get()


def set_generation(generation: int | None):
    """Set analysis generation in context."""
    generation_var.set(generation)


def clear_run_context():
    """Reset run ID and generation."""
    run_id_var.set(None)
    generation_var.set(None)


class RunContextLogFilter(logging.Filter):
    """
    Logging filter that adds run_id and generation to log records.

    Use with standard logging to auto-inject context vars.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = get_run_id()
        record.generation = get_generation()
        return True
