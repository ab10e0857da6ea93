from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

# Environment variable that enables command-level tracing
TRACE_ENV = "BAZEL_VERSION_TRACE"

# Value of TRACE_ENV that means "tracing off", same as leaving it unset
TRACE_UNSET = "unset"


def trace_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Return True if BAZEL_VERSION_TRACE asks for tracing.

    Any value other than the ``unset`` sentinel turns tracing on.
    """

    env = os.environ if environ is None else environ
    return env.get(TRACE_ENV, TRACE_UNSET) != TRACE_UNSET


def configure_logging(*, trace: bool = False) -> None:
    """Configure root logging for the wrapper.

    Precedence:
    - trace → DEBUG
    - default → WARNING

    Output always goes to stderr; stdout belongs to bazel.
    """

    level = logging.DEBUG if trace else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def flush_logging() -> None:
    """Flush every handler on the root logger."""

    for handler in logging.getLogger().handlers:
        handler.flush()


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger."""

    return logging.getLogger(name if name is not None else __name__)
