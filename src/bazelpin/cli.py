"""Console entry point.

``bazelpin`` takes no options of its own: every argument goes to the
pinned bazel binary untouched.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, Optional

from bazelpin.core.errors import BazelpinError
from bazelpin.core.logging import configure_logging, get_logger, trace_enabled
from bazelpin.launcher import Launcher

LOGGER = get_logger(__name__)

EXIT_FAILURE = 1


def main(argv: Optional[Iterable[str]] = None) -> int:
    """CLI entrypoint.

    On success the process is replaced by bazel, whose exit status is the
    one the caller sees. Returns 1 on any fatal bootstrap error.
    """
    args = list(sys.argv[1:] if argv is None else argv)

    # Configure logging as early as possible.
    configure_logging(trace=trace_enabled())

    try:
        launcher = Launcher.from_environment(Path.cwd())
        launcher.run(args)
    except BazelpinError as e:
        LOGGER.debug("Bootstrap failed", exc_info=True)
        print(f"bazelpin: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    raise SystemExit(main())
