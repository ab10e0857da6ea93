"""bazelpin: run the Bazel release pinned by the current workspace."""

__version__ = "0.1.0"
