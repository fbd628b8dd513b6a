"""Exit codes and runtime requirements used by the CLI."""

CONFIG_EXIT_CODE = 1
VALIDATION_EXIT_CODE = 2
REQUEST_EXIT_CODE = 3

# Keep in step with requires-python in pyproject.toml
MIN_PYTHON = (3, 11)

__all__ = ["CONFIG_EXIT_CODE", "VALIDATION_EXIT_CODE", "REQUEST_EXIT_CODE", "MIN_PYTHON"]
