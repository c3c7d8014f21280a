"""projmon API package.

This module provides an optional FastAPI service layer around the project
monitor normalization engine. It performs no authentication and no
persistence; callers own both.
"""

from .server import create_app  # noqa: F401
