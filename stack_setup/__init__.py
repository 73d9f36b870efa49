"""stack-setup - Laravel + Next.js local development stack bootstrapper.

Scaffolds the backend and frontend projects, renders their environment files
from stubs and registers the local Herd HTTPS links.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Re-export main CLI entry point
from .cli import main

__all__ = ["main"]
