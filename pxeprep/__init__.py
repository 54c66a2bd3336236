"""pxeprep - network-boot environment provisioning.

Validates a .env configuration, renders the boot service configs from it and
downloads the boot-loader and OS boot assets those services serve.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Re-export main CLI entry point
from .cli import main

__all__ = ["main"]
