"""codelab-sandbox: execution server for the code runner protocol."""

from codelab.sandbox.app import create_app
from codelab.sandbox.config import Config

__all__ = ["Config", "create_app"]
