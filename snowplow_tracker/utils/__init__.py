from .environ import Environ, environ
from .logging import setup_logging

__all__ = ["Environ", "environ", "setup_logging"]
