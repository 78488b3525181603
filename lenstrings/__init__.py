from __future__ import annotations

import logging
from logging import NullHandler

__version__ = '0.1.0'

from .binary import Binary

logging.getLogger(__name__).addHandler(NullHandler())
