"""
datsleep - reader for SLEEP files

SLEEP files are append-only logs of equally sized records (signatures,
bitfields or Merkle tree nodes) behind a fixed 32-byte header.
"""

import logging

from .errors import *
from .header import *
from .backing import *
from .entries import *
from .crypto import *
from .views import *
from .sleep_file import *
from .log import *

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
