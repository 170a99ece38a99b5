"""
Pippin Machine — Configuration
==============================

Fixed machine geometry plus the defaults used by the host-side tooling
(run loop budget, logging). Everything here is a plain module constant so
that tests and the CLI can read it without building any objects.
"""

import logging


# =============================================================================
#  MACHINE GEOMETRY
# =============================================================================
CODE_SIZE = 256           # code slots, indices 0..255
DATA_SIZE = 512           # data words, addresses 0..511

WORD_BITS = 32            # accumulator / pc / arg are signed 32-bit words
WORD_MIN = -(1 << (WORD_BITS - 1))
WORD_MAX = (1 << (WORD_BITS - 1)) - 1

NO_CHANGE = -1            # changed_data_index before any data write


# =============================================================================
#  EXECUTION
# =============================================================================
# Budget for ExecutionEngine.run(); a program that jumps onto itself would
# otherwise never return.
DEFAULT_MAX_STEPS = 100_000


# =============================================================================
#  LOGGING
# =============================================================================
LOGGER_NAME = "pippin"
LOG_LEVEL = logging.DEBUG
CONSOLE_LOG_LEVEL = logging.WARNING
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
FILE_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
