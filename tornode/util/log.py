# Copyright 2011-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Logging for tornode. There are two audiences...

* Library activity (parsed rules, installed descriptors, configuration
  problems) goes to the 'tornode' logger. This discards everything until a
  handler is attached, such as with :func:`~tornode.util.log.log_to_stdout`.

* Operators get a node's own messages through a simple callable that accepts
  a string. :func:`~tornode.util.log.make_logger` provides one that prefixes a
  sortable timestamp.

**Module Overview:**

::

  log - logs a message at the given runlevel
  log_once - logs a message, deduplicating if it has already been logged
  trace - logs a message at the TRACE runlevel
  debug - logs a message at the DEBUG runlevel
  info - logs a message at the INFO runlevel
  notice - logs a message at the NOTICE runlevel
  warn - logs a message at the WARN runlevel

  log_to_stdout - reports further library events to stdout
  make_logger - timestamped logging capability for a node

.. data:: Runlevel (enum)

  Severity of a logged message.

  ========== ===========
  Runlevel   Description
  ========== ===========
  **ERROR**  the node can't operate as configured
  **WARN**   problem the operator should address, such as a bad config value
  **NOTICE** something the operator likely wants to know about
  **INFO**   node activity, such as descriptor updates
  **DEBUG**  library activity, such as parsed exit policies
  **TRACE**  per-peer and per-lookup activity
  ========== ===========
"""

import datetime
import logging

import tornode.util.enum

from typing import Callable, Optional

Runlevel = tornode.util.enum.UppercaseEnum('TRACE', 'DEBUG', 'INFO', 'NOTICE', 'WARN', 'ERROR')
TRACE, DEBUG, INFO, NOTICE, WARN, ERR = list(Runlevel)

# the logging module lacks TRACE and NOTICE, so these sit between its levels

LOG_VALUES = {
  Runlevel.TRACE: logging.DEBUG - 5,
  Runlevel.DEBUG: logging.DEBUG,
  Runlevel.INFO: logging.INFO,
  Runlevel.NOTICE: logging.INFO + 5,
  Runlevel.WARN: logging.WARN,
  Runlevel.ERROR: logging.ERROR,
}

logging.addLevelName(LOG_VALUES[TRACE], 'TRACE')
logging.addLevelName(LOG_VALUES[NOTICE], 'NOTICE')

LOGGER = logging.getLogger('tornode')
LOGGER.setLevel(LOG_VALUES[TRACE])

if not LOGGER.handlers:
  LOGGER.addHandler(logging.NullHandler())

# timestamp prefix of make_logger(), ex. '[2020-05-12 19:04] '
TIMESTAMP_FORMAT = '[%Y-%m-%d %H:%M] '

# identifiers of messages log_once() has already emitted
LOGGED_MESSAGE_IDS = set()


def log(runlevel: Optional['tornode.util.log.Runlevel'], message: str) -> None:
  """
  Logs a message at the given runlevel.

  :param runlevel: runlevel to log the message at, logging is skipped if **None**
  :param message: message to be logged
  """

  if runlevel:
    LOGGER.log(LOG_VALUES[runlevel], message)


def log_once(message_id: str, runlevel: Optional['tornode.util.log.Runlevel'], message: str) -> bool:
  """
  Logs a message unless one with the same identifier already has been.

  :param message_id: identifier to deduplicate on
  :param runlevel: runlevel to log the message at, logging is skipped if **None**
  :param message: message to be logged

  :returns: **True** if we logged the message, **False** otherwise
  """

  if not runlevel or message_id in LOGGED_MESSAGE_IDS:
    return False

  LOGGED_MESSAGE_IDS.add(message_id)
  log(runlevel, message)
  return True


def trace(message: str) -> None:
  log(Runlevel.TRACE, message)


def debug(message: str) -> None:
  log(Runlevel.DEBUG, message)


def info(message: str) -> None:
  log(Runlevel.INFO, message)


def notice(message: str) -> None:
  log(Runlevel.NOTICE, message)


def warn(message: str) -> None:
  log(Runlevel.WARN, message)


class _StdoutHandler(logging.Handler):
  def __init__(self, runlevel: 'tornode.util.log.Runlevel') -> None:
    logging.Handler.__init__(self, level = LOG_VALUES[runlevel])
    self.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', '%m/%d/%Y %H:%M:%S'))

  def emit(self, record: logging.LogRecord) -> None:
    print(self.format(record))


def log_to_stdout(runlevel: 'tornode.util.log.Runlevel') -> None:
  """
  Prints further library events to stdout.

  :param runlevel: minimum runlevel a message needs to be printed
  """

  LOGGER.addHandler(_StdoutHandler(runlevel))


def make_logger(out: Callable[[str], None] = print, clock: Optional[Callable[[], datetime.datetime]] = None) -> Callable[[str], None]:
  """
  Provides a logging capability for nodes. Messages are prefixed with an
  easily sortable timestamp, then handed to **out**. For instance...

  ::

    >>> node_log = make_logger()
    >>> node_log('exit policy installed')
    [2020-05-12 19:04] exit policy installed

  :param out: function that messages are sent to, stdout by default
  :param clock: provides the current time, **datetime.datetime.now** if unset

  :returns: function that accepts a message and logs it
  """

  if clock is None:
    clock = datetime.datetime.now

  def _log(message: str) -> None:
    out(clock().strftime(TIMESTAMP_FORMAT) + message)

  return _log
