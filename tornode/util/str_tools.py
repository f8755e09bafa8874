# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
String helpers for parsing and presenting values.

**Module Overview:**

::

  size_label - human readable label for a number of bytes
"""

from typing import Optional, Union

# (bytes per unit, label), from most to least significant

SIZE_UNITS = (
  (1 << 50, 'PB'),
  (1 << 40, 'TB'),
  (1 << 30, 'GB'),
  (1 << 20, 'MB'),
  (1 << 10, 'KB'),
  (1, 'B'),
)


def _to_unicode(msg: Optional[Union[str, bytes]]) -> Optional[str]:
  """
  Decodes bytes as UTF-8, leaving anything else unchanged.
  """

  return msg.decode('utf-8', 'replace') if isinstance(msg, bytes) else msg


def _to_camel_case(label: str) -> str:
  """
  Converts an enum key to the label we present, ie:

  ::

    >>> _to_camel_case('ALLOW_SINGLE_HOP')
    'Allow Single Hop'
  """

  return ' '.join([word.capitalize() for word in label.split('_')])


def size_label(byte_count: int) -> str:
  """
  Labels a number of bytes in its most significant unit, rounding down. For
  instance...

  ::

    >>> size_label(2000000)
    '1 MB'

    >>> size_label(1023)
    '1023 B'

  :param byte_count: number of bytes

  :returns: **str** label for the size
  """

  sign = '-' if byte_count < 0 else ''
  byte_count = abs(byte_count)

  for unit_size, label in SIZE_UNITS:
    if byte_count >= unit_size:
      return '%s%i %s' % (sign, byte_count // unit_size, label)

  return '0 B'
