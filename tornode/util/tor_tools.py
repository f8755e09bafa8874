# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Miscellaneous utility functions for working with tor relay identities.

**Module Overview:**

::

  is_valid_fingerprint - checks if a string is a valid tor relay fingerprint
  is_valid_nickname - checks if a string is a valid tor relay nickname
  is_hex_digits - checks if a string is only made up of hex digits
"""

import re

from typing import Any

# The control-spec defines the following as...
#
#   Fingerprint = "$" 40*HEXDIG
#   NicknameChar = "a"-"z" / "A"-"Z" / "0" - "9"
#   Nickname = 1*19 NicknameChar
#
# HEXDIG is defined in RFC 5234 as being uppercase and used in RFC 5987 as
# case insensitive. Tor doesn't define this in the spec so flipping a coin
# and going with case insensitive.

NICKNAME_PATTERN = re.compile('^[a-zA-Z0-9]{1,19}$')

HEX_DIGITS_PATTERN = re.compile('^[0-9a-fA-F]+$')


def is_valid_fingerprint(entry: Any, check_prefix: bool = False) -> bool:
  """
  Checks if a string is a properly formatted relay fingerprint. This checks for
  a '$' prefix if check_prefix is true, otherwise this only validates the hex
  digits.

  :param entry: string to be checked
  :param check_prefix: checks for a '$' prefix

  :returns: **True** if the string could be a relay fingerprint, **False** otherwise
  """

  if isinstance(entry, bytes):
    entry = entry.decode('utf-8', 'replace')

  if not isinstance(entry, str):
    return False
  elif check_prefix:
    if not entry or entry[0] != '$':
      return False

    entry = entry[1:]

  return is_hex_digits(entry, 40)


def is_valid_nickname(entry: Any) -> bool:
  """
  Checks if a string is a valid format for being a nickname.

  :param entry: string to be checked

  :returns: **True** if the string could be a nickname, **False** otherwise
  """

  if isinstance(entry, bytes):
    entry = entry.decode('utf-8', 'replace')

  if not isinstance(entry, str):
    return False

  return bool(NICKNAME_PATTERN.fullmatch(entry))


def is_hex_digits(entry: str, count: int) -> bool:
  """
  Checks if a string is the given number of hex digits. Digits represented by
  letters are case insensitive.

  :param entry: string to be checked
  :param count: number of hex digits to be checked for

  :returns: **True** if the given number of hex digits, **False** otherwise
  """

  return len(entry) == count and bool(HEX_DIGITS_PATTERN.fullmatch(entry))
