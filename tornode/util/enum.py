# Copyright 2011-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Ordered constants for things like roles, runlevels, and policy actions. Keys
are attributes, and values are what we present to users...

::

  >>> from tornode.util import enum
  >>> roles = enum.Enum('ENTRANCE', 'RELAY', 'EXIT')
  >>> roles.ENTRANCE
  'Entrance'
  >>> tuple(roles)
  ('Entrance', 'Relay', 'Exit')

  >>> actions = enum.Enum(('ACCEPT', 'accept'), ('REJECT', 'reject'))
  >>> actions.ACCEPT
  'accept'

**Module Overview:**

::

  UppercaseEnum - enum whose values match its keys
  Enum - ordered collection of constants
"""

from typing import Any, Iterator, Tuple, Union


def UppercaseEnum(*args: str) -> 'Enum':
  """
  Provides an :class:`~tornode.util.enum.Enum` whose values are its keys, for
  instance log runlevels.

  :param args: enum keys

  :returns: :class:`~tornode.util.enum.Enum` with the given keys
  """

  return Enum(*[(key, key) for key in args])


class Enum(object):
  """
  Ordered collection of constants. Each entry is either a key, whose value is
  its camel cased form, or a (key, value) tuple.

  :raises: **ValueError** if an entry is neither of these
  """

  def __init__(self, *args: Union[str, Tuple[str, Any]]) -> None:
    from tornode.util.str_tools import _to_camel_case

    values = []

    for entry in args:
      if isinstance(entry, str):
        key, value = entry, _to_camel_case(entry)
      elif isinstance(entry, tuple) and len(entry) == 2:
        key, value = entry
      else:
        raise ValueError("Enum entries must be a key or (key, value) tuple: %s" % (entry,))

      values.append(value)
      setattr(self, key, value)

    self._values = tuple(values)

  def __contains__(self, value: Any) -> bool:
    return value in self._values

  def __iter__(self) -> Iterator[Any]:
    for value in self._values:
      yield value
