# Copyright 2011-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Utility functions used by the tornode library.
"""

from typing import Any

__all__ = [
  'conf',
  'connection',
  'enum',
  'log',
  'str_tools',
  'test_tools',
  'tor_tools',
]


def _hash_value(val: Any) -> int:
  # Attribute types are part of the hash, so ('a', 'b') and ['a', 'b'] are
  # considered to be different values.

  my_hash = hash(str(type(val)))

  if isinstance(val, (tuple, list)):
    for v in val:
      my_hash = (my_hash * 1024) + hash(v)
  elif isinstance(val, dict):
    for k in sorted(val.keys()):
      my_hash = (my_hash * 2048) + (hash(k) * 1024) + hash(val[k])
  else:
    my_hash += hash(val)

  return my_hash


def _hash_attr(obj: Any, *attributes: str, **kwargs: Any) -> int:
  """
  Provide a hash value for the given set of attributes.

  :param obj: object to be hashed
  :param attributes: attribute names to take into account
  :param cache: persists hash in a '_cached_hash' object attribute

  :returns: **int** object hash
  """

  is_cached = kwargs.get('cache', False)
  cached_hash = getattr(obj, '_cached_hash', None)

  if is_cached and cached_hash is not None:
    return cached_hash

  my_hash = hash(str(type(obj)))

  for attr in attributes:
    val = getattr(obj, attr)
    my_hash = my_hash * 1024 + _hash_value(val)

  if is_cached:
    object.__setattr__(obj, '_cached_hash', my_hash)

  return my_hash


def _compare_attr(obj: Any, other: Any, *attributes: str) -> bool:
  """
  Compares objects by the given set of attributes. Hashes can collide, so
  equality checks the attribute values themselves.

  :param obj: object to be compared
  :param other: object to compare against
  :param attributes: attribute names to take into account

  :returns: **True** if both are of the same type and have equal attributes,
    **False** otherwise
  """

  if type(obj) != type(other):
    return False

  return all([getattr(obj, attr) == getattr(other, attr) for attr in attributes])
