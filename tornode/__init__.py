# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Library for configuring an onion routing node and deciding where it may relay
traffic to.

**Module Overview:**

::

  TorNodeError - Base exception raised by this library.
    |- InvalidAddressSpec - Malformed address, mask, or prefix length.
    |- InvalidPortSpec - Malformed port or port range.
    +- UninitializedKeyMaterial - Placeholder key material used for a live decision.
"""

__version__ = '1.0.0'
__author__ = 'Damian Johnson'
__contact__ = 'atagar@torproject.org'
__license__ = 'LGPLv3'

__all__ = [
  'descriptor',
  'exit_policy',
  'node',
  'options',
  'util',

  'TorNodeError',
  'InvalidAddressSpec',
  'InvalidPortSpec',
  'UninitializedKeyMaterial',
]


class TorNodeError(Exception):
  'Base error for tornode.'


class InvalidAddressSpec(TorNodeError, ValueError):
  """
  Address specification couldn't be constructed, either because its address
  or mask is malformed or its prefix length is out of range for the address
  family.
  """


class InvalidPortSpec(TorNodeError, ValueError):
  """
  Port specification couldn't be constructed, either because a port is
  outside 0-65535 or a range's lower bound exceeds its upper bound.
  """


class UninitializedKeyMaterial(TorNodeError):
  """
  Attempted to use the identity or signing keys of a descriptor that hasn't
  been configured with them yet.
  """
