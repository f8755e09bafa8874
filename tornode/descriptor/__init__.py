# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Information a node publishes about itself and knows about its peers.

**Module Overview:**

::

  BandwidthHistory - bytes transferred over a series of intervals
  FamilyMember - node that's operated by the same party as us
  ORAddress - additional address where a node accepts connections

  router_descriptor - the descriptor a node advertises
  store - the current descriptor along with the peers we know about

.. data:: UNSET

  Placeholder for key material that hasn't been provided yet. Using a
  descriptor's keys while they're in this state raises
  :class:`~tornode.UninitializedKeyMaterial`.
"""

import collections
import datetime

import tornode.util.connection
import tornode.util.tor_tools

from typing import Any, Optional, Sequence

__all__ = [
  'router_descriptor',
  'store',

  'BandwidthHistory',
  'FamilyMember',
  'ORAddress',
  'UNSET',
]


class _Unset(object):
  """
  Key material placeholder. There's only one instance of this.
  """

  def __repr__(self) -> str:
    return 'UNSET'

  def __bool__(self) -> bool:
    return False


UNSET = _Unset()


class BandwidthHistory(collections.namedtuple('BandwidthHistory', ['start', 'interval', 'values'])):
  """
  Bytes transferred by a node, grouped into intervals.

  :var datetime start: when the first interval began
  :var int interval: seconds covered by each value
  :var tuple values: number of bytes transferred in each interval
  """

  def __new__(cls, start: datetime.datetime, interval: int, values: Sequence[int]) -> 'BandwidthHistory':
    if not isinstance(start, datetime.datetime):
      raise ValueError('Bandwidth history should start with a datetime, got a %s (%s)' % (type(start).__name__, start))
    elif isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
      raise ValueError('Bandwidth history intervals must be a positive integer: %s' % (interval,))

    values = tuple(values)

    for value in values:
      if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError('Bandwidth history values must be non-negative integers: %s' % (values,))

    return super(BandwidthHistory, cls).__new__(cls, start, interval, values)

  def end(self) -> datetime.datetime:
    """
    Provides when the last interval of this history ends.

    :returns: **datetime** for the end of this history
    """

    return self.start + datetime.timedelta(seconds = self.interval * len(self.values))


class FamilyMember(collections.namedtuple('FamilyMember', ['fingerprint', 'nickname'])):
  """
  Node that's operated by the same party as us. At least one of these
  attributes is set.

  :var str fingerprint: identity fingerprint of the node, **None** if unknown
  :var str nickname: nickname of the node, **None** if unknown
  """

  def __new__(cls, fingerprint: Optional[str] = None, nickname: Optional[str] = None) -> 'FamilyMember':
    if fingerprint is None and nickname is None:
      raise ValueError('Family members need a fingerprint or nickname')
    elif fingerprint is not None and not tornode.util.tor_tools.is_valid_fingerprint(fingerprint):
      raise ValueError("'%s' isn't a valid fingerprint" % fingerprint)
    elif nickname is not None and not tornode.util.tor_tools.is_valid_nickname(nickname):
      raise ValueError("'%s' isn't a valid nickname" % nickname)

    if fingerprint is not None:
      fingerprint = fingerprint.upper()

    return super(FamilyMember, cls).__new__(cls, fingerprint, nickname)

  def __str__(self) -> str:
    if self.fingerprint and self.nickname:
      return '$%s~%s' % (self.fingerprint, self.nickname)
    elif self.fingerprint:
      return '$%s' % self.fingerprint
    else:
      return self.nickname


class ORAddress(collections.namedtuple('ORAddress', ['address', 'port'])):
  """
  Additional address and port where a node accepts relay connections.

  :var str address: IPv4 or IPv6 address
  :var int port: port the node listens on
  """

  def __new__(cls, address: str, port: int) -> 'ORAddress':
    if tornode.util.connection.is_valid_ipv6_address(address, allow_brackets = True):
      address = address.lstrip('[').rstrip(']')
    elif not tornode.util.connection.is_valid_ipv4_address(address):
      raise ValueError("'%s' isn't a valid IPv4 or IPv6 address" % address)

    if isinstance(port, bool) or not tornode.util.connection.is_valid_port(port):
      raise ValueError("'%s' isn't a valid port" % port)

    return super(ORAddress, cls).__new__(cls, address, int(port))

  def is_ipv6(self) -> bool:
    return ':' in self.address

  def __str__(self) -> str:
    return ('[%s]:%i' if self.is_ipv6() else '%s:%i') % (self.address, self.port)


def _check_type(attr: str, value: Any, expected_type: Any, optional: bool = False) -> None:
  if optional and value is None:
    return
  elif isinstance(value, bool) and expected_type is int:
    raise ValueError('%s should be an int, got a bool' % attr)
  elif not isinstance(value, expected_type):
    raise ValueError('%s should be a %s, got a %s (%s)' % (attr, getattr(expected_type, '__name__', expected_type), type(value).__name__, value))
