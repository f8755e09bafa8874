# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Thread safe holder for the descriptors a node knows about: its own current
descriptor and those of its peers.

Descriptors are immutable, so readers simply get the present snapshot.
Writers install replacements while holding our lock, copying the peer mapping
rather than modifying it so a snapshot provided earlier never changes.

**Module Overview:**

::

  DescriptorStore - Descriptors known by a node.
    |- current - our own present descriptor
    |- publish - replaces our own descriptor
    |- add_peer - adds or replaces the descriptor of a peer
    |- remove_peer - drops the descriptor of a peer
    |- get_peer - provides the descriptor of a peer
    |- peers - snapshot of the peers we know about
    |- __len__ - number of peers we know about
    +- __contains__ - checks if we have a peer with the given fingerprint
"""

import threading

import tornode.descriptor.router_descriptor

from tornode.util import log

from typing import Any, Dict, Optional

RouterDescriptor = tornode.descriptor.router_descriptor.RouterDescriptor


class DescriptorStore(object):
  """
  Descriptors known by a node. All operations are thread safe.

  :param RouterDescriptor current: our initial descriptor, a blank template if
    unset
  """

  def __init__(self, current: Optional[RouterDescriptor] = None) -> None:
    if current is None:
      current = RouterDescriptor.blank()
    elif not isinstance(current, RouterDescriptor):
      raise TypeError('Only RouterDescriptors can be stored, got a %s' % type(current).__name__)

    self._current = current
    self._peers = {}  # type: Dict[str, RouterDescriptor]
    self._lock = threading.RLock()

  @property
  def current(self) -> RouterDescriptor:
    """
    Our own present descriptor.
    """

    return self._current

  def publish(self, descriptor: RouterDescriptor) -> RouterDescriptor:
    """
    Replaces our own descriptor.

    :param descriptor: descriptor we now advertise

    :returns: :class:`~tornode.descriptor.router_descriptor.RouterDescriptor`
      that was replaced

    :raises: **TypeError** if not provided a RouterDescriptor
    """

    if not isinstance(descriptor, RouterDescriptor):
      raise TypeError('Only RouterDescriptors can be published, got a %s' % type(descriptor).__name__)

    with self._lock:
      previous, self._current = self._current, descriptor

    log.debug('Published descriptor %r' % descriptor)
    return previous

  def add_peer(self, descriptor: RouterDescriptor) -> None:
    """
    Adds the descriptor of a peer, replacing any we have with the same
    fingerprint.

    :param descriptor: descriptor of the peer

    :raises:
      * **TypeError** if not provided a RouterDescriptor
      * **ValueError** if the descriptor lacks a fingerprint
    """

    if not isinstance(descriptor, RouterDescriptor):
      raise TypeError('Only RouterDescriptors can be stored, got a %s' % type(descriptor).__name__)
    elif not descriptor.fingerprint:
      raise ValueError('Peer descriptors must have a fingerprint: %r' % descriptor)

    with self._lock:
      peers = dict(self._peers)
      is_replacement = descriptor.fingerprint in peers
      peers[descriptor.fingerprint] = descriptor
      self._peers = peers

    log.trace('%s peer %s' % ('Updated' if is_replacement else 'Added', descriptor.fingerprint))

  def remove_peer(self, fingerprint: str) -> Optional[RouterDescriptor]:
    """
    Drops the descriptor of a peer.

    :param fingerprint: fingerprint of the peer to be removed

    :returns: :class:`~tornode.descriptor.router_descriptor.RouterDescriptor`
      that we removed, **None** if we didn't have one
    """

    fingerprint = fingerprint.upper()

    with self._lock:
      if fingerprint not in self._peers:
        return None

      peers = dict(self._peers)
      removed = peers.pop(fingerprint)
      self._peers = peers

    log.trace('Removed peer %s' % fingerprint)
    return removed

  def get_peer(self, fingerprint: str, default: Any = None) -> Any:
    """
    Provides the descriptor of a peer.

    :param fingerprint: fingerprint of the peer
    :param default: response if we don't have this peer

    :returns: :class:`~tornode.descriptor.router_descriptor.RouterDescriptor`
      for the peer, or the default if we don't have it
    """

    return self._peers.get(fingerprint.upper(), default)

  def peers(self) -> Dict[str, RouterDescriptor]:
    """
    Provides the peers we know about. Changes to this dictionary do not
    affect us.

    :returns: **dict** of fingerprints to their descriptor
    """

    return dict(self._peers)

  def __len__(self) -> int:
    return len(self._peers)

  def __contains__(self, fingerprint: Any) -> bool:
    return isinstance(fingerprint, str) and fingerprint.upper() in self._peers
