# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Ties a node's options to the descriptor it advertises and the exit decisions
it makes. For example...

::

  from tornode.node import Node
  from tornode.options import NodeOptions, ExitOptions

  node = Node(NodeOptions(exit = ExitOptions()))
  node.update_descriptor(fingerprint = FINGERPRINT, onion_key = ONION_KEY, signing_key = SIGNING_KEY)

  if node.can_exit_to('75.119.206.243', 443):
    print('we can relay https traffic')

**Module Overview:**

::

  Node - Onion routing node.
    |- is_entrance - checks if we build circuits for clients
    |- is_relay - checks if we relay traffic for other nodes
    |- is_exit - checks if we relay traffic out of the network
    |- descriptor - our current descriptor
    |- store - descriptors we know about
    |- update_descriptor - replaces our descriptor with a revised copy
    |- decide - exit decision for a destination
    |- can_exit_to - checks if we'll relay traffic to a destination
    +- log - reports a message through our logger
"""

import tornode.descriptor.router_descriptor
import tornode.descriptor.store
import tornode.exit_policy
import tornode.options

from tornode.util import log
from tornode.util.str_tools import size_label

from typing import Any, Optional


class Node(object):
  """
  Onion routing node. This keeps our descriptor, which is seeded from our
  options, and makes exit decisions with its policy.

  :var NodeOptions options: options we were configured with

  :param NodeOptions options: options for our roles, acting as an entrance
    and relay if unset

  :raises: **TypeError** if options are of the wrong type
  """

  def __init__(self, options: Optional['tornode.options.NodeOptions'] = None) -> None:
    if options is None:
      options = tornode.options.NodeOptions()
    elif not isinstance(options, tornode.options.NodeOptions):
      raise TypeError('Node options must be a NodeOptions, got a %s' % type(options).__name__)

    self.options = options

    descriptor_attr = {}

    if options.relay:
      descriptor_attr['nickname'] = options.relay.nickname
      descriptor_attr['or_port'] = options.relay.onion_port
      descriptor_attr['contact'] = options.relay.contact

    if options.exit:
      descriptor_attr['exit_policy'] = options.exit.exit_policy
    else:
      descriptor_attr['exit_policy'] = tornode.exit_policy.ExitPolicy()

    descriptor = tornode.descriptor.router_descriptor.RouterDescriptor.blank().replace(**descriptor_attr)
    self._store = tornode.descriptor.store.DescriptorStore(descriptor)

    roles = options.roles()

    if roles:
      self.log('Starting node with the %s role%s' % (', '.join(roles).lower(), 's' if len(roles) > 1 else ''))
    else:
      self.log('Starting node without any roles')

    if options.exit:
      self.log('Exit policy: %s' % options.exit.exit_policy.summary())

      if not options.relay:
        log.notice("We're an exit but not a relay, which is an unusual configuration")

  @property
  def is_entrance(self) -> bool:
    return self.options.entrance is not None

  @property
  def is_relay(self) -> bool:
    return self.options.relay is not None

  @property
  def is_exit(self) -> bool:
    return self.options.exit is not None

  @property
  def descriptor(self) -> 'tornode.descriptor.router_descriptor.RouterDescriptor':
    """
    Our current descriptor.
    """

    return self._store.current

  @property
  def store(self) -> 'tornode.descriptor.store.DescriptorStore':
    """
    Descriptors we know about, both our own and those of our peers.
    """

    return self._store

  def update_descriptor(self, **changes: Any) -> 'tornode.descriptor.router_descriptor.RouterDescriptor':
    """
    Replaces our descriptor with a copy that has the given changes. Our prior
    descriptor is left unchanged, so anything holding it continues to see
    the old values.

    :param changes: descriptor attributes to be changed

    :returns: our new :class:`~tornode.descriptor.router_descriptor.RouterDescriptor`

    :raises:
      * **ValueError** if a changed attribute is malformed
      * **TypeError** if provided with unrecognized attributes
    """

    descriptor = self._store.current.replace(**changes)
    self._store.publish(descriptor)
    self.log('Updated our descriptor (%s)' % ', '.join(sorted(changes)))

    if 'average_bandwidth' in changes or 'burst_bandwidth' in changes:
      self.log('Advertising a bandwidth of %s/s (burst %s/s)' % (size_label(descriptor.average_bandwidth), size_label(descriptor.burst_bandwidth)))

    return descriptor

  def decide(self, address: str, port: int) -> str:
    """
    Provides our :data:`~tornode.exit_policy.Action` for a destination. If
    we're not an exit then everything is rejected.

    :param address: IPv4 or IPv6 address (with or without brackets)
    :param port: port number

    :returns: :data:`~tornode.exit_policy.Action` for the destination

    :raises:
      * :class:`~tornode.UninitializedKeyMaterial` if our descriptor lacks its keys
      * **ValueError** if provided with a malformed address or port
    """

    if not self.is_exit:
      return tornode.exit_policy.Action.REJECT

    return self._store.current.decide(address, port)

  def can_exit_to(self, address: str, port: int) -> bool:
    """
    Checks if we'll relay traffic to a destination. This is always **False**
    if we're not an exit.

    :param address: IPv4 or IPv6 address (with or without brackets)
    :param port: port number

    :returns: **True** if we'll exit to this destination, **False** otherwise

    :raises:
      * :class:`~tornode.UninitializedKeyMaterial` if our descriptor lacks its keys
      * **ValueError** if provided with a malformed address or port
    """

    return self.decide(address, port) == tornode.exit_policy.Action.ACCEPT

  def log(self, message: str) -> None:
    """
    Reports a message through the logger we were configured with.

    :param message: message to be logged
    """

    log.info(message)
    self.options.log(message)
