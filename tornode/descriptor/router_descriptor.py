# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Router descriptors, which contain the infrequently changing information a node
advertises about itself (nickname, contact information, exit policy, public
keys, etc).

Descriptors are immutable snapshots. Changes are made by constructing a new
descriptor through :func:`~tornode.descriptor.router_descriptor.RouterDescriptor.replace`,
which validates the result the same as construction does.

::

  >>> from tornode.descriptor.router_descriptor import RouterDescriptor
  >>> desc = RouterDescriptor.blank()
  >>> desc.is_configured()
  False
  >>> desc = desc.replace(nickname = 'caerSidi', onion_key = ONION_KEY, signing_key = SIGNING_KEY, fingerprint = FINGERPRINT)
  >>> desc.can_exit_to('75.119.206.243', 80)
  False

**Module Overview:**

::

  RouterDescriptor - Descriptor for a node.
    |- blank - template for a node that isn't yet configured
    |- replace - copy of this descriptor with some attributes changed
    |- is_configured - checks if we have our key material
    |- decide - exit policy decision for a destination
    +- can_exit_to - checks if we allow exiting to a destination
"""

import datetime

import tornode
import tornode.exit_policy
import tornode.util
import tornode.util.connection
import tornode.util.tor_tools

from tornode.descriptor import UNSET, BandwidthHistory, FamilyMember, ORAddress, _check_type
from tornode.util import log

from typing import Any, Dict, Tuple

DEFAULT_PLATFORM = 'tornode %s' % tornode.__version__
UNIX_EPOCH = datetime.datetime(1970, 1, 1)

# attributes that must be provided when constructing a descriptor

REQUIRED_ATTRIBUTES = (
  'nickname',
  'address',
  'or_port',
  'fingerprint',
  'onion_key',
  'signing_key',
)

# optional attributes with their default values

ATTRIBUTES = {
  'dir_port': None,
  'ntor_onion_key': None,
  'signature': b'',

  'hibernating': False,
  'extra_info_cache': False,
  'allow_single_hop_exits': False,
  'link_protocols': (),
  'circuit_protocols': (),
  'extra_info_digest': None,
  'hidden_service_dir': None,
  'platform': DEFAULT_PLATFORM,
  'published': UNIX_EPOCH,
  'status': (),

  'average_bandwidth': 0,
  'burst_bandwidth': 0,
  'observed_bandwidth': 0,
  'uptime': None,
  'read_history': None,
  'write_history': None,

  'contact': None,
  'family': (),
  'or_addresses': (),
  'parse_log': (),

  'exit_policy': None,
}


class RouterDescriptor(object):
  """
  Descriptor for a node, describing both who it is and where it will allow
  traffic to exit.

  **\\*** attribute is required when constructing a descriptor

  :var str nickname: **\\*** node's nickname, empty if it hasn't been named
  :var str address: **\\*** IPv4 address of the node
  :var int or_port: **\\*** port used for relaying
  :var int dir_port: port used for directory requests, **None** if we don't serve them
  :var str fingerprint: **\\*** uppercase identity key fingerprint, empty if unknown
  :var str onion_key: **\\*** key used to encrypt EXTEND cells
  :var str signing_key: **\\*** identity key that signs our descriptor
  :var str ntor_onion_key: base64 key used for ntor handshakes
  :var bytes signature: signature for this descriptor

  :var bool hibernating: if the node is hibernating and won't accept traffic
  :var bool extra_info_cache: if the node caches extra-info documents
  :var bool allow_single_hop_exits: if single hop exits are permitted
  :var tuple link_protocols: link protocol versions we support
  :var tuple circuit_protocols: circuit protocol versions we support
  :var str extra_info_digest: upper-case hex encoded digest of our extra-info document
  :var int hidden_service_dir: hidden service descriptor version we serve, **None** if we don't
  :var str platform: software this node is running
  :var datetime published: time in UTC when this descriptor was made
  :var tuple status: status flags of the node

  :var int average_bandwidth: average rate we're willing to relay in bytes/s
  :var int burst_bandwidth: burst rate we're willing to relay in bytes/s
  :var int observed_bandwidth: estimated capacity based on usage in bytes/s
  :var int uptime: uptime when published in seconds, **None** if unknown
  :var BandwidthHistory read_history: bytes received, **None** if unknown
  :var BandwidthHistory write_history: bytes sent, **None** if unknown

  :var str contact: contact information, **None** if unspecified
  :var tuple family: :class:`~tornode.descriptor.FamilyMember` operated by the same party as us
  :var tuple or_addresses: :class:`~tornode.descriptor.ORAddress` where we also accept connections
  :var tuple parse_log: notices about values we adjusted while constructing the descriptor

  :var ExitPolicy exit_policy: destinations we will and won't relay traffic to,
    reading this requires our keys

  :raises:
    * **ValueError** if an attribute is malformed
    * **TypeError** if provided with unrecognized attributes
  """

  def __init__(self, nickname: str, address: str, or_port: int, fingerprint: str, onion_key: Any, signing_key: Any, **kwargs: Any) -> None:
    unrecognized = set(kwargs).difference(ATTRIBUTES)

    if unrecognized:
      raise TypeError('RouterDescriptor has no attribute named %s' % ', '.join(sorted(unrecognized)))

    attr = dict(ATTRIBUTES)
    attr.update(kwargs)
    attr.update({
      'nickname': nickname,
      'address': address,
      'or_port': or_port,
      'fingerprint': fingerprint,
      'onion_key': onion_key,
      'signing_key': signing_key,
    })

    notices = []

    _check_type('nickname', nickname, str)

    if nickname and not tornode.util.tor_tools.is_valid_nickname(nickname):
      raise ValueError("Nickname must be 1-19 alphanumeric characters: %s" % nickname)
    elif not nickname:
      notices.append("no nickname has been set, so this descriptor can't be published")

    if not tornode.util.connection.is_valid_ipv4_address(address):
      raise ValueError("'%s' isn't a valid IPv4 address" % address)

    for port_attr in ('or_port', 'dir_port'):
      port = attr[port_attr]

      if port is None and port_attr == 'dir_port':
        continue
      elif isinstance(port, bool) or not isinstance(port, int) or not tornode.util.connection.is_valid_port(port, allow_zero = True):
        raise ValueError("%s must be a port from 0-65535: %s" % (port_attr, port))

    _check_type('fingerprint', fingerprint, str)

    if fingerprint:
      if not tornode.util.tor_tools.is_valid_fingerprint(fingerprint):
        raise ValueError('Fingerprint must be forty hex digits: %s' % fingerprint)
      elif fingerprint != fingerprint.upper():
        notices.append('fingerprint normalized to uppercase')
        attr['fingerprint'] = fingerprint.upper()

    for key_attr in ('onion_key', 'signing_key'):
      if attr[key_attr] is not UNSET:
        _check_type(key_attr, attr[key_attr], (str, bytes))

    _check_type('ntor_onion_key', attr['ntor_onion_key'], (str, bytes), optional = True)
    _check_type('signature', attr['signature'], bytes)

    for bool_attr in ('hibernating', 'extra_info_cache', 'allow_single_hop_exits'):
      _check_type(bool_attr, attr[bool_attr], bool)

    for protocols_attr in ('link_protocols', 'circuit_protocols'):
      attr[protocols_attr] = tuple(attr[protocols_attr])

      for version in attr[protocols_attr]:
        if isinstance(version, bool) or not isinstance(version, int) or version < 1:
          raise ValueError('%s must be positive integers: %s' % (protocols_attr, attr[protocols_attr]))

    _check_type('extra_info_digest', attr['extra_info_digest'], str, optional = True)

    if attr['extra_info_digest'] is not None:
      if not tornode.util.tor_tools.is_hex_digits(attr['extra_info_digest'], 40):
        raise ValueError('Extra-info digest must be forty hex digits: %s' % attr['extra_info_digest'])

      attr['extra_info_digest'] = attr['extra_info_digest'].upper()

    _check_type('hidden_service_dir', attr['hidden_service_dir'], int, optional = True)
    _check_type('platform', attr['platform'], str)
    _check_type('published', attr['published'], datetime.datetime)
    attr['status'] = tuple(attr['status'])

    for bandwidth_attr in ('average_bandwidth', 'burst_bandwidth', 'observed_bandwidth', 'uptime'):
      value = attr[bandwidth_attr]

      if value is None and bandwidth_attr == 'uptime':
        continue

      _check_type(bandwidth_attr, value, int)

      if value < 0:
        raise ValueError('%s must be non-negative: %i' % (bandwidth_attr, value))

    if attr['average_bandwidth'] > attr['burst_bandwidth']:
      notices.append('average bandwidth (%i) exceeds the burst bandwidth (%i)' % (attr['average_bandwidth'], attr['burst_bandwidth']))

    _check_type('read_history', attr['read_history'], BandwidthHistory, optional = True)
    _check_type('write_history', attr['write_history'], BandwidthHistory, optional = True)
    _check_type('contact', attr['contact'], str, optional = True)

    attr['family'] = tuple([_to_family_member(entry) for entry in attr['family']])
    attr['or_addresses'] = tuple([entry if isinstance(entry, ORAddress) else ORAddress(*entry) for entry in attr['or_addresses']])

    exit_policy = attr['exit_policy']

    if exit_policy is None:
      notices.append('no exit policy provided, rejecting all destinations')
      exit_policy = tornode.exit_policy.ExitPolicy()
    elif not isinstance(exit_policy, tornode.exit_policy.ExitPolicy):
      exit_policy = tornode.exit_policy.ExitPolicy(*exit_policy)

    attr['exit_policy'] = exit_policy

    # replace() starts from what we were given, so notices aren't repeated

    attr['_provided_parse_log'] = tuple(attr['parse_log'])
    attr['parse_log'] = attr['_provided_parse_log'] + tuple(notices)

    for notice in notices:
      log.debug('Router descriptor %s: %s' % (nickname if nickname else '(unnamed)', notice))

    attr['_onion_key'] = attr.pop('onion_key')
    attr['_signing_key'] = attr.pop('signing_key')
    attr['_exit_policy'] = attr.pop('exit_policy')

    for name, value in attr.items():
      object.__setattr__(self, name, value)

  @classmethod
  def blank(cls) -> 'tornode.descriptor.router_descriptor.RouterDescriptor':
    """
    Provides a template for a node that has not yet been configured. This
    lacks a nickname, address, and ports, and has placeholders for its keys.
    Its exit policy rejects everything.

    :returns: :class:`~tornode.descriptor.router_descriptor.RouterDescriptor`
      template
    """

    return cls('', '0.0.0.0', 0, '', UNSET, UNSET)

  @property
  def onion_key(self) -> Any:
    self._check_keys('read the onion key')
    return self._onion_key

  @property
  def signing_key(self) -> Any:
    self._check_keys('read the signing key')
    return self._signing_key

  @property
  def exit_policy(self) -> 'tornode.exit_policy.ExitPolicy':
    self._check_keys('read the exit policy')
    return self._exit_policy

  def is_configured(self) -> bool:
    """
    Checks if this descriptor has been provided with its key material and
    fingerprint.

    :returns: **True** if we're configured, **False** otherwise
    """

    return self._onion_key is not UNSET and self._signing_key is not UNSET and bool(self.fingerprint)

  def decide(self, address: str, port: int) -> str:
    """
    Provides the :data:`~tornode.exit_policy.Action` our exit policy has for a
    destination.

    :param address: IPv4 or IPv6 address (with or without brackets)
    :param port: port number

    :returns: :data:`~tornode.exit_policy.Action` for the destination

    :raises:
      * :class:`~tornode.UninitializedKeyMaterial` if our keys haven't been set
      * **ValueError** if provided with a malformed address or port
    """

    self._check_keys('make exit decisions')
    return self.exit_policy.decide(address, port)

  def can_exit_to(self, address: str, port: int) -> bool:
    """
    Checks if our exit policy allows exiting to a destination.

    :param address: IPv4 or IPv6 address (with or without brackets)
    :param port: port number

    :returns: **True** if exiting to this destination is allowed, **False** otherwise

    :raises:
      * :class:`~tornode.UninitializedKeyMaterial` if our keys haven't been set
      * **ValueError** if provided with a malformed address or port
    """

    return self.decide(address, port) == tornode.exit_policy.Action.ACCEPT

  def replace(self, **changes: Any) -> 'tornode.descriptor.router_descriptor.RouterDescriptor':
    """
    Provides a copy of this descriptor with the given attributes changed.

    :param changes: attributes to be changed

    :returns: new :class:`~tornode.descriptor.router_descriptor.RouterDescriptor`

    :raises:
      * **ValueError** if a changed attribute is malformed
      * **TypeError** if provided with unrecognized attributes
    """

    attr = self._attributes()
    attr['parse_log'] = self._provided_parse_log
    attr.update(changes)

    return RouterDescriptor(**attr)

  def _attributes(self) -> Dict[str, Any]:
    attr = dict([(name, getattr(self, name)) for name in REQUIRED_ATTRIBUTES if name not in ('onion_key', 'signing_key')])
    attr.update([(name, getattr(self, name)) for name in ATTRIBUTES if name != 'exit_policy'])
    attr['onion_key'] = self._onion_key
    attr['signing_key'] = self._signing_key
    attr['exit_policy'] = self._exit_policy

    return attr

  def _check_keys(self, action: str) -> None:
    for name, value in (('onion key', self._onion_key), ('signing key', self._signing_key)):
      if value is UNSET:
        raise tornode.UninitializedKeyMaterial('Unable to %s, %s has no %s' % (action, self._label(), name))

  def _label(self) -> str:
    return "'%s'" % self.nickname if self.nickname else 'unconfigured descriptor'

  def __setattr__(self, name: str, value: Any) -> None:
    raise AttributeError('RouterDescriptor is immutable, use replace() to change its %s' % name)

  def __delattr__(self, name: str) -> None:
    raise AttributeError('RouterDescriptor is immutable, unable to delete its %s' % name)

  def __hash__(self) -> int:
    attr = self._attributes()
    return tornode.util._hash_attr(self, *_hashed_attributes(attr), cache = True)

  def __eq__(self, other: Any) -> bool:
    return tornode.util._compare_attr(self, other, *_hashed_attributes(self._attributes()))

  def __ne__(self, other: Any) -> bool:
    return not self == other

  def __repr__(self) -> str:
    return '<RouterDescriptor %s %s:%i %s>' % (self.nickname if self.nickname else '(unnamed)', self.address, self.or_port, self.fingerprint if self.fingerprint else '(no fingerprint)')


def _hashed_attributes(attr: Dict[str, Any]) -> Tuple[str, ...]:
  # guarded attributes are stored under private names and parse_log doesn't
  # affect identity

  names = []  # type: list

  for name in sorted(attr):
    if name in ('onion_key', 'signing_key', 'exit_policy'):
      names.append('_' + name)
    elif name != 'parse_log':
      names.append(name)

  return tuple(names)


def _to_family_member(entry: Any) -> FamilyMember:
  # family entries are either '$fingerprint', '$fingerprint~nickname', or a
  # nickname

  if isinstance(entry, FamilyMember):
    return entry
  elif isinstance(entry, str):
    if entry.startswith('$'):
      fingerprint, nickname = entry[1:].split('~', 1) if '~' in entry else (entry[1:], None)
      return FamilyMember(fingerprint, nickname)

    return FamilyMember(None, entry)
  else:
    return FamilyMember(*entry)
