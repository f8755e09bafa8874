# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Options for how a node should be set up. Each role a node can play (entrance,
relay, and exit) has its own options. A role's options being **None** means
the node doesn't operate in that capacity, while anything else enables it
(even if all its values are defaults).

::

  >>> from tornode.options import NodeOptions, ExitOptions
  >>> options = NodeOptions(exit = ExitOptions())
  >>> options.roles()
  ('Entrance', 'Relay', 'Exit')
  >>> print(options.exit.exit_policy)
  accept *:22, accept *:80, accept *:443, accept *:465, accept *:993

Options can also be read from a configuration file via
:func:`~tornode.options.NodeOptions.from_config`...

::

  entrance.enabled true
  entrance.circuit_length 6
  entrance.max_circuits 3
  entrance.max_connections 3

  relay.enabled true
  relay.onion_port 9374
  relay.nickname caerSidi
  relay.contact atagar@torproject.org

  exit.enabled true
  exit.rule accept *:80
  exit.rule accept *:443
  exit.ipv6_policy reject 25

**Module Overview:**

::

  EntranceOptions - options for building circuits on behalf of clients
  RelayOptions - options for relaying traffic of other nodes
  ExitOptions - options for relaying traffic out of the network

  NodeOptions - options for all of a node's roles
    |- from_config - reads options from a configuration
    +- roles - roles that are enabled

.. data:: Role (enum)

  Capacity a node can operate in.

  ============ ===========
  Role         Description
  ============ ===========
  **ENTRANCE** builds circuits on behalf of local clients
  **RELAY**    relays traffic for other nodes
  **EXIT**     relays traffic out of the network
  ============ ===========
"""

import tornode.exit_policy
import tornode.util
import tornode.util.conf
import tornode.util.connection
import tornode.util.enum
import tornode.util.tor_tools

from tornode.util import log

from typing import Any, Callable, Optional, Sequence, Tuple, Union

Role = tornode.util.enum.Enum('ENTRANCE', 'RELAY', 'EXIT')

DEFAULT_CIRCUIT_LENGTH = 6
DEFAULT_MAX_CIRCUITS = 3
DEFAULT_MAX_CONNECTIONS = 3

DEFAULT_ONION_PORT = 9374

# ssh, http, https, smtps, and imaps
DEFAULT_EXIT_PORTS = (22, 80, 443, 465, 993)
DEFAULT_EXIT_RULES = tornode.exit_policy._rules_for_ports(tornode.exit_policy.Action.ACCEPT, DEFAULT_EXIT_PORTS)

# placeholder for role options we should construct with their defaults

_DEFAULT = object()


def _check_count(attr: str, value: Any, minimum: int) -> int:
  if isinstance(value, bool) or not isinstance(value, int):
    raise ValueError('%s must be an integer, got a %s (%s)' % (attr, type(value).__name__, value))
  elif value < minimum:
    raise ValueError('%s must be at least %i, got %i' % (attr, minimum, value))

  return value


def _config_bool(config: 'tornode.util.conf.Config', key: str, default: bool) -> bool:
  # unlike Config.get(), malformed values raise rather than providing the
  # default

  value = config.get_value(key, None)

  if value is None:
    return default
  elif value.lower() in ('true', 'false'):
    return value.lower() == 'true'

  log.warn("Config entry '%s' is expected to be 'true' or 'false', but was '%s'" % (key, value))
  raise ValueError("%s must be a boolean: %s" % (key, value))


def _config_int(config: 'tornode.util.conf.Config', key: str, default: int) -> int:
  value = config.get_value(key, None)

  if value is None:
    return default

  try:
    return int(value)
  except ValueError:
    log.warn("Config entry '%s' is expected to be an integer, but was '%s'" % (key, value))
    raise ValueError('%s must be an integer: %s' % (key, value))


class _Options(object):
  """
  Common parent for role options, providing comparison by value.
  """

  _ATTRIBUTES = ()  # type: Tuple[str, ...]

  def __hash__(self) -> int:
    return tornode.util._hash_attr(self, *self._ATTRIBUTES)

  def __eq__(self, other: Any) -> bool:
    return tornode.util._compare_attr(self, other, *self._ATTRIBUTES)

  def __ne__(self, other: Any) -> bool:
    return not self == other

  def __repr__(self) -> str:
    return '%s(%s)' % (type(self).__name__, ', '.join(['%s = %r' % (attr, getattr(self, attr)) for attr in self._ATTRIBUTES]))


class EntranceOptions(_Options):
  """
  Options for building circuits on behalf of local clients. Circuits consist of
  our entrance, a number of intermediate hops, and then an exit.

  :var int circuit_length: number of intermediate hops between us and the exit
  :var int max_circuits: most circuits we keep open, further requests re-use
    these circuits
  :var int max_connections: most direct connections we keep open, if this is
    below max_circuits then some circuits share their first hop
  """

  _ATTRIBUTES = ('circuit_length', 'max_circuits', 'max_connections')

  def __init__(self, circuit_length: int = DEFAULT_CIRCUIT_LENGTH, max_circuits: int = DEFAULT_MAX_CIRCUITS, max_connections: int = DEFAULT_MAX_CONNECTIONS) -> None:
    self.circuit_length = _check_count('circuit_length', circuit_length, 0)
    self.max_circuits = _check_count('max_circuits', max_circuits, 1)
    self.max_connections = _check_count('max_connections', max_connections, 1)


class RelayOptions(_Options):
  """
  Options for relaying traffic of other nodes.

  :var int onion_port: port we listen on for relay connections
  :var str nickname: name we're listed under, this is optional but helps
    with finding ourselves in node listings
  :var str contact: contact information for our operator, **None** if not
    provided
  """

  _ATTRIBUTES = ('onion_port', 'nickname', 'contact')

  def __init__(self, onion_port: int = DEFAULT_ONION_PORT, nickname: str = '', contact: Optional[str] = None) -> None:
    if isinstance(onion_port, bool) or not isinstance(onion_port, int) or not tornode.util.connection.is_valid_port(onion_port):
      raise ValueError('onion_port must be a port from 1-65535: %s' % (onion_port,))
    elif not isinstance(nickname, str) or (nickname and not tornode.util.tor_tools.is_valid_nickname(nickname)):
      raise ValueError('nickname must be 1-19 alphanumeric characters: %s' % (nickname,))
    elif contact is not None and not isinstance(contact, str):
      raise ValueError('contact must be a string: %s' % (contact,))

    self.onion_port = onion_port
    self.nickname = nickname
    self.contact = contact


class ExitOptions(_Options):
  """
  Options for relaying traffic out of the network. Our rules are checked
  when constructed, so invalid rules prevent the exit role from being
  configured.

  :var tuple rules: :class:`~tornode.exit_policy.ExitRule` for IPv4
    destinations, in the order they're evaluated
  :var IPv6Policy ipv6_policy: policy for IPv6 destinations
  :var ExitPolicy exit_policy: policy made from the above

  :param list rules: **str** or :class:`~tornode.exit_policy.ExitRule`
    entries, by default this accepts ssh, http, https, smtps, and imaps
  :param IPv6Policy ipv6_policy: policy for IPv6 destinations, this rejects
    everything if unset

  :raises:
    * **ValueError** if a rule is malformed
    * **TypeError** if a rule isn't a string or ExitRule
  """

  _ATTRIBUTES = ('exit_policy',)

  def __init__(self, rules: Sequence[Union[str, 'tornode.exit_policy.ExitRule']] = DEFAULT_EXIT_RULES, ipv6_policy: Optional[Union[str, 'tornode.exit_policy.IPv6Policy']] = None) -> None:
    if isinstance(rules, (str, bytes)):
      raise TypeError('Exit rules should be a list, not a single string: %s' % rules)

    self.exit_policy = tornode.exit_policy.ExitPolicy(*rules, ipv6_policy = ipv6_policy)
    self.rules = self.exit_policy.rules
    self.ipv6_policy = self.exit_policy.ipv6_policy

    log.debug('Exit policy configured: %s (ipv6: %s)' % (self.exit_policy, self.ipv6_policy))


class NodeOptions(object):
  """
  Options for all of a node's roles. By default we act as an entrance and
  relay, but not an exit.

  :var function log: callable that's provided our log messages
  :var EntranceOptions entrance: entrance options, **None** if we're not an entrance
  :var RelayOptions relay: relay options, **None** if we're not a relay
  :var ExitOptions exit: exit options, **None** if we're not an exit

  :param function log: callable that's provided log messages, prints them
    with a timestamp if unset
  :param EntranceOptions entrance: entrance options, **None** to disable
  :param RelayOptions relay: relay options, **None** to disable
  :param ExitOptions exit: exit options, **None** to disable

  :raises: **TypeError** if a role's options are of the wrong type
  """

  def __init__(self, log: Optional[Callable[[str], None]] = None, entrance: Optional[EntranceOptions] = _DEFAULT, relay: Optional[RelayOptions] = _DEFAULT, exit: Optional[ExitOptions] = None) -> None:
    if entrance is _DEFAULT:
      entrance = EntranceOptions()

    if relay is _DEFAULT:
      relay = RelayOptions()

    for attr, value, expected_type in (('entrance', entrance, EntranceOptions), ('relay', relay, RelayOptions), ('exit', exit, ExitOptions)):
      if value is not None and not isinstance(value, expected_type):
        raise TypeError('%s options must be a %s, got a %s' % (attr, expected_type.__name__, type(value).__name__))

    if log is None:
      log = tornode.util.log.make_logger(print)
    elif not callable(log):
      raise TypeError('log must be callable, got a %s' % type(log).__name__)

    self.log = log
    self.entrance = entrance
    self.relay = relay
    self.exit = exit

  @staticmethod
  def from_config(config: 'tornode.util.conf.Config', log: Optional[Callable[[str], None]] = None) -> 'tornode.options.NodeOptions':
    """
    Reads our options from a configuration. Missing values use our defaults,
    so an empty configuration provides an entrance and relay.

    :param config: configuration to read from
    :param log: callable that's provided log messages

    :returns: :class:`~tornode.options.NodeOptions` from the configuration

    :raises: **ValueError** if the configuration has invalid values, such as
      a malformed exit rule, or a role switch or count that isn't a boolean or
      integer
    """

    entrance, relay, exit = None, None, None

    if _config_bool(config, 'entrance.enabled', True):
      entrance = EntranceOptions(
        circuit_length = _config_int(config, 'entrance.circuit_length', DEFAULT_CIRCUIT_LENGTH),
        max_circuits = _config_int(config, 'entrance.max_circuits', DEFAULT_MAX_CIRCUITS),
        max_connections = _config_int(config, 'entrance.max_connections', DEFAULT_MAX_CONNECTIONS),
      )

    if _config_bool(config, 'relay.enabled', True):
      relay = RelayOptions(
        onion_port = _config_int(config, 'relay.onion_port', DEFAULT_ONION_PORT),
        nickname = config.get('relay.nickname', ''),
        contact = config.get('relay.contact', None) or None,
      )

    exit_rules = config.get('exit.rule', [])
    ipv6_policy = config.get('exit.ipv6_policy', None)

    if _config_bool(config, 'exit.enabled', False):
      try:
        exit = ExitOptions(exit_rules if exit_rules else DEFAULT_EXIT_RULES, ipv6_policy)
      except ValueError as exc:
        tornode.util.log.warn('Unable to configure our exit role: %s' % exc)
        raise
    elif exit_rules or ipv6_policy:
      tornode.util.log.notice("Our configuration has exit rules but 'exit.enabled' isn't true, so they're being ignored")

    return NodeOptions(log, entrance, relay, exit)

  def roles(self) -> Tuple[str, ...]:
    """
    Provides the roles that are enabled.

    :returns: **tuple** of :data:`~tornode.options.Role` we're configured for
    """

    enabled = []

    for role, role_options in ((Role.ENTRANCE, self.entrance), (Role.RELAY, self.relay), (Role.EXIT, self.exit)):
      if role_options is not None:
        enabled.append(role)

    return tuple(enabled)

  def __repr__(self) -> str:
    return 'NodeOptions(entrance = %r, relay = %r, exit = %r)' % (self.entrance, self.relay, self.exit)
