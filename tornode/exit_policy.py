# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Representation of exit policies, which decide if a node may relay traffic out
to a given destination. For instance...

::

  >>> from tornode.exit_policy import ExitPolicy, IPv6RejectPorts, PortSpecSingle
  >>> policy = ExitPolicy('accept *:80', 'accept *:443', ipv6_policy = IPv6RejectPorts(PortSpecSingle(25)))
  >>> print(policy)
  accept *:80, accept *:443
  >>> print(policy.summary())
  accept 80, 443
  >>> policy.can_exit_to('75.119.206.243', 80)
  True
  >>> policy.can_exit_to('75.119.206.243', 22)
  False
  >>> policy.can_exit_to('[2001:db8::1]', 22)
  True

IPv4 destinations are checked against our rules in order, and the first rule
that matches both the address and port decides. If none match the destination
is rejected. IPv6 destinations are instead decided by our
:class:`~tornode.exit_policy.IPv6Policy`.

::

  AddrSpec - Addresses that an exit rule applies to
    |- AddrSpecAll - any address
    |- AddrSpecIPv4 - single IPv4 address
    |- AddrSpecIPv4Mask - IPv4 address with a dotted-quad mask
    |- AddrSpecIPv4Bits - IPv4 address block with a prefix length
    |- AddrSpecIPv6 - single IPv6 address
    |- AddrSpecIPv6Bits - IPv6 address block with a prefix length
    |
    |- is_match - checks if an address belongs to this specification
    |- is_wildcard - checks if we match every address
    |- get_mask - provides the address representation of our mask
    |- get_masked_bits - provides the bit representation of our mask
    +- __str__ - string representation

  PortSpec - Ports that an exit rule applies to
    |- PortSpecAll - any port
    |- PortSpecSingle - single port
    |- PortSpecRange - inclusive range of ports
    |
    |- is_match - checks if a port belongs to this specification
    |- is_wildcard - checks if we match every port
    +- __str__ - string representation

  ExitRule - Single rule of an exit policy chain
    |- parse - constructs a rule from an exitpattern like 'accept *:80'
    |- is_match - checks if we match a given destination
    +- __str__ - string representation for this rule

  ExitPolicy - Exit policy for a node
    |- decide - provides the Action for a given destination
    |- can_exit_to - check if exiting to this destination is allowed or not
    |- is_exiting_allowed - check if any exiting is allowed
    |- summary - provides a short label, similar to a microdescriptor
    |- __str__  - string representation
    +- __iter__ - ExitRule entries that this contains

  IPv6Policy - Port based policy for IPv6 destinations
    |- IPv6AcceptPorts - rejects everything except the listed ports
    |- IPv6RejectPorts - accepts everything except the listed ports
    |
    |- parse - constructs a policy from a port list like 'accept 80,443'
    |- decide - provides the Action for a given port
    |- can_exit_to - check if exiting to this port is allowed or not
    +- __str__ - string representation

  matches_address - checks if an address belongs to an AddrSpec
  matches_port - checks if a port belongs to a PortSpec

.. data:: Action (enum)

  Outcome of an exit rule or policy.

  ========== ===========
  Action     Description
  ========== ===========
  **ACCEPT** traffic to the destination may be relayed
  **REJECT** traffic to the destination is refused
  ========== ===========

.. data:: AddressType (enum)

  Enumerations for IP address types that can be in an exit policy.

  ============ ===========
  AddressType  Description
  ============ ===========
  **WILDCARD** any address of either IPv4 or IPv6
  **IPv4**     IPv4 address
  **IPv6**     IPv6 address
  ============ ===========
"""

import functools

import tornode
import tornode.util
import tornode.util.connection
import tornode.util.enum
import tornode.util.str_tools

from typing import Any, Iterator, Optional, Sequence, Set, Tuple, Union

Action = tornode.util.enum.Enum(('ACCEPT', 'accept'), ('REJECT', 'reject'))
AddressType = tornode.util.enum.Enum(('WILDCARD', 'Wildcard'), ('IPv4', 'IPv4'), ('IPv6', 'IPv6'))

IPV4_BITS = 32
IPV6_BITS = 128

MIN_PORT = 0
MAX_PORT = 65535


def _decode(value: Any) -> Any:
  return value.decode('utf-8', 'replace') if isinstance(value, bytes) else value


@functools.lru_cache(maxsize = 2048)
def _normalize_address(address: str) -> Tuple[str, int]:
  """
  Provides the address type and integer representation of a destination.

  :param address: IPv4 or IPv6 address (with or without brackets)

  :returns: **tuple** of the form (address_type, address_int)

  :raises: **ValueError** if the address is neither an IPv4 nor IPv6 address
  """

  address = _decode(address)

  if tornode.util.connection.is_valid_ipv4_address(address):
    return AddressType.IPv4, tornode.util.connection.address_to_int(address)
  elif tornode.util.connection.is_valid_ipv6_address(address, allow_brackets = True):
    return AddressType.IPv6, tornode.util.connection.address_to_int(address)
  else:
    raise ValueError("'%s' isn't a valid IPv4 or IPv6 address" % address)


def _normalize_port(port: Union[int, str]) -> int:
  """
  Provides a destination port as an integer.

  :param port: port number

  :returns: **int** for the port

  :raises: **ValueError** if the port isn't within 0-65535
  """

  if isinstance(port, bool) or not tornode.util.connection.is_valid_port(port, allow_zero = True):
    raise ValueError("'%s' isn't a valid port" % port)

  return int(port)


def _check_masked_bits(bits: Any, max_bits: int) -> int:
  if isinstance(bits, bool) or not isinstance(bits, int):
    raise tornode.InvalidAddressSpec('Prefix length must be an integer, got a %s (%s)' % (type(bits).__name__, bits))
  elif bits < 0 or bits > max_bits:
    raise tornode.InvalidAddressSpec('IPv%i masks must be in the range of 0-%i bits, got %i' % (4 if max_bits == IPV4_BITS else 6, max_bits, bits))

  return bits


def _check_port(port: Any) -> int:
  if isinstance(port, bool) or not isinstance(port, int):
    raise tornode.InvalidPortSpec('Ports must be integers, got a %s (%s)' % (type(port).__name__, port))
  elif port < MIN_PORT or port > MAX_PORT:
    raise tornode.InvalidPortSpec("'%i' isn't within a valid port range (%i-%i)" % (port, MIN_PORT, MAX_PORT))

  return port


def _bits_to_mask(bits: int, width: int) -> int:
  # contiguous high order bitmask, ex. 24 bits of 32 is 0xFFFFFF00

  return ((1 << bits) - 1) << (width - bits)


def matches_address(spec: 'tornode.exit_policy.AddrSpec', address: str) -> bool:
  """
  Checks if an address belongs to the given specification. Addresses of a
  different family than the specification never match.

  :param spec: address specification to check against
  :param address: IPv4 or IPv6 address (with or without brackets)

  :returns: **True** if the address matches, **False** otherwise

  :raises: **ValueError** if the address is malformed
  """

  return spec.is_match(address)


def matches_port(spec: 'tornode.exit_policy.PortSpec', port: int) -> bool:
  """
  Checks if a port belongs to the given specification.

  :param spec: port specification to check against
  :param port: port number

  :returns: **True** if the port matches, **False** otherwise

  :raises: **ValueError** if the port isn't within 0-65535
  """

  return spec.is_match(port)


class AddrSpec(object):
  """
  Addresses that an exit rule applies to. Addresses are validated and
  normalized when constructed, so matching only involves integer comparisons.
  This should be treated as an immutable object.

  :var str address: normalized address this is for, **None** if a wildcard
  :var AddressType address_type: family of addresses we match
  """

  def __init__(self) -> None:
    if type(self) == AddrSpec:
      raise TypeError('AddrSpec is abstract, use one of its subclasses')

    self.address = None  # type: Optional[str]
    self.address_type = AddressType.WILDCARD
    self._masked_bits = None  # type: Optional[int]
    self._mask_bin = 0
    self._address_bin = 0
    self._hash = None  # type: Optional[int]

  def is_match(self, address: str) -> bool:
    """
    Checks if the given address belongs to this specification. Addresses of a
    different family never match.

    :param address: IPv4 or IPv6 address (with or without brackets)

    :returns: **True** if the address matches, **False** otherwise

    :raises: **ValueError** if the address is malformed
    """

    return self._is_match(*_normalize_address(address))

  def is_wildcard(self) -> bool:
    """
    **True** if we match against **any** address, **False** otherwise.

    Note that this is different than a '/0' block which matches every address
    of only IPv4 or IPv6.

    :returns: **bool** for if our address matching is a wildcard
    """

    return self.address_type == AddressType.WILDCARD

  def get_masked_bits(self) -> Optional[int]:
    """
    Provides the number of bits our subnet mask represents. This is **None** if
    we're a wildcard or our mask can't have a bit representation.

    :returns: **int** with the bit representation of our mask
    """

    return self._masked_bits

  def get_mask(self) -> Optional[str]:
    """
    Provides the address represented by our mask. This is **None** if we're a
    wildcard.

    :returns: **str** of our subnet mask for the address (ex. '255.255.255.0')
    """

    if self.address_type == AddressType.IPv4:
      if self._masked_bits is None:
        return '.'.join([str((self._mask_bin >> shift) & 0xFF) for shift in (24, 16, 8, 0)])

      return tornode.util.connection.get_mask_ipv4(self._masked_bits)
    elif self.address_type == AddressType.IPv6:
      return tornode.util.connection.get_mask_ipv6(self._masked_bits)
    else:
      return None

  def _is_match(self, address_type: str, address_bin: int) -> bool:
    if self.address_type == AddressType.WILDCARD:
      return True
    elif self.address_type != address_type:
      return False

    return (address_bin & self._mask_bin) == self._address_bin

  def _apply_ipv4(self, address: str, mask_bin: int, masked_bits: Optional[int]) -> None:
    address = _decode(address)

    if not tornode.util.connection.is_valid_ipv4_address(address):
      raise tornode.InvalidAddressSpec("'%s' isn't a valid IPv4 address" % address)

    self.address = address
    self.address_type = AddressType.IPv4
    self._masked_bits = masked_bits
    self._mask_bin = mask_bin
    self._address_bin = tornode.util.connection.address_to_int(address) & mask_bin

  def _apply_ipv6(self, address: str, masked_bits: int) -> None:
    address = _decode(address)

    if not tornode.util.connection.is_valid_ipv6_address(address, allow_brackets = True):
      raise tornode.InvalidAddressSpec("'%s' isn't a valid IPv6 address" % address)

    address = address.lstrip('[').rstrip(']')

    self.address = tornode.util.connection.expand_ipv6_address(address).upper()
    self.address_type = AddressType.IPv6
    self._masked_bits = masked_bits
    self._mask_bin = _bits_to_mask(masked_bits, IPV6_BITS)
    self._address_bin = tornode.util.connection.address_to_int(address) & self._mask_bin

  def __hash__(self) -> int:
    if self._hash is None:
      self._hash = tornode.util._hash_attr(self, 'address_type', '_address_bin', '_mask_bin')

    return self._hash

  def __eq__(self, other: Any) -> bool:
    return tornode.util._compare_attr(self, other, 'address_type', '_address_bin', '_mask_bin')

  def __ne__(self, other: Any) -> bool:
    return not self == other

  def __repr__(self) -> str:
    return '<%s %s>' % (type(self).__name__, self)


class AddrSpecAll(AddrSpec):
  """
  Matches every address, of either family.
  """

  def __str__(self) -> str:
    return '*'


class AddrSpecIPv4(AddrSpec):
  """
  Matches a single IPv4 address.

  :param str address: IPv4 address in dotted-quad format

  :raises: :class:`~tornode.InvalidAddressSpec` if the address is malformed
  """

  def __init__(self, address: str) -> None:
    super(AddrSpecIPv4, self).__init__()
    self._apply_ipv4(address, _bits_to_mask(IPV4_BITS, IPV4_BITS), IPV4_BITS)

  def __str__(self) -> str:
    return self.address


class AddrSpecIPv4Mask(AddrSpec):
  """
  Matches IPv4 addresses that are the same as ours once a mask is applied.
  Masks don't need to be contiguous, so '255.255.0.255' is fine.

  :param str address: IPv4 address in dotted-quad format
  :param str mask: IPv4 mask in dotted-quad format

  :raises: :class:`~tornode.InvalidAddressSpec` if the address or mask is malformed
  """

  def __init__(self, address: str, mask: str) -> None:
    super(AddrSpecIPv4Mask, self).__init__()
    mask = _decode(mask)

    if not tornode.util.connection.is_valid_ipv4_address(mask):
      raise tornode.InvalidAddressSpec("'%s' isn't a valid IPv4 mask" % mask)

    try:
      masked_bits = tornode.util.connection._get_masked_bits(mask)  # type: Optional[int]
    except ValueError:
      masked_bits = None  # mask can't be represented as a number of bits (ex. '255.255.0.255')

    self._mask = mask
    self._apply_ipv4(address, tornode.util.connection.address_to_int(mask), masked_bits)

  def get_mask(self) -> str:
    return self._mask

  def __str__(self) -> str:
    return '%s/%s' % (self.address, self._mask)


class AddrSpecIPv4Bits(AddrSpec):
  """
  Matches an IPv4 address block, expressed in CIDR notation. A prefix of zero
  matches every IPv4 address, and thirty two only our own.

  :param str address: IPv4 address in dotted-quad format
  :param int bits: prefix length, from 0-32

  :raises: :class:`~tornode.InvalidAddressSpec` if the address is malformed
    or prefix out of range
  """

  def __init__(self, address: str, bits: int) -> None:
    super(AddrSpecIPv4Bits, self).__init__()
    bits = _check_masked_bits(bits, IPV4_BITS)
    self._apply_ipv4(address, _bits_to_mask(bits, IPV4_BITS), bits)

  def __str__(self) -> str:
    return '%s/%i' % (self.address, self._masked_bits)


class AddrSpecIPv6(AddrSpec):
  """
  Matches a single IPv6 address.

  :param str address: IPv6 address, with or without brackets

  :raises: :class:`~tornode.InvalidAddressSpec` if the address is malformed
  """

  def __init__(self, address: str) -> None:
    super(AddrSpecIPv6, self).__init__()
    self._apply_ipv6(address, IPV6_BITS)

  def __str__(self) -> str:
    return '[%s]' % self.address


class AddrSpecIPv6Bits(AddrSpec):
  """
  Matches an IPv6 address block, expressed in CIDR notation. A prefix of zero
  matches every IPv6 address, and 128 only our own.

  :param str address: IPv6 address, with or without brackets
  :param int bits: prefix length, from 0-128

  :raises: :class:`~tornode.InvalidAddressSpec` if the address is malformed
    or prefix out of range
  """

  def __init__(self, address: str, bits: int) -> None:
    super(AddrSpecIPv6Bits, self).__init__()
    self._apply_ipv6(address, _check_masked_bits(bits, IPV6_BITS))

  def __str__(self) -> str:
    return '[%s]/%i' % (self.address, self._masked_bits)


class PortSpec(object):
  """
  Ports that an exit rule applies to. This should be treated as an immutable
  object.

  :var int min_port: lower end of the port range that we include (inclusive)
  :var int max_port: upper end of the port range that we include (inclusive)
  """

  def __init__(self, min_port: int = MIN_PORT, max_port: int = MAX_PORT) -> None:
    if type(self) == PortSpec:
      raise TypeError('PortSpec is abstract, use one of its subclasses')

    self.min_port = min_port
    self.max_port = max_port

  def is_match(self, port: int) -> bool:
    """
    Checks if the given port belongs to this specification.

    :param port: port number

    :returns: **True** if the port matches, **False** otherwise

    :raises: **ValueError** if the port isn't within 0-65535
    """

    return self._is_match(_normalize_port(port))

  def is_wildcard(self) -> bool:
    """
    **True** if we'll match against any port, **False** otherwise. Connections
    to port zero are never made, so a range starting at one is also a
    wildcard.

    :returns: **bool** for if our port matching is a wildcard
    """

    return self.min_port in (0, 1) and self.max_port == MAX_PORT

  def _is_match(self, port: int) -> bool:
    return self.min_port <= port <= self.max_port

  def __hash__(self) -> int:
    return tornode.util._hash_attr(self, 'min_port', 'max_port', cache = True)

  def __eq__(self, other: Any) -> bool:
    return tornode.util._compare_attr(self, other, 'min_port', 'max_port')

  def __ne__(self, other: Any) -> bool:
    return not self == other

  def __repr__(self) -> str:
    return '<%s %s>' % (type(self).__name__, self)


class PortSpecAll(PortSpec):
  """
  Matches every port.
  """

  def __init__(self) -> None:
    super(PortSpecAll, self).__init__(MIN_PORT, MAX_PORT)

  def __str__(self) -> str:
    return '*'


class PortSpecSingle(PortSpec):
  """
  Matches a single port.

  :param int port: port number, from 0-65535

  :raises: :class:`~tornode.InvalidPortSpec` if the port is out of range
  """

  def __init__(self, port: int) -> None:
    port = _check_port(port)
    super(PortSpecSingle, self).__init__(port, port)

  def __str__(self) -> str:
    return str(self.min_port)


class PortSpecRange(PortSpec):
  """
  Matches an inclusive range of ports. A range whose bounds are equal matches
  the same as a :class:`~tornode.exit_policy.PortSpecSingle`.

  :param int min_port: lower end of the range
  :param int max_port: upper end of the range

  :raises: :class:`~tornode.InvalidPortSpec` if a port is out of range or the
    lower bound is greater than the upper
  """

  def __init__(self, min_port: int, max_port: int) -> None:
    min_port, max_port = _check_port(min_port), _check_port(max_port)

    if min_port > max_port:
      raise tornode.InvalidPortSpec("Port range has a lower bound that's greater than its upper bound: %i-%i" % (min_port, max_port))

    super(PortSpecRange, self).__init__(min_port, max_port)

  def __str__(self) -> str:
    return '%i-%i' % (self.min_port, self.max_port)


def _parse_addrspec(addrspec: str) -> 'tornode.exit_policy.AddrSpec':
  # addrspec ::= "*" | "*4" | "*6" | ip4spec | ip6spec
  # ip4spec ::= ip4 | ip4 "/" num_ip4_bits | ip4 "/" ip4mask
  # ip6spec ::= ip6 | ip6 "/" num_ip6_bits

  if addrspec == '*':
    return AddrSpecAll()
  elif addrspec == '*4':
    return AddrSpecIPv4Bits('0.0.0.0', 0)
  elif addrspec == '*6':
    return AddrSpecIPv6Bits('::', 0)

  if '/' in addrspec:
    address, addr_extra = addrspec.split('/', 1)  # type: Tuple[str, Optional[str]]
  else:
    address, addr_extra = addrspec, None

  if tornode.util.connection.is_valid_ipv4_address(address):
    if addr_extra is None:
      return AddrSpecIPv4(address)
    elif tornode.util.connection.is_valid_ipv4_address(addr_extra):
      return AddrSpecIPv4Mask(address, addr_extra)
    elif addr_extra.isdigit() and addr_extra.isascii():
      return AddrSpecIPv4Bits(address, int(addr_extra))
    else:
      raise tornode.InvalidAddressSpec("The '%s' isn't a mask nor number of bits: %s" % (addr_extra, addrspec))
  elif address.startswith('[') and address.endswith(']'):
    if not tornode.util.connection.is_valid_ipv6_address(address[1:-1]):
      raise tornode.InvalidAddressSpec("'%s' isn't a valid IPv6 address" % address)
    elif addr_extra is None:
      return AddrSpecIPv6(address[1:-1])
    elif addr_extra.isdigit() and addr_extra.isascii():
      return AddrSpecIPv6Bits(address[1:-1], int(addr_extra))
    else:
      raise tornode.InvalidAddressSpec("The '%s' isn't a number of bits: %s" % (addr_extra, addrspec))
  else:
    raise tornode.InvalidAddressSpec("'%s' isn't a wildcard, IPv4, or IPv6 address" % addrspec)


def _parse_portspec(portspec: str) -> 'tornode.exit_policy.PortSpec':
  # portspec ::= "*" | port | port "-" port

  if portspec == '*':
    return PortSpecAll()
  elif tornode.util.connection.is_valid_port(portspec, allow_zero = True):
    return PortSpecSingle(int(portspec))
  elif '-' in portspec:
    port_comp = portspec.split('-', 1)

    if not tornode.util.connection.is_valid_port(port_comp, allow_zero = True):
      raise tornode.InvalidPortSpec('Malformed port range: %s' % portspec)

    return PortSpecRange(int(port_comp[0]), int(port_comp[1]))
  else:
    raise tornode.InvalidPortSpec("Port value isn't a wildcard, integer, or range: %s" % portspec)


class ExitRule(object):
  """
  Single rule of an exit policy. These rules are chained together to form
  complete policies that describe where a node will and will not allow
  traffic to exit.

  This should be treated as an immutable object.

  :var Action action: outcome when this rule matches
  :var bool is_accept: indicates if exiting is allowed or disallowed
  :var AddrSpec address: addresses this rule applies to
  :var PortSpec port: ports this rule applies to

  :param Action action: outcome when this rule matches
  :param AddrSpec address: addresses this rule applies to, any if unset
  :param PortSpec port: ports this rule applies to, any if unset

  :raises:
    * **ValueError** if the action isn't an :data:`~tornode.exit_policy.Action`
    * **TypeError** if the address or port isn't a specification
  """

  def __init__(self, action: str, address: Optional[AddrSpec] = None, port: Optional[PortSpec] = None) -> None:
    if action not in Action:
      raise ValueError("Exit rule actions must be either '%s' or '%s': %s" % (Action.ACCEPT, Action.REJECT, action))

    if address is None:
      address = AddrSpecAll()
    elif not isinstance(address, AddrSpec):
      raise TypeError('Exit rule addresses must be an AddrSpec, got a %s (%s)' % (type(address).__name__, address))

    if port is None:
      port = PortSpecAll()
    elif not isinstance(port, PortSpec):
      raise TypeError('Exit rule ports must be a PortSpec, got a %s (%s)' % (type(port).__name__, port))

    self.action = action
    self.is_accept = action == Action.ACCEPT
    self.address = address
    self.port = port
    self._hash = None  # type: Optional[int]

  @staticmethod
  def parse(rule: Union[str, bytes]) -> 'tornode.exit_policy.ExitRule':
    """
    Constructs a rule from an exitpattern, such as...

    ::

      accept *:80
      reject 10.0.0.0/8:*
      reject 192.168.0.1/255.255.0.255:1-1024
      accept [2001:db8::]/32:443

    :param rule: exit policy rule to be parsed

    :returns: :class:`~tornode.exit_policy.ExitRule` for the rule

    :raises:
      * **ValueError** if the rule doesn't start with accept or reject
      * :class:`~tornode.InvalidAddressSpec` if the address is malformed
      * :class:`~tornode.InvalidPortSpec` if the port is malformed
    """

    # policy ::= "accept" exitpattern | "reject" exitpattern
    # exitpattern ::= addrspec ":" portspec

    rule = tornode.util.str_tools._to_unicode(rule).strip()

    if rule.startswith('accept'):
      action = Action.ACCEPT
    elif rule.startswith('reject'):
      action = Action.REJECT
    else:
      raise ValueError("An exit policy must start with either 'accept' or 'reject': %s" % rule)

    exitpattern = rule[6:]

    if not exitpattern.startswith(' '):
      raise ValueError('An exit policy should have a space separating its accept/reject from the exit pattern: %s' % rule)

    exitpattern = exitpattern.lstrip()

    if ':' not in exitpattern or ']' in exitpattern.rsplit(':', 1)[1]:
      raise ValueError("An exitpattern must be of the form 'addrspec:portspec': %s" % rule)

    addrspec, portspec = exitpattern.rsplit(':', 1)
    return ExitRule(action, _parse_addrspec(addrspec), _parse_portspec(portspec))

  def is_match(self, address: str, port: int) -> bool:
    """
    **True** if we match against the given destination, **False** otherwise.

    :param address: IPv4 or IPv6 address (with or without brackets)
    :param port: port number

    :returns: **bool** indicating if we match against this destination

    :raises: **ValueError** if provided with a malformed address or port
    """

    address_type, address_bin = _normalize_address(address)
    return self._is_match(address_type, address_bin, _normalize_port(port))

  def _is_match(self, address_type: str, address_bin: int, port: int) -> bool:
    return self.address._is_match(address_type, address_bin) and self.port._is_match(port)

  def __str__(self) -> str:
    return '%s %s:%s' % (self.action, self.address, self.port)

  def __repr__(self) -> str:
    return "<ExitRule '%s'>" % self

  def __hash__(self) -> int:
    if self._hash is None:
      self._hash = tornode.util._hash_attr(self, 'action', 'address', 'port')

    return self._hash

  def __eq__(self, other: Any) -> bool:
    return tornode.util._compare_attr(self, other, 'action', 'address', 'port')

  def __ne__(self, other: Any) -> bool:
    return not self == other


class IPv6Policy(object):
  """
  Exit policy for IPv6 destinations. These are a list of ports that are either
  accepted or rejected, with no address restrictions. This is abstract, use
  either...

  * :class:`~tornode.exit_policy.IPv6AcceptPorts` which only allows exiting to
    the listed ports
  * :class:`~tornode.exit_policy.IPv6RejectPorts` which allows exiting to
    anything other than the listed ports

  :var tuple ports: :class:`~tornode.exit_policy.PortSpec` we list
  :var bool is_accept: **True** if these are ports that we accept, **False** if
    they're ports that we reject

  :param list ports: :class:`~tornode.exit_policy.PortSpec` that we list

  :raises: **TypeError** if a port isn't a :class:`~tornode.exit_policy.PortSpec`
  """

  is_accept = None  # type: bool

  def __init__(self, *ports: PortSpec) -> None:
    if type(self) == IPv6Policy:
      raise TypeError('IPv6Policy is abstract, use either IPv6AcceptPorts or IPv6RejectPorts')

    for port in ports:
      if not isinstance(port, PortSpec):
        raise TypeError('IPv6 policies can only contain PortSpecs, got a %s (%s)' % (type(port).__name__, port))

    self.ports = tuple(ports)

  @staticmethod
  def parse(policy: Union[str, bytes]) -> 'tornode.exit_policy.IPv6Policy':
    """
    Constructs a policy from a microdescriptor style port list. For
    instance...

    ::

      accept 80,443       # only accepts common http ports
      reject 1-1024       # only accepts non-privileged ports

    :param policy: policy string that describes this policy

    :returns: :class:`~tornode.exit_policy.IPv6AcceptPorts` or
      :class:`~tornode.exit_policy.IPv6RejectPorts` for the policy

    :raises:
      * **ValueError** if the policy doesn't start with accept or reject
      * :class:`~tornode.InvalidPortSpec` if a port is malformed
    """

    # IPv6Policy ::= ("accept" / "reject") SP PortList
    # PortList ::= PortOrRange
    # PortList ::= PortList "," PortOrRange
    # PortOrRange ::= INT "-" INT / INT

    policy = tornode.util.str_tools._to_unicode(policy).strip()

    if policy.startswith('accept'):
      policy_class = IPv6AcceptPorts
    elif policy.startswith('reject'):
      policy_class = IPv6RejectPorts
    else:
      raise ValueError("An IPv6 exit policy must start with either 'accept' or 'reject': %s" % policy)

    port_list = policy[6:]

    if not port_list:
      return policy_class()
    elif not port_list.startswith(' '):
      raise ValueError('An IPv6 exit policy should have a space separating accept/reject from its port list: %s' % policy)

    ports = []

    for port_entry in port_list.strip().split(','):
      ports.append(_parse_portspec(port_entry.strip()))

    return policy_class(*ports)

  def decide(self, port: int) -> str:
    """
    Provides the :data:`~tornode.exit_policy.Action` for exiting to the given
    port.

    :param port: port number

    :returns: :data:`~tornode.exit_policy.Action` for the port

    :raises: **ValueError** if the port isn't within 0-65535
    """

    return self._decide(_normalize_port(port))

  def can_exit_to(self, port: int) -> bool:
    """
    Checks if this policy allows exiting to a given port.

    :param port: port number

    :returns: **True** if exiting to this port is allowed, **False** otherwise

    :raises: **ValueError** if the port isn't within 0-65535
    """

    return self.decide(port) == Action.ACCEPT

  def _decide(self, port: int) -> str:
    is_listed = any(spec._is_match(port) for spec in self.ports)

    if isinstance(self, IPv6AcceptPorts):
      return Action.ACCEPT if is_listed else Action.REJECT
    elif isinstance(self, IPv6RejectPorts):
      return Action.REJECT if is_listed else Action.ACCEPT
    else:
      raise TypeError('BUG: unrecognized IPv6 policy type: %s' % type(self).__name__)

  def _is_exiting_allowed(self) -> bool:
    if isinstance(self, IPv6AcceptPorts):
      return any(port.max_port > 0 for port in self.ports)
    elif isinstance(self, IPv6RejectPorts):
      return not any(port.is_wildcard() for port in self.ports)
    else:
      raise TypeError('BUG: unrecognized IPv6 policy type: %s' % type(self).__name__)

  def __str__(self) -> str:
    label = 'accept' if self.is_accept else 'reject'

    if self.ports:
      label += ' ' + ','.join([str(port) for port in self.ports])

    return label

  def __repr__(self) -> str:
    return "<%s '%s'>" % (type(self).__name__, self)

  def __hash__(self) -> int:
    return tornode.util._hash_attr(self, 'is_accept', 'ports', cache = True)

  def __eq__(self, other: Any) -> bool:
    return tornode.util._compare_attr(self, other, 'is_accept', 'ports')

  def __ne__(self, other: Any) -> bool:
    return not self == other


class IPv6AcceptPorts(IPv6Policy):
  """
  IPv6 policy that rejects everything other than the ports we list.
  """

  is_accept = True


class IPv6RejectPorts(IPv6Policy):
  """
  IPv6 policy that accepts everything other than the ports we list.
  """

  is_accept = False


class ExitPolicy(object):
  """
  Policy for the destinations that a node allows or denies exiting to. This
  is, in effect, an ordered list of :class:`~tornode.exit_policy.ExitRule`
  entries for IPv4 destinations and an
  :class:`~tornode.exit_policy.IPv6Policy` for IPv6 destinations.

  Rules are evaluated in order, and the first that matches a destination
  decides it. A rule later in the policy never takes precedence, even if it's
  more specific. IPv4 destinations that no rule matches are rejected.

  This should be treated as an immutable object.

  :var IPv6Policy ipv6_policy: policy for IPv6 destinations

  :param list rules: **str** or :class:`~tornode.exit_policy.ExitRule`
    entries that make up this policy
  :param IPv6Policy ipv6_policy: policy for IPv6 destinations, this rejects
    all IPv6 traffic if unset

  :raises:
    * **TypeError** if a rule or IPv6 policy is of the wrong type
    * **ValueError** if a rule string is malformed
  """

  def __init__(self, *rules: Union[str, ExitRule], ipv6_policy: Optional[Union[str, IPv6Policy]] = None) -> None:
    parsed_rules = []

    for rule in rules:
      if isinstance(rule, (bytes, str)):
        if not tornode.util.str_tools._to_unicode(rule).strip():
          continue

        parsed_rules.append(ExitRule.parse(rule))
      elif isinstance(rule, ExitRule):
        parsed_rules.append(rule)
      else:
        raise TypeError('Exit policy rules can only contain strings or ExitRules, got a %s (%s)' % (type(rule).__name__, rule))

    if ipv6_policy is None:
      ipv6_policy = IPv6AcceptPorts()
    elif isinstance(ipv6_policy, (bytes, str)):
      ipv6_policy = IPv6Policy.parse(ipv6_policy)
    elif not isinstance(ipv6_policy, IPv6Policy):
      raise TypeError('IPv6 exit policies must be an IPv6Policy, got a %s (%s)' % (type(ipv6_policy).__name__, ipv6_policy))

    self._rules = tuple(parsed_rules)
    self.ipv6_policy = ipv6_policy
    self._hash = None  # type: Optional[int]

  @property
  def rules(self) -> Tuple[ExitRule, ...]:
    """
    Rules for IPv4 destinations, in the order they're evaluated.
    """

    return self._rules

  def decide(self, address: str, port: int) -> str:
    """
    Provides the :data:`~tornode.exit_policy.Action` for exiting to the given
    destination.

    :param address: IPv4 or IPv6 address (with or without brackets)
    :param port: port number

    :returns: :data:`~tornode.exit_policy.Action` for the destination

    :raises: **ValueError** if provided with a malformed address or port
    """

    address_type, address_bin = _normalize_address(address)
    port = _normalize_port(port)

    if address_type == AddressType.IPv6:
      return self.ipv6_policy._decide(port)

    for rule in self._rules:
      if rule._is_match(address_type, address_bin, port):
        return rule.action

    return Action.REJECT

  def can_exit_to(self, address: str, port: int) -> bool:
    """
    Checks if this policy allows exiting to a given destination or not.

    :param address: IPv4 or IPv6 address (with or without brackets)
    :param port: port number

    :returns: **True** if exiting to this destination is allowed, **False** otherwise

    :raises: **ValueError** if provided with a malformed address or port
    """

    return self.decide(address, port) == Action.ACCEPT

  @functools.lru_cache()
  def is_exiting_allowed(self) -> bool:
    """
    Provides **True** if the policy allows exiting whatsoever, **False**
    otherwise.
    """

    if self.ipv6_policy._is_exiting_allowed():
      return True

    rejected_ports = set()  # type: Set[int]

    for rule in self._rules:
      if rule.address.address_type == AddressType.IPv6:
        continue  # never reached by IPv4 destinations
      elif rule.is_accept:
        for port in range(max(rule.port.min_port, 1), rule.port.max_port + 1):
          if port not in rejected_ports:
            return True
      elif rule.address.is_wildcard():
        if rule.port.is_wildcard():
          return False
        else:
          rejected_ports.update(range(rule.port.min_port, rule.port.max_port + 1))

    return False

  @functools.lru_cache()
  def summary(self) -> str:
    """
    Provides a short description of our IPv4 policy chain, similar to a
    microdescriptor. This excludes entries that don't cover all IP addresses,
    and is either white-list or blacklist policy based on the final entry. For
    instance...

    ::

      >>> policy = ExitPolicy('accept *:80', 'accept *:443', 'reject *:*')
      >>> policy.summary()
      'accept 80, 443'

      >>> policy = ExitPolicy('accept *:443', 'reject *:1-1024', 'accept *:*')
      >>> policy.summary()
      'reject 1-442, 444-1024'

    :returns: **str** with a concise summary for our policy
    """

    # Determines if we're a white-list or blacklist. Without a catch-all rule
    # everything unmatched is rejected, so we're a white-list.

    is_whitelist = True

    for rule in self._rules:
      if rule.address.is_wildcard() and rule.port.is_wildcard():
        is_whitelist = not rule.is_accept
        break

    # Iterates over the policies and adds the ports we'll return (ie,
    # allows if a white-list and rejects if a blacklist). Regardless of a
    # port's allow/reject policy, all further entries with that port are
    # ignored since policies respect the first matching policy.

    display_ports, skip_ports = [], set()  # type: Tuple[list, Set[int]]

    for rule in self._rules:
      if not rule.address.is_wildcard():
        continue
      elif rule.port.is_wildcard():
        break

      for port in range(rule.port.min_port, rule.port.max_port + 1):
        if port in skip_ports:
          continue

        # if accept + white-list or reject + blacklist then add
        if rule.is_accept == is_whitelist:
          display_ports.append(port)

        # all further entries with this port should be ignored
        skip_ports.add(port)

    # convert port list to a list of ranges (ie, ['1-3'] rather than [1, 2, 3])

    if display_ports:
      display_ranges = []
      temp_range = []  # type: list
      display_ports.sort()
      display_ports.append(None)  # ending item to include last range in loop

      for port in display_ports:
        if not temp_range or temp_range[-1] + 1 == port:
          temp_range.append(port)
        else:
          if len(temp_range) > 1:
            display_ranges.append('%i-%i' % (temp_range[0], temp_range[-1]))
          else:
            display_ranges.append(str(temp_range[0]))

          temp_range = [port]
    else:
      # everything for the inverse
      is_whitelist = not is_whitelist
      display_ranges = ['1-65535']

    label_prefix = 'accept ' if is_whitelist else 'reject '

    return (label_prefix + ', '.join(display_ranges)).strip()

  def __len__(self) -> int:
    return len(self._rules)

  def __iter__(self) -> Iterator[ExitRule]:
    for rule in self._rules:
      yield rule

  def __str__(self) -> str:
    return ', '.join([str(rule) for rule in self._rules])

  def __repr__(self) -> str:
    return "<ExitPolicy '%s' ipv6 '%s'>" % (self, self.ipv6_policy)

  def __hash__(self) -> int:
    if self._hash is None:
      my_hash = hash(self.ipv6_policy)

      for rule in self._rules:
        my_hash *= 1024
        my_hash += hash(rule)

      self._hash = my_hash

    return self._hash

  def __eq__(self, other: Any) -> bool:
    return tornode.util._compare_attr(self, other, '_rules', 'ipv6_policy')

  def __ne__(self, other: Any) -> bool:
    return not self == other


def _rules_for_ports(action: str, ports: Sequence[int]) -> Tuple[ExitRule, ...]:
  """
  Provides rules that apply the given action to these ports, from any
  address.
  """

  return tuple([ExitRule(action, AddrSpecAll(), PortSpecSingle(port)) for port in ports])
