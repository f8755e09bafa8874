"""
Unit tests for tornode.options.
"""

import os
import tempfile
import unittest

import tornode.util.conf

from unittest.mock import Mock, patch

from tornode.exit_policy import ExitPolicy, ExitRule, IPv6AcceptPorts, IPv6RejectPorts, PortSpecSingle
from tornode.options import (
  DEFAULT_EXIT_RULES,
  DEFAULT_MAX_CIRCUITS,
  EntranceOptions,
  ExitOptions,
  NodeOptions,
  RelayOptions,
  Role,
)


def _config(**entries):
  config = tornode.util.conf.Config()

  for key, value in entries.items():
    config.set(key.replace('__', '.'), value)

  return config


class TestRoleOptions(unittest.TestCase):
  def test_entrance_defaults(self):
    options = EntranceOptions()

    self.assertEqual(6, options.circuit_length)
    self.assertEqual(3, options.max_circuits)
    self.assertEqual(3, options.max_connections)

  def test_entrance_validation(self):
    self.assertEqual(0, EntranceOptions(circuit_length = 0).circuit_length)

    self.assertRaises(ValueError, EntranceOptions, circuit_length = -1)
    self.assertRaises(ValueError, EntranceOptions, max_circuits = 0)
    self.assertRaises(ValueError, EntranceOptions, max_connections = 0)
    self.assertRaises(ValueError, EntranceOptions, circuit_length = '6')
    self.assertRaises(ValueError, EntranceOptions, max_circuits = True)

  def test_relay_defaults(self):
    options = RelayOptions()

    self.assertEqual(9374, options.onion_port)
    self.assertEqual('', options.nickname)
    self.assertEqual(None, options.contact)

  def test_relay_validation(self):
    options = RelayOptions(9001, 'caerSidi', 'atagar@torproject.org')
    self.assertEqual('caerSidi', options.nickname)
    self.assertEqual('atagar@torproject.org', options.contact)

    self.assertRaises(ValueError, RelayOptions, onion_port = 0)
    self.assertRaises(ValueError, RelayOptions, onion_port = 65536)
    self.assertRaises(ValueError, RelayOptions, onion_port = '9001')
    self.assertRaises(ValueError, RelayOptions, nickname = 'caer sidi')
    self.assertRaises(ValueError, RelayOptions, nickname = None)
    self.assertRaises(ValueError, RelayOptions, contact = 5)

  def test_exit_defaults(self):
    options = ExitOptions()

    self.assertEqual(DEFAULT_EXIT_RULES, options.rules)
    self.assertEqual(IPv6AcceptPorts(), options.ipv6_policy)
    self.assertEqual('accept *:22, accept *:80, accept *:443, accept *:465, accept *:993', str(options.exit_policy))

    for port in (22, 80, 443, 465, 993):
      self.assertTrue(options.exit_policy.can_exit_to('93.184.216.34', port))

    self.assertFalse(options.exit_policy.can_exit_to('93.184.216.34', 8080))
    self.assertFalse(options.exit_policy.can_exit_to('2001:db8::1', 80))

  def test_exit_rules(self):
    options = ExitOptions(['reject 10.0.0.0/8:*', ExitRule.parse('accept *:*')], 'reject 25')

    self.assertEqual(ExitPolicy('reject 10.0.0.0/8:*', 'accept *:*', ipv6_policy = IPv6RejectPorts(PortSpecSingle(25))), options.exit_policy)
    self.assertEqual(2, len(options.rules))
    self.assertFalse(options.exit_policy.can_exit_to('10.1.2.3', 80))
    self.assertTrue(options.exit_policy.can_exit_to('2001:db8::1', 80))

  def test_invalid_exit_rules(self):
    self.assertRaises(ValueError, ExitOptions, ['accept *:80', 'accept *:65536'])
    self.assertRaises(ValueError, ExitOptions, ['permit *:80'])
    self.assertRaises(ValueError, ExitOptions, ipv6_policy = 'permit 80')
    self.assertRaises(TypeError, ExitOptions, 'accept *:80')
    self.assertRaises(TypeError, ExitOptions, [80])

  def test_equality(self):
    self.assertEqual(EntranceOptions(), EntranceOptions())
    self.assertEqual(RelayOptions(nickname = 'caerSidi'), RelayOptions(nickname = 'caerSidi'))
    self.assertEqual(ExitOptions(), ExitOptions())

    self.assertNotEqual(EntranceOptions(), EntranceOptions(circuit_length = 3))
    self.assertNotEqual(RelayOptions(), RelayOptions(contact = 'atagar'))
    self.assertNotEqual(ExitOptions(), ExitOptions(['accept *:80']))
    self.assertNotEqual(EntranceOptions(), RelayOptions())

  def test_repr(self):
    self.assertEqual('EntranceOptions(circuit_length = 6, max_circuits = 3, max_connections = 3)', repr(EntranceOptions()))
    self.assertEqual("RelayOptions(onion_port = 9374, nickname = '', contact = None)", repr(RelayOptions()))


class TestNodeOptions(unittest.TestCase):
  def test_defaults(self):
    options = NodeOptions()

    self.assertEqual(EntranceOptions(), options.entrance)
    self.assertEqual(RelayOptions(), options.relay)
    self.assertEqual(None, options.exit)
    self.assertEqual((Role.ENTRANCE, Role.RELAY), options.roles())

  def test_defaults_are_not_shared(self):
    first, second = NodeOptions(), NodeOptions()

    self.assertFalse(first.entrance is second.entrance)
    self.assertFalse(first.relay is second.relay)

    first.entrance.max_circuits = 99
    first.relay.nickname = 'caerSidi'

    self.assertEqual(DEFAULT_MAX_CIRCUITS, second.entrance.max_circuits)
    self.assertEqual('', second.relay.nickname)
    self.assertEqual(DEFAULT_MAX_CIRCUITS, NodeOptions().entrance.max_circuits)

  @patch('builtins.print')
  def test_default_logger(self, print_mock):
    NodeOptions().log('hello world')

    self.assertEqual(1, print_mock.call_count)
    message = print_mock.call_args[0][0]

    self.assertTrue(message.startswith('['))
    self.assertTrue(message.endswith('] hello world'))

  def test_custom_logger(self):
    log_mock = Mock()
    NodeOptions(log = log_mock).log('hello world')
    log_mock.assert_called_once_with('hello world')

  def test_roles(self):
    self.assertEqual(('Entrance', 'Relay', 'Exit'), NodeOptions(exit = ExitOptions()).roles())
    self.assertEqual(('Exit',), NodeOptions(entrance = None, relay = None, exit = ExitOptions()).roles())
    self.assertEqual((), NodeOptions(entrance = None, relay = None).roles())

  def test_disabled_roles_with_default_values(self):
    # present options enable a role even if they're all defaults

    self.assertEqual((Role.RELAY,), NodeOptions(entrance = None, relay = RelayOptions()).roles())

  def test_invalid_options(self):
    self.assertRaises(TypeError, NodeOptions, entrance = RelayOptions())
    self.assertRaises(TypeError, NodeOptions, relay = {'onion_port': 9001})
    self.assertRaises(TypeError, NodeOptions, exit = ['accept *:80'])
    self.assertRaises(TypeError, NodeOptions, log = 'stdout')

  def test_from_empty_config(self):
    options = NodeOptions.from_config(tornode.util.conf.Config(), log = Mock())

    self.assertEqual(EntranceOptions(), options.entrance)
    self.assertEqual(RelayOptions(), options.relay)
    self.assertEqual(None, options.exit)

  def test_from_config(self):
    config = _config(
      entrance__circuit_length = '4',
      entrance__max_circuits = '5',
      relay__onion_port = '9001',
      relay__nickname = 'caerSidi',
      relay__contact = 'atagar@torproject.org',
      exit__enabled = 'true',
      exit__rule = ['accept *:80', 'accept *:443'],
      exit__ipv6_policy = 'reject 25',
    )

    options = NodeOptions.from_config(config, log = Mock())

    self.assertEqual(EntranceOptions(4, 5, 3), options.entrance)
    self.assertEqual(RelayOptions(9001, 'caerSidi', 'atagar@torproject.org'), options.relay)
    self.assertEqual(ExitOptions(['accept *:80', 'accept *:443'], 'reject 25'), options.exit)

  def test_from_config_disabling_roles(self):
    config = _config(entrance__enabled = 'false', relay__enabled = 'FALSE', exit__enabled = 'true')
    options = NodeOptions.from_config(config, log = Mock())

    self.assertEqual(None, options.entrance)
    self.assertEqual(None, options.relay)
    self.assertEqual(ExitOptions(), options.exit)

  def test_from_config_empty_contact(self):
    options = NodeOptions.from_config(_config(relay__contact = ''), log = Mock())
    self.assertEqual(None, options.relay.contact)

  @patch('tornode.util.log.warn')
  def test_from_config_invalid_exit_rule(self, warn_mock):
    config = _config(exit__enabled = 'true', exit__rule = ['accept *:80', 'accept *:http'])

    self.assertRaises(ValueError, NodeOptions.from_config, config, Mock())
    self.assertEqual(1, warn_mock.call_count)
    self.assertTrue(warn_mock.call_args[0][0].startswith('Unable to configure our exit role: '))

  @patch('tornode.util.log.warn')
  def test_from_config_malformed_switches(self, warn_mock):
    for entries in ({'exit__enabled': 'yess'}, {'entrance__enabled': '1'}, {'relay__enabled': 'no'}):
      self.assertRaises(ValueError, NodeOptions.from_config, _config(**entries), Mock())

    self.assertEqual(3, warn_mock.call_count)
    warn_mock.assert_called_with("Config entry 'relay.enabled' is expected to be 'true' or 'false', but was 'no'")

  @patch('tornode.util.log.warn')
  def test_from_config_malformed_counts(self, warn_mock):
    for entries in ({'entrance__max_circuits': 'abc'}, {'entrance__circuit_length': '6.5'}, {'relay__onion_port': 'http'}):
      self.assertRaises(ValueError, NodeOptions.from_config, _config(**entries), Mock())

    self.assertEqual(3, warn_mock.call_count)
    warn_mock.assert_called_with("Config entry 'relay.onion_port' is expected to be an integer, but was 'http'")

  def test_from_config_disabled_role_ignores_counts(self):
    options = NodeOptions.from_config(_config(entrance__enabled = 'false', entrance__max_circuits = 'abc'), log = Mock())
    self.assertEqual(None, options.entrance)

  @patch('tornode.util.log.notice')
  def test_from_config_ignored_exit_rules(self, notice_mock):
    options = NodeOptions.from_config(_config(exit__rule = ['accept *:80']), log = Mock())

    self.assertEqual(None, options.exit)
    notice_mock.assert_called_once_with("Our configuration has exit rules but 'exit.enabled' isn't true, so they're being ignored")

  def test_from_config_file(self):
    config_contents = '\n'.join((
      '# node configuration',
      'relay.nickname caerSidi',
      'relay.onion_port 9001  # our ORPort',
      'exit.enabled true',
      'exit.rule reject 10.0.0.0/8:*',
      'exit.rule accept *:*',
      '',
    ))

    with tempfile.TemporaryDirectory() as tmpdir:
      path = os.path.join(tmpdir, 'torrc')

      with open(path, 'w') as config_file:
        config_file.write(config_contents)

      config = tornode.util.conf.Config()
      config.load(path)

    options = NodeOptions.from_config(config, log = Mock())

    self.assertEqual('caerSidi', options.relay.nickname)
    self.assertEqual(9001, options.relay.onion_port)
    self.assertEqual(('reject 10.0.0.0/8:*', 'accept *:*'), tuple(str(rule) for rule in options.exit.rules))
    self.assertFalse(options.exit.exit_policy.can_exit_to('10.0.0.1', 443))
    self.assertTrue(options.exit.exit_policy.can_exit_to('8.8.8.8', 443))
