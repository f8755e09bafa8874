"""
Unit tests for tornode.node.
"""

import unittest

import tornode

from unittest.mock import Mock, patch

from tornode.descriptor.router_descriptor import RouterDescriptor
from tornode.exit_policy import Action, ExitPolicy
from tornode.node import Node
from tornode.options import ExitOptions, NodeOptions, RelayOptions
from test import FINGERPRINT, ONION_KEY, SIGNING_KEY


def _node(**kwargs):
  log_mock = Mock()
  return Node(NodeOptions(log = log_mock, **kwargs)), log_mock


def _with_keys(node):
  node.update_descriptor(fingerprint = FINGERPRINT, onion_key = ONION_KEY, signing_key = SIGNING_KEY)
  return node


class TestNode(unittest.TestCase):
  def test_default_roles(self):
    node, log_mock = _node()

    self.assertTrue(node.is_entrance)
    self.assertTrue(node.is_relay)
    self.assertFalse(node.is_exit)

    log_mock.assert_called_once_with('Starting node with the entrance, relay roles')

  def test_exit_role(self):
    node, log_mock = _node(exit = ExitOptions())

    self.assertTrue(node.is_exit)
    self.assertEqual([
      ('Starting node with the entrance, relay, exit roles',),
      ('Exit policy: accept 22, 80, 443, 465, 993',),
    ], [call[0] for call in log_mock.call_args_list])

  def test_single_and_no_roles(self):
    node, log_mock = _node(entrance = None)
    log_mock.assert_called_once_with('Starting node with the relay role')

    node, log_mock = _node(entrance = None, relay = None)
    log_mock.assert_called_once_with('Starting node without any roles')
    self.assertFalse(node.is_entrance or node.is_relay or node.is_exit)

  @patch('tornode.util.log.notice')
  def test_exit_without_relay(self, notice_mock):
    _node(relay = None, exit = ExitOptions())
    notice_mock.assert_called_once_with("We're an exit but not a relay, which is an unusual configuration")

  @patch('builtins.print')
  def test_default_options(self, print_mock):
    node = Node()

    self.assertTrue(node.is_entrance)
    self.assertTrue(node.is_relay)
    self.assertFalse(node.is_exit)
    self.assertTrue(print_mock.call_args[0][0].endswith('] Starting node with the entrance, relay roles'))

  def test_invalid_options(self):
    self.assertRaises(TypeError, Node, {'exit': None})
    self.assertRaises(TypeError, Node, ExitOptions())

  def test_descriptor_seeded_from_options(self):
    node, _ = _node(relay = RelayOptions(9001, 'caerSidi', 'atagar@torproject.org'), exit = ExitOptions(['accept *:443']))
    desc = node.descriptor

    self.assertEqual('caerSidi', desc.nickname)
    self.assertEqual(9001, desc.or_port)
    self.assertEqual('atagar@torproject.org', desc.contact)
    self.assertEqual(ExitPolicy('accept *:443'), desc._exit_policy)
    self.assertEqual('', desc.fingerprint)
    self.assertFalse(desc.is_configured())
    self.assertTrue(node.store.current is desc)

  def test_descriptor_without_relay(self):
    node, _ = _node(relay = None, exit = ExitOptions())

    self.assertEqual('', node.descriptor.nickname)
    self.assertEqual(0, node.descriptor.or_port)
    self.assertEqual(ExitOptions().exit_policy, node.descriptor._exit_policy)

  def test_descriptor_without_exit(self):
    node, _ = _node()
    self.assertEqual(ExitPolicy(), node.descriptor._exit_policy)

  def test_keys_required_for_decisions(self):
    node, _ = _node(exit = ExitOptions())

    self.assertRaises(tornode.UninitializedKeyMaterial, node.can_exit_to, '93.184.216.34', 443)
    self.assertRaises(tornode.UninitializedKeyMaterial, node.decide, '93.184.216.34', 443)

    _with_keys(node)

    self.assertTrue(node.can_exit_to('93.184.216.34', 443))
    self.assertEqual(Action.ACCEPT, node.decide('93.184.216.34', 443))

  def test_can_exit_to(self):
    node = _with_keys(_node(exit = ExitOptions())[0])

    for port in (22, 80, 443, 465, 993):
      self.assertTrue(node.can_exit_to('93.184.216.34', port))

    self.assertFalse(node.can_exit_to('93.184.216.34', 8080))
    self.assertFalse(node.can_exit_to('2001:db8::1', 443))

    self.assertRaises(ValueError, node.can_exit_to, '93.184.216', 443)
    self.assertRaises(ValueError, node.can_exit_to, '93.184.216.34', 65536)

  def test_non_exit_rejects_everything(self):
    node = _with_keys(_node()[0])

    self.assertEqual(Action.REJECT, node.decide('93.184.216.34', 443))
    self.assertFalse(node.can_exit_to('93.184.216.34', 443))
    self.assertFalse(node.can_exit_to('2001:db8::1', 443))

  def test_update_descriptor(self):
    node, log_mock = _node()
    original = node.descriptor

    updated = node.update_descriptor(nickname = 'caerSidi', address = '71.35.133.197')

    self.assertTrue(node.descriptor is updated)
    self.assertEqual('caerSidi', updated.nickname)
    self.assertEqual('71.35.133.197', updated.address)

    # the prior descriptor is left alone

    self.assertEqual('', original.nickname)
    self.assertEqual('0.0.0.0', original.address)

    log_mock.assert_called_with('Updated our descriptor (address, nickname)')

  def test_update_descriptor_with_bandwidth(self):
    node, log_mock = _node()
    node.update_descriptor(average_bandwidth = 5242880, burst_bandwidth = 10485760)

    self.assertEqual([
      ('Updated our descriptor (average_bandwidth, burst_bandwidth)',),
      ('Advertising a bandwidth of 5 MB/s (burst 10 MB/s)',),
    ], [call[0] for call in log_mock.call_args_list[1:]])

  def test_invalid_update(self):
    node, _ = _node()
    original = node.descriptor

    self.assertRaises(ValueError, node.update_descriptor, or_port = 70000)
    self.assertRaises(TypeError, node.update_descriptor, socks_port = 9050)
    self.assertTrue(node.descriptor is original)

  def test_peers(self):
    node, _ = _node()
    peer = RouterDescriptor('peer', '10.0.0.1', 9001, FINGERPRINT, ONION_KEY, SIGNING_KEY)

    node.store.add_peer(peer)

    self.assertTrue(node.store.get_peer(FINGERPRINT) is peer)
    self.assertEqual('', node.descriptor.nickname)

  @patch('tornode.util.log.info')
  def test_log(self, info_mock):
    node, log_mock = _node()
    node.log('hello world')

    log_mock.assert_called_with('hello world')
    info_mock.assert_called_with('hello world')
