"""
Unit tests for the tornode.exit_policy.IPv6Policy classes.
"""

import unittest

import tornode

from tornode.exit_policy import (
  Action,
  IPv6AcceptPorts,
  IPv6Policy,
  IPv6RejectPorts,
  PortSpecAll,
  PortSpecRange,
  PortSpecSingle,
)


class TestIPv6Policy(unittest.TestCase):
  def test_accept_ports(self):
    policy = IPv6AcceptPorts(PortSpecSingle(80), PortSpecRange(440, 450))

    self.assertTrue(policy.is_accept)
    self.assertEqual(Action.ACCEPT, policy.decide(80))
    self.assertEqual(Action.ACCEPT, policy.decide(443))
    self.assertEqual(Action.REJECT, policy.decide(81))
    self.assertEqual(Action.REJECT, policy.decide(451))

  def test_reject_ports(self):
    policy = IPv6RejectPorts(PortSpecSingle(25), PortSpecRange(6660, 6669))

    self.assertFalse(policy.is_accept)
    self.assertEqual(Action.REJECT, policy.decide(25))
    self.assertEqual(Action.REJECT, policy.decide(6667))
    self.assertEqual(Action.ACCEPT, policy.decide(80))
    self.assertEqual(Action.ACCEPT, policy.decide(6670))

  def test_empty_policies(self):
    for port in (0, 80, 65535):
      self.assertFalse(IPv6AcceptPorts().can_exit_to(port))
      self.assertTrue(IPv6RejectPorts().can_exit_to(port))

  def test_wildcard_ports(self):
    self.assertTrue(IPv6AcceptPorts(PortSpecAll()).can_exit_to(8080))
    self.assertFalse(IPv6RejectPorts(PortSpecAll()).can_exit_to(8080))

  def test_parse(self):
    test_inputs = {
      'accept 80,443': IPv6AcceptPorts(PortSpecSingle(80), PortSpecSingle(443)),
      'reject 1-1024': IPv6RejectPorts(PortSpecRange(1, 1024)),
      'accept 80, 443': IPv6AcceptPorts(PortSpecSingle(80), PortSpecSingle(443)),
      'reject 25,119,135-139,445': IPv6RejectPorts(PortSpecSingle(25), PortSpecSingle(119), PortSpecRange(135, 139), PortSpecSingle(445)),
      'accept': IPv6AcceptPorts(),
      b'reject 0': IPv6RejectPorts(PortSpecSingle(0)),
    }

    for policy_arg, expected in test_inputs.items():
      self.assertEqual(expected, IPv6Policy.parse(policy_arg))

  def test_str(self):
    test_inputs = (
      'accept 80,443',
      'reject 1-1024',
      'reject 25,119,135-139,445',
      'accept',
      'reject',
    )

    for policy_arg in test_inputs:
      self.assertEqual(policy_arg, str(IPv6Policy.parse(policy_arg)))

  def test_invalid_policies(self):
    self.assertRaises(ValueError, IPv6Policy.parse, 'allow 80')
    self.assertRaises(ValueError, IPv6Policy.parse, 'accept80')
    self.assertRaises(ValueError, IPv6Policy.parse, '')
    self.assertRaises(tornode.InvalidPortSpec, IPv6Policy.parse, 'accept 80,')
    self.assertRaises(tornode.InvalidPortSpec, IPv6Policy.parse, 'accept 443-80')
    self.assertRaises(tornode.InvalidPortSpec, IPv6Policy.parse, 'reject 65536')

  def test_invalid_construction(self):
    self.assertRaises(TypeError, IPv6Policy)
    self.assertRaises(TypeError, IPv6AcceptPorts, 80)
    self.assertRaises(TypeError, IPv6RejectPorts, '80')

  def test_malformed_port(self):
    for port in (-1, 65536, 'http', None):
      self.assertRaises(ValueError, IPv6AcceptPorts().decide, port)
      self.assertRaises(ValueError, IPv6RejectPorts().decide, port)

  def test_equality(self):
    self.assertEqual(IPv6AcceptPorts(PortSpecSingle(80)), IPv6AcceptPorts(PortSpecSingle(80)))
    self.assertNotEqual(IPv6AcceptPorts(PortSpecSingle(80)), IPv6RejectPorts(PortSpecSingle(80)))
    self.assertNotEqual(IPv6AcceptPorts(), IPv6RejectPorts())
