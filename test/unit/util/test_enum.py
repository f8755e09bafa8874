"""
Unit tests for the tornode.util.enum class and functions.
"""

import unittest

import tornode.util.enum


class TestEnum(unittest.TestCase):
  def test_enum_examples(self):
    """
    Checks that the pydoc examples are accurate.
    """

    roles = tornode.util.enum.Enum('ENTRANCE', 'RELAY', 'EXIT')
    self.assertEqual('Entrance', roles.ENTRANCE)
    self.assertEqual(('Entrance', 'Relay', 'Exit'), tuple(roles))

    actions = tornode.util.enum.Enum(('ACCEPT', 'accept'), ('REJECT', 'reject'))
    self.assertEqual('accept', actions.ACCEPT)

  def test_uppercase_enum(self):
    runlevels = tornode.util.enum.UppercaseEnum('DEBUG', 'INFO', 'NOTICE', 'WARN', 'ERROR')
    self.assertEqual('DEBUG', runlevels.DEBUG)
    self.assertEqual(('DEBUG', 'INFO', 'NOTICE', 'WARN', 'ERROR'), tuple(runlevels))

  def test_membership(self):
    roles = tornode.util.enum.Enum('ENTRANCE', 'RELAY', 'EXIT')

    self.assertTrue('Relay' in roles)
    self.assertFalse('RELAY' in roles)
    self.assertFalse('Bridge' in roles)

  def test_invalid_input(self):
    self.assertRaises(ValueError, tornode.util.enum.Enum, ('ACCEPT',))
    self.assertRaises(ValueError, tornode.util.enum.Enum, 5)
