"""
Unit tests for the tornode.util.tor_tools functions.
"""

import unittest

import tornode.util.tor_tools

from test import FINGERPRINT


class TestTorTools(unittest.TestCase):
  def test_is_valid_fingerprint(self):
    self.assertTrue(tornode.util.tor_tools.is_valid_fingerprint(FINGERPRINT))
    self.assertTrue(tornode.util.tor_tools.is_valid_fingerprint(FINGERPRINT.lower()))
    self.assertTrue(tornode.util.tor_tools.is_valid_fingerprint(FINGERPRINT.encode('utf-8')))
    self.assertTrue(tornode.util.tor_tools.is_valid_fingerprint('$' + FINGERPRINT, True))

    invalid_fingerprints = (
      None,
      '',
      5,
      FINGERPRINT[:-1],
      FINGERPRINT + 'A',
      FINGERPRINT[:-1] + 'G',
      '$' + FINGERPRINT,
    )

    for fingerprint in invalid_fingerprints:
      self.assertFalse(tornode.util.tor_tools.is_valid_fingerprint(fingerprint))

    self.assertFalse(tornode.util.tor_tools.is_valid_fingerprint(FINGERPRINT, True))

  def test_is_valid_nickname(self):
    for nickname in ('caerSidi', 'a', 'abcABC123', 'A' * 19, b'caerSidi'):
      self.assertTrue(tornode.util.tor_tools.is_valid_nickname(nickname))

    for nickname in (None, '', 5, 'A' * 20, 'caer sidi', 'caer_sidi', 'caerSidi\n', '$caerSidi'):
      self.assertFalse(tornode.util.tor_tools.is_valid_nickname(nickname))

  def test_is_hex_digits(self):
    self.assertTrue(tornode.util.tor_tools.is_hex_digits('12345', 5))
    self.assertTrue(tornode.util.tor_tools.is_hex_digits('AbCdE', 5))

    self.assertFalse(tornode.util.tor_tools.is_hex_digits('X', 1))
    self.assertFalse(tornode.util.tor_tools.is_hex_digits('1234', 5))
    self.assertFalse(tornode.util.tor_tools.is_hex_digits('', 0))
