"""
Unit tests for tornode.util.* contents.
"""

import unittest

from tornode.util import _compare_attr, _hash_attr


class _Point(object):
  def __init__(self, x, y):
    self.x = x
    self.y = y


class TestBaseUtil(unittest.TestCase):
  def test_hash_attr(self):
    self.assertEqual(_hash_attr(_Point(1, 2), 'x', 'y'), _hash_attr(_Point(1, 2), 'x', 'y'))
    self.assertNotEqual(_hash_attr(_Point(1, 2), 'x', 'y'), _hash_attr(_Point(2, 1), 'x', 'y'))

    # collection types are part of the hash

    self.assertNotEqual(_hash_attr(_Point((1, 2), 3), 'x'), _hash_attr(_Point([1, 2], 3), 'x'))

  def test_hash_attr_cache(self):
    point = _Point(1, 2)
    original_hash = _hash_attr(point, 'x', 'y', cache = True)

    point.x = 5

    self.assertEqual(original_hash, _hash_attr(point, 'x', 'y', cache = True))
    self.assertNotEqual(original_hash, _hash_attr(point, 'x', 'y'))

  def test_compare_attr(self):
    self.assertTrue(_compare_attr(_Point(1, 2), _Point(1, 2), 'x', 'y'))
    self.assertTrue(_compare_attr(_Point(1, 2), _Point(1, 3), 'x'))
    self.assertFalse(_compare_attr(_Point(1, 2), _Point(1, 3), 'x', 'y'))
    self.assertFalse(_compare_attr(_Point(1, 2), (1, 2), 'x', 'y'))

    # values with colliding hashes still differ

    self.assertEqual(_hash_attr(_Point(0, 1025), 'x', 'y'), _hash_attr(_Point(1, 1), 'x', 'y'))
    self.assertFalse(_compare_attr(_Point(0, 1025), _Point(1, 1), 'x', 'y'))
