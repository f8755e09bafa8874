"""
Unit tests for the tornode library.
"""

__all__ = [
  'descriptor',
  'exit_policy',
  'util',
]
