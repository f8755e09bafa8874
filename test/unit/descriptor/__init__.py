"""
Unit tests for tornode.descriptor.
"""
