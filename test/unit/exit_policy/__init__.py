"""
Unit tests for tornode.exit_policy.
"""
