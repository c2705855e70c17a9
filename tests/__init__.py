"""
Test suite for the power-law engine

Contains:
- tests/unit/          : Unit tests for individual modules
"""
