"""
Test suite for the matrix inverse cache

Contains:
- tests/unit/          : Unit tests for individual modules
"""
