"""
Test suite for maturity-allocator

Contains:
- tests/unit/          : Unit tests for math, allocation, market and engine modules
"""
