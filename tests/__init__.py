"""
InlineSuggest Tests Package
===========================
Test suite for the suggestion engine.

Run all tests: python3 -m pytest tests/ -v
Run specific: python3 -m pytest tests/test_position.py -v
"""

__version__ = "1.0.0"
