"""
contract-gate - resolve HTTP requests against API contracts and validate
their shape before any network call is made.
"""

__version__ = "0.1.0"
