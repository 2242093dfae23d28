"""
Core domain models, numeric primitives, and contracts.

This module contains the building blocks of the inverse cache that are
independent of the cache orchestration itself.
"""
