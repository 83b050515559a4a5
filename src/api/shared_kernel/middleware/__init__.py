"""Shared middleware for cross-cutting concerns.

This module contains request-scoped plumbing that is shared across bounded
contexts: propagation of the authenticated AuthContext and the rate
limiting hook consulted before authorization runs.
"""
