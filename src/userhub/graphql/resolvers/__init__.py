"""Resolver package for GraphQL schema.

Resolvers read the caller from ``info.context["auth"]`` and reach storage
through ``info.context["services"]``.
"""
