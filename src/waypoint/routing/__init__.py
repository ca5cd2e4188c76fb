"""Routing — ordered pattern table with exact-first matching.

Handlers are registered during setup, most specific first. Registration
order is the only tie-break between parameterized patterns.
"""
