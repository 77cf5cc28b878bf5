"""
Reading tracker core package.

This package currently focuses on the shelves subsystem. It exposes
dataclasses for shelf entries, goals and derived reading views, the status
machine and progress rules, pure aggregators for goal pace, calendar and
stats, repository/catalog adapters, and a service facade that drives writes
through a single conditional upsert.
"""
