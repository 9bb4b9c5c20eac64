"""
Repository layer for data access.

Repositories encapsulate SQLAlchemy queries for each domain area. They never
commit: services own the unit of work and commit once per operation.
"""
