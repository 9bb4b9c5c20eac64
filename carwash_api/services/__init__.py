"""
Service layer.

Services own business rules and the unit of work: they combine repositories,
enforce fiscal and role rules, raise ServiceError subclasses and commit.
"""
