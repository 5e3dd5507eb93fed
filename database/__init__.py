"""
database — ORM models, engine/session factory and repositories.
"""
