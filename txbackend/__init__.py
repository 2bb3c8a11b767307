"""
txbackend: declarative transaction management for SQLAlchemy-backed services.

Mark a service class with ``@transactional``, let the composition root hand
out its instances as proxies, and every public method call runs in a
transaction that nested calls on the same thread or task join.

Packages
--------
- database: configuration, entities, DAOs, transaction management, services
- crypt: password hashing for user registration
- api: FastAPI router and request/response models
"""

__version__ = "0.1.0"
