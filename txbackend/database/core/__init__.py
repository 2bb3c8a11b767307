"""
The `core` package holds the service layer and the composition root.

Contents
--------
- services
    `RegistrationService` and `ProfileService`, both `@transactional`.
- container
    `build_services(engine)` registers the default transaction manager,
    scans `services` for transactional classes and returns proxied service
    instances; `initialize_schema(engine)` creates the tables.
"""
