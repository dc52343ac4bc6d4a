"""
ProductHub Backend — Services Layer
=====================================

What:  Business rules between the HTTP routes and the database.
How:   Stateless service objects with module-level singletons. Each method
       receives the request's AsyncSession (and the caller's Claims where the
       operation is authenticated) and returns response schemas or raises a
       ProductHubError subclass.

Service Inventory:
    - validators:      email/password/blank-field predicates (pure)
    - passwords:       bcrypt hashing, run off the event loop
    - TokenService:    JWT issue/verify for access and refresh tokens
    - FileService:     image validation, storage and cleanup
    - UserService:     accounts, sessions, profile image, listing helpers
    - ProductService:  owner-scoped product CRUD with conditional mutations
"""
