"""Storage of registered user records."""
