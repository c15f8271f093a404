"""
identity_service tests

Covers the user service (registration, password login, biometric login and
biometric key rotation), its SQLAlchemy store, the password hasher and token
issuer, and the FastAPI transport that exposes them.
"""
