"""
Auth Module Tests
----------------
Comprehensive test suite for JWT authentication and authorization.
Tests cover token generation, validation, role-based access control, and endpoint protection.
"""
