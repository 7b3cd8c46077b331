"""
Authentication module for the clinic API.

This module provides authentication and authorization functionality including:
- Registration by email and/or phone
- Email + password login
- Phone + one-time code login
- JWT token authentication
- Role-based access control re-checked against the database
"""
