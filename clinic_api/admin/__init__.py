"""
Administrator-only endpoints.
"""
