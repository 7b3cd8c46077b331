"""
Public contact form and admin inbox.
"""
