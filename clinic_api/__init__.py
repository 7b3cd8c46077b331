"""
Clinic API - authentication, appointments, medical reports and contact messages.
"""
__version__ = "1.0.0"
