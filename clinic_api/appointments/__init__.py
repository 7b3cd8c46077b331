"""
Appointment booking for patients and walk-in visitors.
"""
