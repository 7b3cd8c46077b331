"""
Medical reports and their statistics.
"""
