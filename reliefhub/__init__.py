"""
ReliefHub - in-memory relief-point, alert and recommendation core.
"""

__version__ = "0.1.0"
