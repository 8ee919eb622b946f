"""
Complaint Desk: role-based complaint tracking with live discussion.
"""

__version__ = "1.0.0"
