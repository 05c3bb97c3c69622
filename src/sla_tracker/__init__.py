"""
SLA Tracker
===========

Support ticket lifecycle tracking with priority-based SLA deadlines,
breach detection and KPI reporting.
"""

__version__ = "1.0.0"
