"""
Infrastructure Layer
=====================

Database engine and session management.
"""
