"""
Shared Kernel Module
====================

Generic infrastructure used by the SLA module: structured logging and
HTTP middleware.

DO NOT add ticket or SLA business logic to the shared kernel.
"""
