"""
SLA Interfaces Layer
====================

Interface adapters (controllers) for the SLA module.

This is the outermost layer - handles HTTP requests/responses and
delegates to application services.
"""

from sla_tracker.sla.interfaces.controllers import ticket_router

__all__ = ["ticket_router"]
