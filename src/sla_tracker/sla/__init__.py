"""
SLA Module
==========

Bounded context for ticket lifecycle tracking and SLA accounting.

Responsibilities:
- Compute SLA deadlines from ticket priority
- Apply ticket lifecycle transitions (open, in_progress, resolved)
- Detect breaches and derive KPIs at query time
- Persist ticket snapshots through pluggable repositories
- Expose tickets and the dashboard over HTTP
"""
