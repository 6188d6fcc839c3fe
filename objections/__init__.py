"""
Objection Desk

Farmer objection intake and admin triage service.
"""
