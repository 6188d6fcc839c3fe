"""
HTTP service for the objection desk (FastAPI).
"""
