"""
Farmer-facing accounts and objection intake.
"""

from .accounts import FarmerAccounts, log_verification_code

__all__ = ['FarmerAccounts', 'log_verification_code']
