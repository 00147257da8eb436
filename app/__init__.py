"""
Home Energy Calculator

A FastAPI service that signs users in with emailed one-time passcodes and
keeps a personal list of household appliances with their estimated energy
consumption and monthly cost.
"""

__version__ = "1.0.0"
