"""
AutoCare API: customers, vehicles and service package subscriptions.
"""
__version__ = "1.0.0"
