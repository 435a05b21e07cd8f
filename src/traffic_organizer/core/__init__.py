"""Core domain package for traffic_organizer.

Core contains classification, rule matching and session encoding without any
web framework or storage-specific code, keeping the business logic portable.
"""
