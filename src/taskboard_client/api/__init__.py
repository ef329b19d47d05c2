"""
Remote task service access.

Components:
- client.py: httpx-based async API client (auth, users, tasks)
- errors.py: error message extraction + exception types
"""
