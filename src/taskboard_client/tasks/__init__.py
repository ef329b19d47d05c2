"""
Task subsystem.

Components:
- sync.py: task/user list fetching
- mutations.py: create/update/status/delete with the busy marker
- kanban.py: board categorization (pure)
"""
