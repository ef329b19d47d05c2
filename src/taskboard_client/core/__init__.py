"""
Core types shared by every component.

Components:
- models.py: Identity, Task, TaskPayload, enums, form/busy value types
- state.py: AppState, the single mutable state container
- ports.py: Protocols the components depend on
"""
