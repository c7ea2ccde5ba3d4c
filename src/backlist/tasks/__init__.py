"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority, TemporalMode, Folder)
- task_store.py: SQLite-backed storage for tasks, folders and allowance settings
- weighting.py: urgency weight per temporal mode
- selector.py: ranks tasks and builds the short list
- lifecycle.py: present -> select -> pay out -> archive/reschedule
- task_api.py: small high-level helpers used by the rest of the app
"""
