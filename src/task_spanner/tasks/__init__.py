"""
Task subsystem.

Components:
- task_models.py: entity model (TaskNode, TaskStatus, TaskMode) + snapshot codec
- task_tree.py: pure recursive algorithms over an immutable forest
"""
