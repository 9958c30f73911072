"""
Hierarchy subsystem.

Components:
- models.py: data structures (TaskGroup, Project, Task, ParentRef, enums)
- records.py: store document <-> model conversion
- validation.py: field-level checks
- access.py: ownership-checked loads
- aggregator.py: task counts and completion percentages
- task_groups.py / projects.py / tasks.py: the managers (guards, cascades, provisioning)
"""
