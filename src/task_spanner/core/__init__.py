"""
Core orchestration.

Components:
- ports.py: TaskStorage Protocol (adapter contract)
- errors.py: storage error taxonomy
- store.py: TaskStore (write-through cache + observers)
- state.py: AppState wiring settings and the store together
"""
