"""
Persistence adapters.

Components:
- snapshot_storage.py: shared load-apply-save logic for whole-snapshot backends
- kv_storage.py: SQLite key-value backend (snapshot under one key)
- file_storage.py: JSON file backend
- remote_storage.py: HTTP backend (one endpoint per operation)
- factory.py: adapter selection from Settings.storage_type
"""
