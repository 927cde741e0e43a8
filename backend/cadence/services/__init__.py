"""
Services module - Application business logic layer.

Modules:
- store: Session record persistence
- stats: Aggregate statistics
- tracking: Live cadence state machine and session upload
"""
