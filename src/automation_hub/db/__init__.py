"""
automation_hub.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide the ORM model, engine/session setup, and the automation repository.
"""

# Package marker.
