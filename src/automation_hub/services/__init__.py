"""
automation_hub.services

Service-layer package.

Responsibilities:
- Own the automation lifecycle: ordering, url paths, images, notifications.
- Decide when to persist and when to notify.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services depend only on the store/publisher ports and are tested against a real
# SQLite database with an in-memory publisher.
