"""
automation_hub.events

Change notifications for automation lifecycle events.

Responsibilities:
- Event payload model.
- Publisher implementations (Kafka, in-memory).
"""

# Package marker.
