"""
automation_hub.api

API package for the Automation Hub service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and request/response models.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer should remain thin: form parsing + error mapping + delegation to services.
