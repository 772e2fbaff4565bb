"""
automation_hub.api.routers

HTTP routers (health, automations, images).
"""
