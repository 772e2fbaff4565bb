"""
automation_hub.images

Uploaded image assets.

Responsibilities:
- Content sniffing, validation and storage of uploads.
- Filesystem blob store addressed by generated names.
"""

# Package marker.
