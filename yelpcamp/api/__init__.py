"""
API Module
---------
Server-rendered web endpoints built with FastAPI.
Features include:
- Listing, searching and paginating campgrounds
- Creating, editing and deleting campgrounds (owner only)
- Comments and reviews on campgrounds
- Registration, login, following users and notifications
"""
