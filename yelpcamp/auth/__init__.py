"""
Auth Module
---------
Password hashing, session login state and flash messages for the web layer.
"""
