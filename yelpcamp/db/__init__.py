"""
Database Module
-------------
Handles database connections, ORM models, and database operations.
Uses SQLAlchemy for persistence and defines the schema for users, campgrounds,
comments, reviews and notifications.
"""
