"""
Data Models Module
----------------
Contains Pydantic models for form validation and listing results.
Defines the structure of user-submitted campground, comment, review and
registration data with appropriate field types and constraints.
"""
