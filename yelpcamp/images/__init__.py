"""
Images Module
-----------
Stores uploaded campground images in S3 and removes them again when a listing
is edited or deleted.
"""
