"""
Services Module
-------------
Sequences store writes and external calls for each user action: listing and
search, the campground create/update/delete workflows, comments, reviews,
following and notification fan-out.
"""
