"""
Geocoding Module
--------------
Handles forward geocoding of user-entered locations to coordinates and a
formatted address. Uses OpenStreetMap's Nominatim API with caching and retries.
"""
