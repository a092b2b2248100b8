"""
Errors Module
-----------
Failure taxonomy shared by the services and route handlers. Handlers catch
YelpCampError where it occurs and turn it into a flash message plus redirect.
"""


class YelpCampError(Exception):
    pass


class ValidationFailure(YelpCampError):
    """Bad user input: unresolvable address, disallowed file type, empty text."""


class NotFound(YelpCampError):
    pass


class Unauthorized(YelpCampError):
    pass


class ExternalServiceFailure(YelpCampError):
    """The document store, geocoder or image store returned an error."""
