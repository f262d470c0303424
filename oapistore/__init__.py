"""In-memory pet store with a WSGI front end, bearer-token scope checks, a things store, and code generator configuration resolution."""

__version__ = "0.1.0"