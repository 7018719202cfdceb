""" errors.py

Errors specific to this client. Everything else the client can run into (connection refused, reset, dns failures, bad statuses) is expressed with the
galaxy api errors that galaxy.http.handle_exception produces, so callers only have one family of exceptions to deal with.

Note that only PayloadDecodeError is expected to reach users of ScreepsApi. Transport errors and timeouts are logged by the http client and turned into None.
"""
from galaxy.api.errors import BackendNotAvailable, UnknownBackendResponse


class PrivateHostPending(BackendNotAvailable):
    """ A private server request was built before any candidate host answered a probe. Await the host resolver first.
    """
    def __init__(self, message: str = "Private server host has not been resolved yet"):
        super().__init__(message)


class PayloadDecodeError(UnknownBackendResponse):
    """ The compressed envelope was not valid base64, not valid compressed data, or did not decompress into json.
    """
    def __init__(self, message: str = "Can not decode compressed payload"):
        super().__init__(message)
