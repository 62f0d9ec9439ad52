"""Module for Data Transport Utility Classes

Request handlers receive request objects and return response objects. Neither carries
any framework state, so handlers can be executed and tested without an HTTP server.
"""

import sys
from enum import Enum


class Status(Enum):
    """Enum class for Status to Response Code Mapping"""

    SUCCESS = 200
    REDIRECT = 302
    PARAMETERS_ERROR = 400
    NOT_FOUND = 404
    UNPROCESSABLE_ENTITY = 422
    SYSTEM_ERROR = 500
    SERVICE_UNAVAILABLE = 503


class InvalidRequestObject:
    """A utility class to represent an Invalid Request Object

    Request objects return an InvalidRequestObject from `from_dict` when the input
    cannot be accepted, carrying the errors and the input as received.
    """

    is_valid = False

    def __init__(self, data=None):
        """Initialize a blank Request object with no errors"""
        self.errors = []
        self.data = data or {}

    def add_error(self, parameter, message):
        """Utility method to append an error message"""
        self.errors.append({"parameter": parameter, "message": message})

    @property
    def has_errors(self):
        """Indicates if there are errors"""
        return len(self.errors) > 0


class ValidRequestObject:
    """Base class of accepted Request Objects. Concrete classes implement `from_dict`."""

    is_valid = True

    @classmethod
    def from_dict(cls, adict):
        """
        Initialize a Request object from a dictionary.

        Concrete implementations validate the data and return either an instance of
        the class, or an `InvalidRequestObject`.
        """
        raise NotImplementedError


class ResponseSuccess:
    """A utility class to represent a successful Response

    Attributes:
        code (Status): to represent different kinds of success
        value: Optional data returned with the response
        message (str): Optional user-visible message, like a confirmation
    """

    success = True

    def __init__(self, code, value=None, message=None):
        """Initialize Successful Response Object"""
        self.code = code
        self.value = value
        self.message = message


class ResponseRedirect(ResponseSuccess):
    """A successful Response that sends the client to `location`"""

    def __init__(self, location, value=None, message=None):
        super().__init__(Status.REDIRECT, value, message)
        self.location = location


class ResponseFailure:
    """Class to represent a failed Response Object

    Attributes:
        code (Status): among 4xx and 5xx errors
        message: Custom message or error details returned with the response
        data (dict): The input that was rejected, so that clients can present it again
    """

    success = False
    exception_message = "Something went wrong. Please try later!!"

    def __init__(self, code, message, data=None):
        """Initialize a Failure Response Object"""
        self.code = code
        if code in [Status.SYSTEM_ERROR, Status.PARAMETERS_ERROR]:
            # Internal details are never part of a response
            self.message = self.exception_message
        else:
            self.message = message
        self.data = data or {}

        # Store the original exception if any
        self.exc_type, self.exc, self.trace = sys.exc_info()

    @property
    def value(self):
        """Utility method to retrieve Response Object information"""
        return {"code": self.code.value, "message": self.message, "data": self.data}

    @classmethod
    def build_response(cls, code=Status.SYSTEM_ERROR, message=None, data=None):
        """Utility method to build a new Resource Error object"""
        return cls(code, message, data)

    @classmethod
    def build_from_invalid_request(cls, invalid_request_object):
        """Utility method to build a new Error object from parameters"""
        message = {}
        for err in invalid_request_object.errors:
            messages = err["message"]
            if not isinstance(messages, list):
                messages = [messages]
            message.setdefault(err["parameter"], []).extend(messages)
        return cls.build_response(
            Status.UNPROCESSABLE_ENTITY, message, invalid_request_object.data
        )

    @classmethod
    def build_not_found(cls, message=None, data=None):
        """Utility method to build a HTTP 404 Resource Error object"""
        return cls(Status.NOT_FOUND, message, data)

    @classmethod
    def build_system_error(cls, message=None, data=None):
        """Utility method to build a HTTP 500 System Error object"""
        return cls(Status.SYSTEM_ERROR, message, data)

    @classmethod
    def build_unprocessable_error(cls, message=None, data=None):
        """Utility method to build a HTTP 422 Parameter Error object"""
        return cls(Status.UNPROCESSABLE_ENTITY, message, data)

    @classmethod
    def build_unavailable(cls, message=None, data=None):
        """Utility method to build a HTTP 503 error, for failures the client may retry"""
        return cls(Status.SERVICE_UNAVAILABLE, message, data)
