"""Request handlers: use cases that turn request objects into response objects.

Every failure is converted into a single `ResponseFailure` at this boundary. Use
cases never raise, and never write anything when they fail.
"""

import logging
from abc import ABCMeta, abstractmethod

import marshmallow as ma

from blogapp import services
from blogapp.exceptions import (
    InvalidReferenceError,
    ObjectNotFoundError,
    StoreTimeoutError,
    ValidationError,
)
from blogapp.serializers import (
    CommentRepresentation,
    CommentSchema,
    PostRepresentation,
    PostSchema,
)
from blogapp.transport import (
    InvalidRequestObject,
    ResponseFailure,
    ResponseRedirect,
    ResponseSuccess,
    Status,
    ValidRequestObject,
)

logger = logging.getLogger(__name__)


def post_location(post_id):
    """Canonical location of a Post"""
    return f"/posts/{post_id}"


class SchemaRequestObject(ValidRequestObject):
    """A request object whose data is loaded and validated by a marshmallow schema.

    Concrete classes set `schema_cls`. The loaded values become attributes of the
    request object. `timeout` is an optional number of seconds for the operation.
    """

    schema_cls = None

    def __init__(self, data: dict, timeout: float = None):
        self.data = data
        self.timeout = timeout
        for key, value in data.items():
            setattr(self, key, value)

    @classmethod
    def from_dict(cls, adict, timeout: float = None):
        try:
            data = cls.schema_cls().load(adict)
        except ma.ValidationError as err:
            invalid_req = InvalidRequestObject(data=dict(adict))
            for parameter, messages in err.normalized_messages().items():
                invalid_req.add_error(parameter, messages)
            return invalid_req

        return cls(data, timeout=timeout)


class CreatePostRequest(SchemaRequestObject):
    """Carries `title`, `body` and `published`"""

    schema_cls = PostSchema


class CreateCommentRequest(SchemaRequestObject):
    """Carries `post_id` and `body`"""

    schema_cls = CommentSchema


class PostIdentifierRequest(ValidRequestObject):
    """Addresses a single Post by its identifier"""

    def __init__(self, post_id, timeout: float = None):
        self.post_id = post_id
        self.timeout = timeout
        self.data = {"post_id": post_id}

    @classmethod
    def from_dict(cls, adict, timeout: float = None):
        try:
            post_id = int(adict.get("post_id"))
        except (TypeError, ValueError):
            invalid_req = InvalidRequestObject(data=dict(adict))
            invalid_req.add_error("post_id", ["Not a valid integer."])
            return invalid_req

        return cls(post_id, timeout=timeout)


class ListRequest(ValidRequestObject):
    data = {}

    @classmethod
    def from_dict(cls, adict=None):
        return cls()


class UseCase(metaclass=ABCMeta):
    """This is the base class for all UseCases"""

    def execute(self, request_object):
        """Generic executor method of all UseCases"""

        # If the request object is not valid then return a failure response
        if not request_object.is_valid:
            return ResponseFailure.build_from_invalid_request(request_object)

        data = request_object.data

        # Try to process the request and handle any errors encountered
        try:
            return self.process_request(request_object)

        except (ValidationError, InvalidReferenceError) as err:
            return ResponseFailure.build_unprocessable_error(err.messages, data)

        except ObjectNotFoundError as exc:
            return ResponseFailure.build_not_found(
                {"identifier": [str(exc)]}, data
            )

        except StoreTimeoutError as exc:
            logger.error(f"{self.__class__.__name__} timed out: {exc}")
            return ResponseFailure.build_unavailable(
                "The request took too long to complete. Please retry.", data
            )

        except Exception as exc:
            logger.error(
                f"{self.__class__.__name__} execution failed due to error {exc}",
                exc_info=True,
            )
            return ResponseFailure.build_system_error(
                "{}: {}".format(exc.__class__.__name__, exc), data
            )

    @abstractmethod
    def process_request(self, request_object):
        """This method should be overridden in each UseCase"""


class CreatePostUseCase(UseCase):
    """Create a Post and redirect to it"""

    def process_request(self, request_object):
        post = services.create_post(
            title=request_object.title,
            body=request_object.body,
            published=request_object.published,
            timeout=request_object.timeout,
        )
        return ResponseRedirect(
            post_location(post.id),
            value=post,
            message="Post was successfully created.",
        )


class CreateCommentUseCase(UseCase):
    """Create a Comment and redirect to the Post owning it"""

    def process_request(self, request_object):
        comment = services.create_comment(
            request_object.post_id,
            body=request_object.body,
            timeout=request_object.timeout,
        )
        return ResponseRedirect(post_location(comment.post_id), value=comment)


class DestroyPostUseCase(UseCase):
    """Destroy a Post with all its Comments and redirect to the list of Posts"""

    def process_request(self, request_object):
        result = services.destroy_post(
            request_object.post_id, timeout=request_object.timeout
        )
        return ResponseRedirect(
            "/posts", value=result, message="Post was successfully destroyed."
        )


class ShowPostUseCase(UseCase):
    """Return a Post along with its Comments"""

    def process_request(self, request_object):
        post = services.get_post(request_object.post_id)
        comments = services.comments_of(post.id)

        value = PostRepresentation().dump(post)
        value["comments"] = CommentRepresentation(many=True).dump(comments)
        return ResponseSuccess(Status.SUCCESS, value)


class ListPostsUseCase(UseCase):
    """Return all Posts, oldest first"""

    def process_request(self, request_object):
        posts = services.list_posts()
        return ResponseSuccess(
            Status.SUCCESS, PostRepresentation(many=True).dump(posts)
        )
