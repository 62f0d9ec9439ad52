import pytest

from blogapp import services
from blogapp.exceptions import ObjectNotFoundError, StoreTimeoutError
from blogapp.models import Comment, Post
from blogapp.transport import ResponseFailure, ResponseRedirect, Status
from blogapp.usecases import (
    CreateCommentRequest,
    CreateCommentUseCase,
    CreatePostRequest,
    CreatePostUseCase,
    DestroyPostUseCase,
    ListPostsUseCase,
    ListRequest,
    PostIdentifierRequest,
    ShowPostUseCase,
    post_location,
)


class TestRequestObjects:
    def test_create_post_request(self):
        request_object = CreatePostRequest.from_dict(
            {"title": "Hello", "body": "World", "published": "1"}
        )

        assert request_object.is_valid
        assert request_object.title == "Hello"
        assert request_object.body == "World"
        assert request_object.published is True
        assert request_object.timeout is None

    def test_create_post_request_defaults(self):
        request_object = CreatePostRequest.from_dict({})

        assert request_object.is_valid
        assert request_object.title is None
        assert request_object.published is False

    def test_unknown_keys_are_dropped(self):
        request_object = CreatePostRequest.from_dict({"title": "Hi", "author": "Me"})

        assert request_object.is_valid
        assert "author" not in request_object.data

    def test_invalid_published_value(self):
        request_object = CreatePostRequest.from_dict({"published": "maybe"})

        assert not request_object.is_valid
        assert request_object.has_errors
        assert request_object.errors[0]["parameter"] == "published"

    def test_create_comment_request_needs_post_id(self):
        request_object = CreateCommentRequest.from_dict({"body": "Orphan"})

        assert not request_object.is_valid
        assert request_object.errors[0]["parameter"] == "post_id"

    def test_post_identifier_request(self):
        request_object = PostIdentifierRequest.from_dict({"post_id": "7"}, timeout=2)

        assert request_object.is_valid
        assert request_object.post_id == 7
        assert request_object.timeout == 2

    def test_post_identifier_request_with_invalid_id(self):
        request_object = PostIdentifierRequest.from_dict({"post_id": "abc"})

        assert not request_object.is_valid
        assert request_object.errors == [
            {"parameter": "post_id", "message": ["Not a valid integer."]}
        ]


class TestCreatePostUseCase:
    def test_success_redirects_to_the_post(self, test_domain):
        response = CreatePostUseCase().execute(
            CreatePostRequest.from_dict({"title": "Hello", "body": "World"})
        )

        assert isinstance(response, ResponseRedirect)
        assert response.success
        assert response.code == Status.REDIRECT
        assert response.location == post_location(response.value.id)
        assert response.message == "Post was successfully created."
        assert test_domain.repository_for(Post).count() == 1

    def test_invalid_request(self, test_domain):
        response = CreatePostUseCase().execute(
            CreatePostRequest.from_dict({"published": "maybe"})
        )

        assert not response.success
        assert response.code == Status.UNPROCESSABLE_ENTITY
        assert "published" in response.message
        assert response.data == {"published": "maybe"}
        assert test_domain.repository_for(Post).count() == 0

    def test_validation_failure(self, test_domain):
        response = CreatePostUseCase().execute(
            CreatePostRequest.from_dict({"title": "a" * 256})
        )

        assert response.code == Status.UNPROCESSABLE_ENTITY
        assert response.message == {"title": ["value has more than 255 characters"]}
        assert test_domain.repository_for(Post).count() == 0

    def test_timeout_becomes_service_unavailable(self, test_domain, mocker):
        mocker.patch.object(
            services, "create_post", side_effect=StoreTimeoutError("Timed out")
        )

        response = CreatePostUseCase().execute(
            CreatePostRequest.from_dict({"title": "Hello"})
        )

        assert response.code == Status.SERVICE_UNAVAILABLE
        assert response.value == {
            "code": 503,
            "message": "The request took too long to complete. Please retry.",
            "data": {"title": "Hello", "body": None, "published": False},
        }

    def test_unexpected_errors_are_not_leaked(self, test_domain, mocker):
        mocker.patch.object(
            services, "create_post", side_effect=RuntimeError("password=hunter2")
        )

        response = CreatePostUseCase().execute(
            CreatePostRequest.from_dict({"title": "Hello"})
        )

        assert response.code == Status.SYSTEM_ERROR
        assert response.message == ResponseFailure.exception_message
        assert "hunter2" not in str(response.value)


class TestCreateCommentUseCase:
    def test_success_redirects_to_the_post(self, test_domain):
        post = services.create_post(title="Hello")

        response = CreateCommentUseCase().execute(
            CreateCommentRequest.from_dict({"post_id": str(post.id), "body": "Nice"})
        )

        assert response.code == Status.REDIRECT
        assert response.location == f"/posts/{post.id}"
        assert response.message is None
        assert test_domain.repository_for(Comment).count_for(post.id) == 1

    def test_unknown_post(self, test_domain):
        response = CreateCommentUseCase().execute(
            CreateCommentRequest.from_dict({"post_id": 12345, "body": "Orphan"})
        )

        assert response.code == Status.UNPROCESSABLE_ENTITY
        assert response.message == {
            "post_id": ["Post with identifier 12345 does not exist"]
        }
        assert test_domain.repository_for(Comment).count() == 0


class TestDestroyPostUseCase:
    def test_success_redirects_to_the_list(self, test_domain):
        post = services.create_post(title="Hello")
        services.create_comment(post.id, body="Nice")

        response = DestroyPostUseCase().execute(
            PostIdentifierRequest.from_dict({"post_id": post.id})
        )

        assert response.code == Status.REDIRECT
        assert response.location == "/posts"
        assert response.message == "Post was successfully destroyed."
        assert response.value.comments_removed == 1
        assert test_domain.repository_for(Post).count() == 0
        assert test_domain.repository_for(Comment).count() == 0

    def test_unknown_post(self, test_domain):
        response = DestroyPostUseCase().execute(
            PostIdentifierRequest.from_dict({"post_id": 12345})
        )

        assert response.code == Status.NOT_FOUND
        assert response.message == {
            "identifier": ["`Post` object with identifier 12345 does not exist."]
        }

    def test_cascade_failure_is_a_system_error(self, test_domain, mocker):
        post = services.create_post(title="Hello")
        services.create_comment(post.id, body="Nice")
        mocker.patch(
            "blogapp.repository.PostRepository.remove",
            side_effect=RuntimeError("Disk failure"),
        )

        response = DestroyPostUseCase().execute(
            PostIdentifierRequest.from_dict({"post_id": post.id})
        )

        assert response.code == Status.SYSTEM_ERROR
        assert response.message == ResponseFailure.exception_message
        assert test_domain.repository_for(Post).count() == 1
        assert test_domain.repository_for(Comment).count() == 1

    def test_vanished_comment_is_not_reported_as_missing_post(
        self, test_domain, mocker
    ):
        post = services.create_post(title="Hello")
        services.create_comment(post.id, body="Nice")
        mocker.patch(
            "blogapp.repository.CommentRepository.remove",
            side_effect=ObjectNotFoundError("`Comment` object does not exist."),
        )

        response = DestroyPostUseCase().execute(
            PostIdentifierRequest.from_dict({"post_id": post.id})
        )

        assert response.code == Status.SYSTEM_ERROR
        assert test_domain.repository_for(Post).count() == 1


class TestQueryUseCases:
    def test_show_post_with_comments(self, test_domain):
        post = services.create_post(title="Hello", body="World", published=True)
        comment = services.create_comment(post.id, body="Nice")

        response = ShowPostUseCase().execute(
            PostIdentifierRequest.from_dict({"post_id": post.id})
        )

        assert response.code == Status.SUCCESS
        assert response.value == {
            "id": post.id,
            "title": "Hello",
            "body": "World",
            "published": True,
            "location": f"/posts/{post.id}",
            "comments": [{"id": comment.id, "post_id": post.id, "body": "Nice"}],
        }

    def test_show_unknown_post(self, test_domain):
        response = ShowPostUseCase().execute(
            PostIdentifierRequest.from_dict({"post_id": 12345})
        )

        assert response.code == Status.NOT_FOUND

    def test_list_posts(self, test_domain):
        services.create_post(title="First")
        services.create_post(title="Second")

        response = ListPostsUseCase().execute(ListRequest.from_dict())

        assert response.code == Status.SUCCESS
        assert [post["title"] for post in response.value] == ["First", "Second"]


@pytest.mark.parametrize(
    "request_object",
    [
        CreatePostRequest.from_dict({"published": "maybe"}),
        PostIdentifierRequest.from_dict({"post_id": None}),
    ],
)
def test_invalid_requests_never_reach_services(request_object, mocker):
    spy = mocker.patch.object(services, "create_post")

    response = CreatePostUseCase().execute(request_object)

    assert response.code == Status.UNPROCESSABLE_ENTITY
    spy.assert_not_called()
