import threading

import pytest

from blogapp import services
from blogapp.exceptions import (
    InvalidReferenceError,
    ObjectNotFoundError,
    StoreTimeoutError,
    ValidationError,
)
from blogapp.models import Comment, Post
from blogapp.unit_of_work import UnitOfWork


class TestUseCaseDecorator:
    def test_decorated_functions_are_marked(self):
        assert services.create_post._use_case is True
        assert services.create_post.__name__ == "create_post"

    def test_function_runs_in_a_unit_of_work(self, test_domain):
        @services.use_case
        def create_two():
            services.create_post(title="One")
            services.create_post(title="Two")
            raise RuntimeError("Abort")

        with pytest.raises(RuntimeError):
            create_two()

        assert test_domain.repository_for(Post).count() == 0


class TestCreatePost:
    def test_create_post(self, test_domain):
        post = services.create_post(
            title="Hello World", body="My first post", published=True
        )

        assert post.id is not None
        assert test_domain.repository_for(Post).get(post.id).title == "Hello World"

    def test_all_attributes_are_optional(self, test_domain):
        post = services.create_post()

        assert post.id is not None
        assert post.title is None
        assert post.published is False

    def test_long_titles_are_rejected(self, test_domain):
        with pytest.raises(ValidationError) as exc:
            services.create_post(title="a" * 256)

        assert "title" in exc.value.messages
        assert test_domain.repository_for(Post).count() == 0

    def test_identifiers_are_unique_and_increasing(self, test_domain):
        ids = [services.create_post(title=f"Post {i}").id for i in range(3)]

        assert ids == sorted(ids)
        assert len(set(ids)) == 3


class TestCreateComment:
    def test_create_comment(self, test_domain):
        post = services.create_post(title="Hello")
        comment = services.create_comment(post.id, body="Nice post")

        assert comment.id is not None
        assert comment.post_id == post.id
        assert test_domain.repository_for(Comment).count_for(post.id) == 1

    def test_unknown_post(self, test_domain):
        with pytest.raises(InvalidReferenceError) as exc:
            services.create_comment(12345, body="Orphan")

        assert exc.value.messages == {
            "post_id": ["Post with identifier 12345 does not exist"]
        }
        assert test_domain.repository_for(Comment).count() == 0

    def test_post_id_is_required(self, test_domain):
        with pytest.raises(ValidationError):
            services.create_comment(None, body="Orphan")

    def test_comments_of(self, test_domain):
        post = services.create_post(title="Hello")
        services.create_comment(post.id, body="First")
        services.create_comment(post.id, body="Second")

        assert [c.body for c in services.comments_of(post.id)] == ["First", "Second"]

    def test_comments_of_unknown_post(self, test_domain):
        with pytest.raises(ObjectNotFoundError):
            services.comments_of(12345)


class TestQueries:
    def test_get_post(self, test_domain):
        post = services.create_post(title="Hello")
        assert services.get_post(post.id) == post

    def test_get_unknown_post(self, test_domain):
        with pytest.raises(ObjectNotFoundError):
            services.get_post(12345)

    def test_list_posts(self, test_domain):
        first = services.create_post(title="First")
        second = services.create_post(title="Second")

        assert services.list_posts() == [first, second]


class TestDestroyPost:
    def test_destroy_post(self, test_domain):
        post = services.create_post(title="Hello")
        services.create_comment(post.id, body="Nice post")

        result = services.destroy_post(post.id)

        assert result.post_id == post.id
        assert result.comments_removed == 1
        assert services.list_posts() == []


class TestContention:
    """Writers queue behind a Unit of Work in progress on the memory store"""

    @pytest.fixture(autouse=True)
    def memory_only(self, test_domain):
        if test_domain.config["databases"]["default"]["provider"] != "memory":
            pytest.skip("Lock contention is specific to the memory store")

    def test_writer_times_out_waiting_for_the_store(self, test_domain):
        started = threading.Event()
        release = threading.Event()

        def hold_the_store():
            with test_domain.domain_context():
                with UnitOfWork() as uow:
                    uow.get_session("default")
                    started.set()
                    release.wait(timeout=5)

        holder = threading.Thread(target=hold_the_store)
        holder.start()
        started.wait(timeout=5)

        try:
            with pytest.raises(StoreTimeoutError):
                services.create_post(title="Blocked", timeout=0.1)
        finally:
            release.set()
            holder.join()

        assert test_domain.repository_for(Post).count() == 0

        # Once the store is free, writes go through
        services.create_post(title="Free", timeout=1)
        assert test_domain.repository_for(Post).count() == 1

    def test_concurrent_comments_on_one_post(self, test_domain):
        post = services.create_post(title="Popular")
        errors = []

        def comment(n):
            try:
                with test_domain.domain_context():
                    for i in range(5):
                        services.create_comment(post.id, body=f"{n}-{i}")
            except Exception as exc:  # pragma: no cover
                errors.append(exc)

        threads = [threading.Thread(target=comment, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        comments = services.comments_of(post.id)
        assert len(comments) == 20
        assert len({c.id for c in comments}) == 20
