"""HTTP surface of BlogApp, built on Flask.

Views translate HTTP requests into request objects, execute use cases, and render the
response objects they return. They hold no logic of their own.
"""

import logging

from flask import Blueprint, Flask, flash, g, jsonify, make_response, redirect, request

from blogapp.transport import InvalidRequestObject, ResponseRedirect
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
)

logger = logging.getLogger(__name__)

blueprint = Blueprint("blogapp", __name__)


def immutable_dict_2_dict(imm_dict):
    """Convert an Immutable Dictionary to a Mutable one.
    Multi valued keys and keys ending with [] become lists.
    """
    m_dict = {}

    for key, val in imm_dict.to_dict(flat=False).items():
        if len(val) > 1 or key.endswith("[]"):
            m_dict[key.removesuffix("[]")] = val
        else:
            m_dict[key] = val[0]

    return m_dict


def parse_payload(resource):
    """Load the request body as a dictionary.

    Accepts JSON or form-encoded bodies, with attributes either at the top level or
    nested under the resource name, like `{"post": {"title": ...}}` or `post[title]=...`.

    Returns `None` when a JSON body cannot be parsed or does not hold an object.
    """
    if request.is_json:
        payload = request.get_json(silent=True)
    else:
        payload = immutable_dict_2_dict(request.form)

    if not isinstance(payload, dict):
        return None

    if isinstance(payload.get(resource), dict):
        return payload[resource]

    prefix = f"{resource}["
    nested = {
        key[len(prefix) : -1]: value
        for key, value in payload.items()
        if key.startswith(prefix) and key.endswith("]")
    }
    return nested or payload


def build_request(request_cls, resource):
    """Build a request object from the body, rejecting bodies that are not objects"""
    payload = parse_payload(resource)
    if payload is None:
        invalid_req = InvalidRequestObject()
        invalid_req.add_error(resource, ["Request body must be a JSON object."])
        return invalid_req

    return request_cls.from_dict(payload)


def render_response(response):
    """Render a response object as an HTTP response"""
    if isinstance(response, ResponseRedirect):
        if response.message:
            flash(response.message, "notice")
        return redirect(response.location, code=response.code.value)

    if response.success:
        return make_response(jsonify(response.value), response.code.value)

    logger.debug(f"Request failed with {response.code}: {response.message}")
    return make_response(jsonify(response.value), response.code.value)


@blueprint.get("/")
def home():
    return jsonify({"links": {"posts": "/posts"}})


@blueprint.get("/posts")
def list_posts():
    return render_response(ListPostsUseCase().execute(ListRequest.from_dict()))


@blueprint.post("/posts")
def create_post():
    request_object = build_request(CreatePostRequest, "post")
    return render_response(CreatePostUseCase().execute(request_object))


@blueprint.get("/posts/<int:post_id>")
def show_post(post_id):
    request_object = PostIdentifierRequest.from_dict({"post_id": post_id})
    return render_response(ShowPostUseCase().execute(request_object))


@blueprint.delete("/posts/<int:post_id>")
def destroy_post(post_id):
    request_object = PostIdentifierRequest.from_dict({"post_id": post_id})
    return render_response(DestroyPostUseCase().execute(request_object))


@blueprint.post("/comments")
def create_comment():
    request_object = build_request(CreateCommentRequest, "comment")
    return render_response(CreateCommentUseCase().execute(request_object))


def create_app(domain) -> Flask:
    """Construct the Flask application serving `domain`.

    A domain context is pushed for the duration of every request.
    """
    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=domain.config["secret_key"],
        DEBUG=domain.config["debug"],
        TESTING=domain.config["testing"],
    )

    @app.before_request
    def _push_domain_context():
        g.domain_context = domain.domain_context()
        g.domain_context.push()

    @app.teardown_request
    def _pop_domain_context(exc):
        context = g.pop("domain_context", None)
        if context is not None:
            context.pop()

    app.register_blueprint(blueprint)
    return app
