"""Marshmallow schemas for incoming payloads and outgoing representations"""

import marshmallow as ma


class BaseSerializer(ma.Schema):
    """Base serializer with which to define custom serializers.

    Unknown keys in payloads are dropped.
    """

    class Meta:
        unknown = ma.EXCLUDE


class PostSchema(BaseSerializer):
    """Input of the create-Post operation. No attribute is required."""

    title = ma.fields.String(allow_none=True, load_default=None)
    body = ma.fields.String(allow_none=True, load_default=None)
    published = ma.fields.Boolean(load_default=False)


class CommentSchema(BaseSerializer):
    """Input of the create-Comment operation"""

    post_id = ma.fields.Integer(required=True)
    body = ma.fields.String(allow_none=True, load_default=None)


class CommentRepresentation(BaseSerializer):
    id = ma.fields.Integer()
    post_id = ma.fields.Integer()
    body = ma.fields.String(allow_none=True)


class PostRepresentation(BaseSerializer):
    id = ma.fields.Integer()
    title = ma.fields.String(allow_none=True)
    body = ma.fields.String(allow_none=True)
    published = ma.fields.Boolean()
    location = ma.fields.Function(lambda post: f"/posts/{post.id}")
