from marshmallow import Schema, fields, validate

from models.project import ProjectCategory

CATEGORIES = [c.value for c in ProjectCategory]


def _not_blank(max_len: int):
    return lambda s: len(s.strip()) > 0 and len(s) <= max_len


class ProjectCreateSchema(Schema):
    title = fields.String(required=True, validate=_not_blank(255))
    description = fields.String(required=True, validate=lambda s: len(s.strip()) > 0)
    technologies = fields.List(fields.String(), required=True)
    image_url = fields.Url(required=True)
    live_url = fields.Url(allow_none=True)
    github_url = fields.Url(allow_none=True)
    featured = fields.Boolean(required=True)
    importance = fields.Integer(required=True, strict=True)
    category = fields.String(
        load_default=ProjectCategory.DEFAULT.value,
        validate=validate.OneOf(CATEGORIES),
    )


class ProjectUpdateSchema(Schema):
    title = fields.String(validate=_not_blank(255))
    description = fields.String(validate=lambda s: len(s.strip()) > 0)
    technologies = fields.List(fields.String())
    image_url = fields.Url()
    live_url = fields.Url(allow_none=True)
    github_url = fields.Url(allow_none=True)
    featured = fields.Boolean()
    importance = fields.Integer(strict=True)
    category = fields.String(validate=validate.OneOf(CATEGORIES))


class ProjectOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    description = fields.String()
    technologies = fields.List(fields.String())
    image_url = fields.String()
    live_url = fields.String(allow_none=True)
    github_url = fields.String(allow_none=True)
    featured = fields.Boolean()
    importance = fields.Integer()
    category = fields.Method("get_category")
    created_at = fields.DateTime()
    updated_at = fields.DateTime()

    def get_category(self, obj):
        return getattr(obj.category, "value", obj.category)

