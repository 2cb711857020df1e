from marshmallow import Schema, fields, validate


class ContactSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=2, max=128))
    email = fields.Email(required=True)
    message = fields.String(required=True, validate=validate.Length(min=10, max=5000))
