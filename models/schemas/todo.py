from marshmallow import Schema, fields, EXCLUDE


def _title_ok(s):
    return len(s.strip()) > 0 and len(s) <= 255


class TodoCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(required=True, validate=_title_ok)


class TodoUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(validate=_title_ok)
    is_complete = fields.Boolean()


class TodoOutSchema(Schema):
    id = fields.Integer()
    title = fields.String()
    is_complete = fields.Boolean()
    user_id = fields.String()
    created_at = fields.DateTime()
