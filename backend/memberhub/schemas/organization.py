"""Zone, cell and department schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

_name = validate.Length(min=1, max=120)


class ZoneCreateSchema(Schema):
    name = fields.String(required=True, validate=_name)
    description = fields.String(load_default=None, allow_none=True)
    coordinator_id = fields.Integer(load_default=None, allow_none=True, data_key="coordinatorId")


class ZoneSchema(Schema):
    id = fields.Integer()
    name = fields.String()
    description = fields.String(allow_none=True)
    coordinator_id = fields.Integer(allow_none=True, data_key="coordinatorId")
    coordinator_name = fields.String(allow_none=True, data_key="coordinatorName")
    cell_count = fields.Integer(data_key="cellCount")
    created_at = fields.DateTime(data_key="createdAt")


class CellCreateSchema(Schema):
    name = fields.String(required=True, validate=_name)
    zone_id = fields.Integer(required=True, data_key="zoneId")
    leader_id = fields.Integer(load_default=None, allow_none=True, data_key="leaderId")


class CellFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    zone_id = fields.Integer(load_default=None, data_key="zoneId")


class CellSchema(Schema):
    id = fields.Integer()
    name = fields.String()
    zone_id = fields.Integer(data_key="zoneId")
    leader_id = fields.Integer(allow_none=True, data_key="leaderId")
    leader_name = fields.String(allow_none=True, data_key="leaderName")
    created_at = fields.DateTime(data_key="createdAt")


class DepartmentCreateSchema(Schema):
    name = fields.String(required=True, validate=_name)
    description = fields.String(load_default=None, allow_none=True)


class DepartmentSchema(Schema):
    id = fields.Integer()
    name = fields.String()
    description = fields.String(allow_none=True)
