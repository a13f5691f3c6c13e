"""Member and follow-up schemas."""

from __future__ import annotations

from datetime import timezone

from marshmallow import EXCLUDE, Schema, fields, validate

from memberhub.models.member import ConversionStatus, FollowUpStatus, FollowUpType, MemberStatus


class MemberCreateSchema(Schema):
    """Input payload for registering a member."""

    name = fields.String(required=True, validate=validate.Length(min=1, max=120))
    email = fields.Email(load_default=None, allow_none=True, validate=validate.Length(max=254))
    phone = fields.String(required=True, validate=validate.Length(min=1, max=32))
    address = fields.String(required=True, validate=validate.Length(min=1, max=255))
    gender = fields.String(required=True, validate=validate.Length(min=1, max=16))
    zone_id = fields.Integer(required=True, data_key="zoneId")
    cell_id = fields.Integer(required=True, data_key="cellId")
    first_visit = fields.AwareDateTime(
        load_default=None, allow_none=True, data_key="firstVisit", default_timezone=timezone.utc
    )
    status = fields.Enum(MemberStatus, by_value=True, load_default=None)
    conversion_status = fields.Enum(
        ConversionStatus, by_value=True, load_default=None, data_key="conversionStatus"
    )
    sunday_attendance = fields.Integer(
        load_default=0, validate=validate.Range(min=0), data_key="sundayAttendance"
    )
    prayer_request = fields.String(load_default=None, allow_none=True, data_key="prayerRequest")


class MemberUpdateSchema(Schema):
    """Partial update payload for a member."""

    name = fields.String(validate=validate.Length(min=1, max=120))
    email = fields.Email(allow_none=True, validate=validate.Length(max=254))
    phone = fields.String(validate=validate.Length(min=1, max=32))
    address = fields.String(validate=validate.Length(min=1, max=255))
    gender = fields.String(validate=validate.Length(min=1, max=16))
    zone_id = fields.Integer(data_key="zoneId")
    cell_id = fields.Integer(data_key="cellId")
    status = fields.Enum(MemberStatus, by_value=True)
    conversion_status = fields.Enum(ConversionStatus, by_value=True, data_key="conversionStatus")
    sunday_attendance = fields.Integer(validate=validate.Range(min=0), data_key="sundayAttendance")
    prayer_request = fields.String(allow_none=True, data_key="prayerRequest")


class MemberFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    zone_id = fields.Integer(load_default=None, data_key="zoneId")
    cell_id = fields.Integer(load_default=None, data_key="cellId")
    status = fields.Enum(MemberStatus, by_value=True, load_default=None)
    conversion_status = fields.Enum(
        ConversionStatus, by_value=True, load_default=None, data_key="conversionStatus"
    )
    search = fields.String(load_default=None, validate=validate.Length(max=120))


class MemberSearchQuerySchema(Schema):
    """``?phone=`` and/or ``?email=`` for the duplicate check before registration."""

    class Meta:
        unknown = EXCLUDE

    phone = fields.String(load_default=None, validate=validate.Length(max=32))
    email = fields.String(load_default=None, validate=validate.Length(max=254))


class MarkAttendanceSchema(Schema):
    attended_at = fields.AwareDateTime(
        load_default=None,
        allow_none=True,
        data_key="attendanceDate",
        default_timezone=timezone.utc,
    )


class MemberSchema(Schema):
    id = fields.Integer()
    name = fields.String()
    email = fields.String(allow_none=True)
    phone = fields.String()
    address = fields.String()
    gender = fields.String()
    zone_id = fields.Integer(data_key="zoneId")
    cell_id = fields.Integer(data_key="cellId")
    status = fields.Enum(MemberStatus, by_value=True)
    conversion_status = fields.Enum(ConversionStatus, by_value=True, data_key="conversionStatus")
    sunday_attendance = fields.Integer(data_key="sundayAttendance")
    first_visit = fields.DateTime(data_key="firstVisit")
    last_visit = fields.DateTime(data_key="lastVisit")
    prayer_request = fields.String(allow_none=True, data_key="prayerRequest")


class FollowUpCreateSchema(Schema):
    member_id = fields.Integer(required=True, data_key="memberId")
    user_id = fields.Integer(required=True, data_key="userId")
    type = fields.Enum(FollowUpType, by_value=True, required=True)
    notes = fields.String(load_default=None, allow_none=True)
    next_follow_up_date = fields.AwareDateTime(
        load_default=None,
        allow_none=True,
        data_key="nextFollowUpDate",
        default_timezone=timezone.utc,
    )


class FollowUpUpdateSchema(Schema):
    user_id = fields.Integer(data_key="userId")
    type = fields.Enum(FollowUpType, by_value=True)
    status = fields.Enum(FollowUpStatus, by_value=True)
    notes = fields.String(allow_none=True)
    next_follow_up_date = fields.AwareDateTime(
        allow_none=True, data_key="nextFollowUpDate", default_timezone=timezone.utc
    )


class FollowUpFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    member_id = fields.Integer(load_default=None, data_key="memberId")
    user_id = fields.Integer(load_default=None, data_key="userId")
    status = fields.Enum(FollowUpStatus, by_value=True, load_default=None)


class FollowUpSchema(Schema):
    id = fields.Integer()
    member_id = fields.Integer(data_key="memberId")
    user_id = fields.Integer(data_key="userId")
    type = fields.Enum(FollowUpType, by_value=True)
    status = fields.Enum(FollowUpStatus, by_value=True)
    notes = fields.String(allow_none=True)
    next_follow_up_date = fields.DateTime(allow_none=True, data_key="nextFollowUpDate")
    created_at = fields.DateTime(data_key="createdAt")
