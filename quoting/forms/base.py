"""Helpers shared by the forms."""
from decimal import Decimal

from flask import request
from wtforms.validators import ValidationError


def submitted_fields(form):
    """Data of the fields actually present in the JSON body.

    Lets PUT handlers tell "left out" apart from "cleared".
    """
    payload = request.get_json(silent=True) or {}
    return {
        name: field.data
        for name, field in form._fields.items()
        if name in payload and name != 'csrf_token'
    }


class Finite:
    """Reject NaN and infinities before range checks compare them."""

    def __init__(self, message='Not a valid number.'):
        self.message = message

    def __call__(self, form, field):
        if isinstance(field.data, Decimal) and not field.data.is_finite():
            raise ValidationError(self.message)
