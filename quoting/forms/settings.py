"""Pricing defaults form."""
from flask_wtf import FlaskForm
from wtforms import DecimalField
from wtforms.validators import Optional, NumberRange

from quoting.forms.base import Finite


class PricingSettingsForm(FlaskForm):
    iva_percent = DecimalField('IVA %', places=2, validators=[Optional(), Finite(), NumberRange(min=0, max=100)])
    margin_percent = DecimalField('Margin %', places=2, validators=[Optional(), Finite(), NumberRange(min=0, max=100)])
