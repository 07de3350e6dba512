"""Liquidation form."""
from flask_wtf import FlaskForm
from wtforms import StringField, DecimalField, SelectField, TextAreaField
from wtforms.validators import DataRequired, Optional, Length

from quoting.forms.base import Finite


class LiquidationForm(FlaskForm):
    person_id = StringField('Person *', validators=[DataRequired()])
    amount = DecimalField('Amount *', places=2, validators=[Optional(), Finite()])
    method = SelectField('Method', choices=[
        ('cash', 'Cash'),
        ('transfer', 'Bank Transfer'),
        ('cheque', 'Cheque'),
        ('other', 'Other'),
    ], validators=[Optional()])
    reference_number = StringField('Reference', validators=[Optional(), Length(max=60)])
    notes = TextAreaField('Notes', validators=[Optional()])
