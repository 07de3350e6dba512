"""Job and worker assignment forms."""
from flask_wtf import FlaskForm
from wtforms import StringField, DecimalField, SelectField, TextAreaField, DateField
from wtforms.validators import DataRequired, Optional, NumberRange

from quoting.forms.base import Finite


class JobForm(FlaskForm):
    status = SelectField('Status', choices=[
        ('pending', 'Pending'),
        ('in_progress', 'In Progress'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ], validators=[Optional()])
    start_date = DateField('Start Date', validators=[Optional()], format='%Y-%m-%d')
    estimated_end_date = DateField('Estimated End', validators=[Optional()], format='%Y-%m-%d')
    notes = TextAreaField('Notes', validators=[Optional()])


class AssignmentForm(FlaskForm):
    worker_id = StringField('Worker *', validators=[DataRequired()])
    payout = DecimalField('Payout', places=2, default=0, validators=[Optional(), Finite(), NumberRange(min=0)])
    notes = TextAreaField('Notes', validators=[Optional()])


class AssignmentUpdateForm(FlaskForm):
    payout = DecimalField('Payout', places=2, validators=[Optional(), Finite(), NumberRange(min=0)])
    notes = TextAreaField('Notes', validators=[Optional()])
