"""Real cost record forms.

Every field is optional here so the same forms serve creation and partial
updates; required fields are enforced by CostService.
"""
from flask_wtf import FlaskForm
from wtforms import StringField, DecimalField, SelectField, TextAreaField, DateField, IntegerField
from wtforms.validators import Optional, NumberRange, Length

from quoting.forms.base import Finite

SCOPE_CHOICES = [
    ('per_unit', 'Per unit'),
    ('partial', 'Some units'),
    ('total', 'Whole batch'),
]


class ScopedCostForm(FlaskForm):
    scope = SelectField('Scope', choices=SCOPE_CHOICES, validators=[Optional()])
    applied_units = IntegerField('Applied Units', validators=[Optional(), NumberRange(min=1)])


class LaborCostForm(ScopedCostForm):
    worker_id = StringField('Worker', validators=[Optional()])
    calculation_type = SelectField('Calculation', choices=[
        ('hours', 'Hours x rate'),
        ('amount', 'Fixed amount'),
    ], validators=[Optional()])
    hours_worked = DecimalField('Hours', places=2, validators=[Optional(), Finite(), NumberRange(min=0)])
    hourly_rate = DecimalField('Hourly Rate', places=2, validators=[Optional(), Finite(), NumberRange(min=0)])
    manual_amount = DecimalField('Amount', places=2, validators=[Optional(), Finite(), NumberRange(min=0)])
    work_date = DateField('Work Date', validators=[Optional()], format='%Y-%m-%d')
    payment_method = StringField('Payment Method', validators=[Optional(), Length(max=20)])
    notes = TextAreaField('Notes', validators=[Optional()])


class MaterialCostForm(ScopedCostForm):
    item_ref = StringField('Item', validators=[Optional(), Length(max=64)])
    material_id = StringField('Material', validators=[Optional()])
    material_name = StringField('Material Name', validators=[Optional(), Length(max=200)])
    unit = StringField('Unit', validators=[Optional(), Length(max=30)])
    budgeted_quantity = DecimalField('Budgeted Quantity', places=3, validators=[Optional(), Finite(), NumberRange(min=0)])
    budgeted_unit_price = DecimalField('Budgeted Unit Price', places=2, validators=[Optional(), Finite(), NumberRange(min=0)])
    real_quantity = DecimalField('Real Quantity', places=3, validators=[Optional(), Finite(), NumberRange(min=0)])
    real_unit_price = DecimalField('Real Unit Price', places=2, validators=[Optional(), Finite(), NumberRange(min=0)])
    purchase_date = DateField('Purchase Date', validators=[Optional()], format='%Y-%m-%d')
    supplier = StringField('Supplier', validators=[Optional(), Length(max=200)])
    invoice_number = StringField('Invoice', validators=[Optional(), Length(max=60)])
    notes = TextAreaField('Notes', validators=[Optional()])


class PettyExpenseForm(ScopedCostForm):
    description = StringField('Description', validators=[Optional(), Length(max=255)])
    amount = DecimalField('Amount', places=2, validators=[Optional(), Finite(), NumberRange(min=0)])
    expense_date = DateField('Date', validators=[Optional()], format='%Y-%m-%d')


class TransportCostForm(ScopedCostForm):
    description = StringField('Description', validators=[Optional(), Length(max=255)])
    cost = DecimalField('Cost', places=2, validators=[Optional(), Finite(), NumberRange(min=0)])
    transport_date = DateField('Date', validators=[Optional()], format='%Y-%m-%d')
