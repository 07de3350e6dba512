"""Quotation forms.

Items, materials and services are nested JSON arrays; they are read from the
request body and validated by :mod:`quoting.schemas`, not by these forms.
"""
from flask_wtf import FlaskForm
from wtforms import StringField, DecimalField, SelectField, TextAreaField
from wtforms.validators import DataRequired, Optional, Email, NumberRange, Length

from quoting.forms.base import Finite


class QuotationForm(FlaskForm):
    company = StringField('Company *', validators=[DataRequired()])
    client_name = StringField('Client Name *', validators=[DataRequired(), Length(max=200)])
    client_email = StringField('Client Email', validators=[Optional(), Email()])
    client_phone = StringField('Client Phone', validators=[Optional(), Length(max=50)])
    client_address = StringField('Client Address', validators=[Optional(), Length(max=255)])
    margin_percent = DecimalField('Margin %', places=2, validators=[Optional(), Finite(), NumberRange(min=0)])
    iva_percent = DecimalField('IVA %', places=2, validators=[Optional(), Finite(), NumberRange(min=0, max=100)])
    discount_percent = DecimalField('Discount %', places=2, default=0,
                                    validators=[Optional(), Finite(), NumberRange(min=0, max=100)])
    seller_id = StringField('Seller', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])


class QuotationEditForm(FlaskForm):
    description = TextAreaField('Reason for the change', validators=[Optional()])
    client_name = StringField('Client Name', validators=[Optional(), Length(max=200)])
    client_email = StringField('Client Email', validators=[Optional(), Email()])
    client_phone = StringField('Client Phone', validators=[Optional(), Length(max=50)])
    client_address = StringField('Client Address', validators=[Optional(), Length(max=255)])
    margin_percent = DecimalField('Margin %', places=2, validators=[Optional(), Finite(), NumberRange(min=0)])
    iva_percent = DecimalField('IVA %', places=2, validators=[Optional(), Finite(), NumberRange(min=0, max=100)])
    discount_percent = DecimalField('Discount %', places=2,
                                    validators=[Optional(), Finite(), NumberRange(min=0, max=100)])
    notes = TextAreaField('Notes', validators=[Optional()])


class StatusForm(FlaskForm):
    status = SelectField('Status *', choices=[
        ('pending', 'Pending'),
        ('accepted', 'Accepted'),
        ('rejected', 'Rejected'),
    ], validators=[DataRequired()])
    seller_id = StringField('Seller', validators=[Optional()])
    seller_payout = DecimalField('Seller Payout', places=2, validators=[Optional(), Finite(), NumberRange(min=0)])


class PaymentForm(FlaskForm):
    amount_paid = DecimalField('Amount Paid *', places=2, validators=[Optional(), Finite(), NumberRange(min=0)])
    payment_status = SelectField('Payment Status', choices=[
        ('unpaid', 'Unpaid'),
        ('partially_paid', 'Partially Paid'),
        ('paid', 'Paid'),
    ], validators=[Optional()])
