"""Quotation creation, edits and the status state machine."""
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from quoting import db, pricing
from quoting.errors import (
    ValidationError, InvalidTransitionError, NotFoundError,
    NumberingConflictError, PartialAcceptanceFailure,
)
from quoting.models import Quotation, User, Setting
from quoting.schemas import parse_items, parse_materials, parse_services, dump_items
from quoting.services.numbering_service import NumberingService
from quoting.services.client_service import ClientService
from quoting.services.job_service import JobService
from quoting.services.assignment_service import AssignmentService
from quoting.services.history_service import HistoryService
from quoting.services.audit_service import AuditService
from quoting.services.store import bounded, get_or_raise


def _percent(value, field, default=None):
    if value is None or value == '':
        value = default
    try:
        value = pricing.to_decimal(value)
    except ArithmeticError:
        raise ValidationError(f'Invalid {field} "{value}"', field=field)
    if value < 0 or value > 100:
        raise ValidationError(f'{field} must be between 0 and 100.', field=field)
    return value


def _money(value, field):
    try:
        value = pricing.to_decimal(value)
    except ArithmeticError:
        raise ValidationError(f'Invalid {field} "{value}"', field=field)
    if value < 0:
        raise ValidationError(f'{field} cannot be negative.', field=field)
    return value


class QuotationService:
    @staticmethod
    def default_iva_percent():
        return Setting.get_decimal('iva_percent', current_app.config['DEFAULT_IVA_PERCENT'])

    @staticmethod
    def default_margin_percent():
        return Setting.get_decimal('margin_percent', current_app.config['DEFAULT_MARGIN_PERCENT'])

    @staticmethod
    def _seller(seller_id):
        if not seller_id:
            return None
        seller = db.session.get(User, seller_id)
        if seller is None:
            raise NotFoundError('Seller', seller_id)
        if seller.role != 'seller':
            raise ValidationError(f'User {seller_id} is not a seller.', field='seller_id')
        return seller

    @staticmethod
    def _price(items, materials, services, margin_percent, iva_percent, discount_percent):
        if not items and discount_percent:
            raise ValidationError('A discount needs item-based pricing.', field='discount_percent')
        return pricing.quotation_totals(
            items, materials, services,
            margin_percent=margin_percent,
            iva_percent=iva_percent,
            discount_percent=discount_percent,
        )

    @staticmethod
    def _apply_totals(quo, totals):
        quo.subtotal_materials = pricing.round2(totals.subtotal_materials)
        quo.subtotal_services = pricing.round2(totals.subtotal_services)
        quo.subtotal = pricing.round2(totals.subtotal)
        quo.iva = pricing.round2(totals.iva)
        quo.margin_percent = totals.margin_percent
        quo.total = totals.total

    @staticmethod
    def create_quotation(company, client_name, items_data=None, client_email=None,
                         client_phone=None, client_address=None, materials_data=None,
                         services_data=None, margin_percent=None, iva_percent=None,
                         discount_percent=0, seller_id=None, notes=None, created_by_id=None):
        NumberingService.company_config(company)
        if not client_name or not client_name.strip():
            raise ValidationError('Client name is required.', field='client_name')
        items = parse_items(items_data)
        materials = parse_materials(materials_data)
        services = parse_services(services_data)
        if not items and not materials and not services:
            raise ValidationError('Add at least one item.', field='items')
        QuotationService._seller(seller_id)
        iva_percent = _percent(iva_percent, 'iva_percent', QuotationService.default_iva_percent())
        margin_default = 0 if items else QuotationService.default_margin_percent()
        margin_percent = _percent(margin_percent, 'margin_percent', margin_default)
        discount_percent = _percent(discount_percent, 'discount_percent', 0)
        totals = QuotationService._price(
            items, materials, services, margin_percent, iva_percent, discount_percent)

        retries = current_app.config.get('NUMBERING_RETRIES', 1)
        for attempt in range(retries + 1):
            try:
                quo = QuotationService._insert(
                    company=company,
                    client_name=client_name.strip(),
                    client_email=client_email or None,
                    client_phone=client_phone or None,
                    client_address=client_address or None,
                    items=dump_items(items),
                    materials=[m.model_dump(mode='json', exclude_none=True) for m in materials],
                    services=[s.model_dump(mode='json', exclude_none=True) for s in services],
                    discount_percent=discount_percent,
                    iva_percent=iva_percent,
                    seller_id=seller_id or None,
                    notes=notes,
                    created_by_id=created_by_id,
                    totals=totals,
                )
                break
            except NumberingConflictError:
                if attempt >= retries:
                    raise
                current_app.logger.warning(
                    'Quotation number collision for %s, retrying (%d/%d)', company, attempt + 1, retries)

        current_app.logger.info('Quotation %s created (total %s)', quo.quotation_number, quo.total)
        AuditService.log('quotation.create', 'Quotation', quo.id, quo.quotation_number, created_by_id)
        return quo

    @staticmethod
    def _insert(totals, **fields):
        with bounded('quotation.create'):
            number = NumberingService.next_quotation_number(fields['company'])
            quo = Quotation(quotation_number=number, status='pending', payment_status='unpaid',
                            amount_paid=0, **fields)
            QuotationService._apply_totals(quo, totals)
            db.session.add(quo)
            try:
                db.session.commit()
            except IntegrityError as e:
                db.session.rollback()
                if 'quotation_number' in str(e.orig).lower():
                    raise NumberingConflictError(
                        f'Quotation number {number} is already taken.', quotation_number=number) from e
                raise
        return quo

    @staticmethod
    def create_from_draft(draft, seller_id=None, created_by_id=None):
        """Persist a :class:`quoting.draft.QuotationDraft`."""
        if draft.client is None:
            raise ValidationError('The draft has no client.', field='client')
        return QuotationService.create_quotation(
            company=draft.company,
            client_name=draft.client.name,
            client_email=draft.client.email,
            client_phone=draft.client.phone,
            client_address=draft.client.address,
            items_data=dump_items(draft.items),
            discount_percent=draft.discount_percent,
            seller_id=seller_id,
            notes=draft.notes,
            created_by_id=created_by_id,
        )

    @staticmethod
    def get_quotation(quotation_id):
        return get_or_raise(Quotation, quotation_id, 'Quotation')

    @staticmethod
    def list_quotations(status=None, company=None, seller_id=None, created_by_id=None):
        query = Quotation.query
        if status:
            query = query.filter(Quotation.status == status)
        if company:
            query = query.filter(Quotation.company == company)
        if seller_id:
            query = query.filter(Quotation.seller_id == seller_id)
        if created_by_id:
            query = query.filter(Quotation.created_by_id == created_by_id)
        return query.order_by(Quotation.created_at.desc())

    @staticmethod
    def update_quotation(quotation_id, description=None, author_id=None, items_data=None,
                         materials_data=None, services_data=None, margin_percent=None,
                         iva_percent=None, discount_percent=None, client_name=None,
                         client_email=None, client_phone=None, client_address=None, notes=None):
        """Edit a quotation; financial edits are recorded in its history.

        ``None`` leaves a field untouched. Changing items, materials, services
        or percentages requires a non-empty ``description``.
        """
        quo = QuotationService.get_quotation(quotation_id)
        financial = any(v is not None for v in (
            items_data, materials_data, services_data, margin_percent, iva_percent, discount_percent))
        if financial and (not description or not description.strip()):
            raise ValidationError('Describe why the quotation is being modified.', field='description')
        if client_name is not None and not client_name.strip():
            raise ValidationError('Client name is required.', field='client_name')

        before = HistoryService.snapshot(quo)
        if financial:
            items = parse_items(items_data if items_data is not None else quo.items)
            materials = parse_materials(materials_data if materials_data is not None else quo.materials)
            services = parse_services(services_data if services_data is not None else quo.services)
            if not items and not materials and not services:
                raise ValidationError('Add at least one item.', field='items')
            iva = _percent(iva_percent, 'iva_percent', quo.iva_percent)
            margin = _percent(margin_percent, 'margin_percent', quo.margin_percent)
            discount = _percent(discount_percent, 'discount_percent', quo.discount_percent)
            totals = QuotationService._price(items, materials, services, margin, iva, discount)
            if totals.total < pricing.to_decimal(quo.amount_paid):
                raise ValidationError(
                    f'New total {totals.total} is below the amount already paid ({quo.amount_paid}).',
                    field='items')
            quo.items = dump_items(items)
            quo.materials = [m.model_dump(mode='json', exclude_none=True) for m in materials]
            quo.services = [s.model_dump(mode='json', exclude_none=True) for s in services]
            quo.iva_percent = iva
            quo.discount_percent = discount
            QuotationService._apply_totals(quo, totals)
            if quo.status == 'accepted':
                quo.payment_status = pricing.derive_payment_status(quo.amount_paid, quo.total)

        if client_name is not None:
            quo.client_name = client_name.strip()
        if client_email is not None:
            quo.client_email = client_email or None
        if client_phone is not None:
            quo.client_phone = client_phone or None
        if client_address is not None:
            quo.client_address = client_address or None
        if notes is not None:
            quo.notes = notes
        db.session.commit()
        current_app.logger.info('Quotation %s updated (total %s -> %s)',
                                quo.quotation_number, before['total'], quo.total)

        if financial:
            HistoryService.record(quo, before, description.strip(), author_id)
        AuditService.log('quotation.update', 'Quotation', quo.id, description, author_id)
        return quo

    # --- State machine -------------------------------------------------

    @staticmethod
    def change_status(quotation_id, status, seller_id=None, seller_payout=None,
                      worker_assignments=None, changed_by_id=None):
        quo = QuotationService.get_quotation(quotation_id)
        if status == 'accepted':
            return QuotationService.accept(quo, seller_id, seller_payout, worker_assignments, changed_by_id)
        if status == 'rejected':
            return QuotationService.reject(quo, changed_by_id)
        if status == 'pending':
            return QuotationService.revert_to_pending(quo, changed_by_id)
        raise ValidationError(f'Unknown quotation status "{status}"', field='status')

    @staticmethod
    def accept(quo, seller_id=None, seller_payout=None, worker_assignments=None, changed_by_id=None):
        """pending -> accepted, with client, job and worker payouts.

        Everything is checked before the first write; the writes then share a
        single transaction, so a failure leaves no client, job or assignment
        behind and the quotation stays pending.
        """
        if quo.status != 'pending':
            raise InvalidTransitionError(
                f'Quotation {quo.quotation_number} is {quo.status}; only pending quotations can be accepted.',
                current_status=quo.status)
        seller = QuotationService._seller(seller_id or quo.seller_id)
        payout = _money(seller_payout, 'seller_payout') if seller_payout is not None else None
        if payout is not None and seller is None:
            raise ValidationError('A seller payout needs a seller.', field='seller_payout')
        entries = AssignmentService.validate_entries(worker_assignments)

        created = []
        step = 'resolve_client'
        try:
            with bounded('quotation.accept'):
                client, new_client = ClientService.resolve_for_quotation(quo)
                if new_client:
                    created.append({'entity': 'Client', 'id': client.id})

                step = 'create_job'
                job, new_job = JobService.ensure_job(quo, client)
                if new_job:
                    created.append({'entity': 'Job', 'id': job.id})

                step = 'assign_workers'
                for row, new_row in AssignmentService.upsert_rows(quo, job, entries):
                    if new_row:
                        created.append({'entity': 'WorkerAssignment', 'id': row.id})

                step = 'update_quotation'
                quo.status = 'accepted'
                if seller is not None:
                    quo.seller_id = seller.id
                if payout is not None:
                    quo.seller_payout = payout
                quo.payment_status = pricing.derive_payment_status(quo.amount_paid, quo.total)
                db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.exception(
                'Acceptance of %s rolled back at step %s', quo.quotation_number, step)
            raise PartialAcceptanceFailure(step, created, cause=e) from e

        current_app.logger.info('Quotation %s accepted (client %s, job %s, %d workers)',
                                quo.quotation_number, client.id, job.id, len(entries))
        AuditService.log('quotation.accept', 'Quotation', quo.id, quo.quotation_number, changed_by_id)
        return quo

    @staticmethod
    def reject(quo, changed_by_id=None):
        if quo.status != 'pending':
            raise InvalidTransitionError(
                f'Quotation {quo.quotation_number} is {quo.status}; only pending quotations can be rejected.',
                current_status=quo.status)
        quo.status = 'rejected'
        db.session.commit()
        current_app.logger.info('Quotation %s rejected', quo.quotation_number)
        AuditService.log('quotation.reject', 'Quotation', quo.id, quo.quotation_number, changed_by_id)
        return quo

    @staticmethod
    def revert_to_pending(quo, changed_by_id=None):
        """Flag correction only. Clients, jobs and assignments already created stay."""
        if quo.status == 'pending':
            return quo
        previous = quo.status
        quo.status = 'pending'
        db.session.commit()
        current_app.logger.info('Quotation %s reverted from %s to pending; side effects kept',
                                quo.quotation_number, previous)
        AuditService.log('quotation.revert', 'Quotation', quo.id, f'{previous} -> pending', changed_by_id)
        return quo

    @staticmethod
    def update_payment(quotation_id, amount_paid, payment_status=None, updated_by_id=None):
        quo = QuotationService.get_quotation(quotation_id)
        if quo.status != 'accepted':
            raise ValidationError('Payments are tracked on accepted quotations only.',
                                  current_status=quo.status)
        if amount_paid is None or amount_paid == '':
            raise ValidationError('amount_paid is required.', field='amount_paid')
        amount = _money(amount_paid, 'amount_paid')
        if amount > pricing.to_decimal(quo.total):
            raise ValidationError(f'Amount paid cannot exceed the total ({quo.total}).', field='amount_paid')
        if payment_status is not None and payment_status not in Quotation.PAYMENT_STATUSES:
            raise ValidationError(f'Unknown payment status "{payment_status}"', field='payment_status')
        quo.amount_paid = amount
        quo.payment_status = payment_status or pricing.derive_payment_status(amount, quo.total)
        db.session.commit()
        current_app.logger.info('Quotation %s payment %s (%s)',
                                quo.quotation_number, amount, quo.payment_status)
        AuditService.log('quotation.payment', 'Quotation', quo.id, f'{amount} {quo.payment_status}',
                         updated_by_id)
        return quo
