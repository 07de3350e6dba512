"""Seller and worker balances, and the liquidations that pay them."""
from datetime import datetime

from flask import current_app
from sqlalchemy import func

from quoting import db
from quoting.errors import ValidationError, NotFoundError
from quoting.models import User, Quotation, WorkerAssignment, Liquidation
from quoting.pricing import to_decimal, round2, ZERO
from quoting.services.audit_service import AuditService
from quoting.services.store import get_or_raise


class LiquidationService:
    @staticmethod
    def _payee(person_id, lock=False):
        query = db.session.query(User).filter(User.id == person_id)
        if lock:
            query = query.with_for_update()
        person = query.first() if person_id else None
        if person is None:
            raise NotFoundError('Person', person_id)
        if person.role not in User.PAYEE_ROLES:
            raise ValidationError(f'{person.display_name} is not a seller or worker.', field='person_id')
        return person

    @staticmethod
    def earned(person):
        if person.role == 'seller':
            value = (
                db.session.query(func.sum(Quotation.seller_payout))
                .filter(Quotation.seller_id == person.id, Quotation.status == 'accepted')
                .scalar()
            )
        else:
            # Assignments count whatever the quotation's current status.
            value = (
                db.session.query(func.sum(WorkerAssignment.payout))
                .filter(WorkerAssignment.worker_id == person.id)
                .scalar()
            )
        return to_decimal(value)

    @staticmethod
    def liquidated(person):
        value = (
            db.session.query(func.sum(Liquidation.amount))
            .filter(Liquidation.person_id == person.id)
            .scalar()
        )
        return to_decimal(value)

    @staticmethod
    def _balance(person):
        earned = round2(LiquidationService.earned(person))
        liquidated = round2(LiquidationService.liquidated(person))
        return {
            'person_id': person.id,
            'name': person.display_name,
            'role': person.role,
            'earned': earned,
            'liquidated': liquidated,
            'balance_pending': earned - liquidated,
        }

    @staticmethod
    def calculate_balance(person_id):
        return LiquidationService._balance(LiquidationService._payee(person_id))

    @staticmethod
    def create_liquidation(person_id, amount, method=None, reference_number=None, notes=None,
                           authorized_by_id=None):
        """Pay ``amount`` out of a person's pending balance.

        The person's row is locked and the balance re-read in the same
        transaction as the insert, so concurrent payouts cannot overdraw it.
        """
        try:
            amount = round2(to_decimal(amount))
        except ArithmeticError:
            raise ValidationError(f'Invalid amount "{amount}"', field='amount')
        if amount <= 0:
            raise ValidationError('Amount must be greater than zero.', field='amount')
        if method and method not in Liquidation.METHODS:
            raise ValidationError(f'Unknown payment method "{method}"', field='method')

        person = LiquidationService._payee(person_id, lock=True)
        balance = LiquidationService._balance(person)['balance_pending']
        if amount > balance:
            db.session.rollback()
            raise ValidationError(
                f'Amount {amount} exceeds the pending balance ({balance}).',
                field='amount', balance_pending=str(balance))

        liquidation = Liquidation(
            person_id=person.id,
            person_role=person.role,
            amount=amount,
            method=method or None,
            reference_number=reference_number or None,
            notes=notes or None,
            authorized_by_id=authorized_by_id,
        )
        db.session.add(liquidation)
        db.session.commit()
        current_app.logger.info('Liquidated %s to %s %s (balance was %s)',
                                liquidation.amount, person.role, person.display_name, balance)
        AuditService.log('liquidation.create', 'Liquidation', liquidation.id,
                         f'{person.display_name} {liquidation.amount}', authorized_by_id)
        return liquidation

    @staticmethod
    def all_balances():
        people = (
            User.query
            .filter(User.role.in_(User.PAYEE_ROLES), User.is_active.is_(True))
            .order_by(User.username)
            .all()
        )
        balances = [LiquidationService._balance(person) for person in people]
        balances.sort(key=lambda b: b['balance_pending'], reverse=True)
        return balances

    @staticmethod
    def summary():
        balances = LiquidationService.all_balances()
        sellers = [b for b in balances if b['role'] == 'seller']
        workers = [b for b in balances if b['role'] == 'worker']
        now = datetime.utcnow()
        month_start = datetime(now.year, now.month, 1)
        this_month = (
            db.session.query(func.sum(Liquidation.amount))
            .filter(Liquidation.liquidated_at >= month_start)
            .scalar()
        )
        pending_sellers = sum((b['balance_pending'] for b in sellers), ZERO)
        pending_workers = sum((b['balance_pending'] for b in workers), ZERO)
        return {
            'sellers_count': len(sellers),
            'workers_count': len(workers),
            'pending_sellers': pending_sellers,
            'pending_workers': pending_workers,
            'pending_total': pending_sellers + pending_workers,
            'liquidated_this_month': round2(to_decimal(this_month)),
        }

    @staticmethod
    def earning_lines(person):
        if person.role == 'seller':
            quotations = (
                Quotation.query
                .filter(Quotation.seller_id == person.id, Quotation.status == 'accepted',
                        Quotation.seller_payout.isnot(None))
                .order_by(Quotation.created_at.desc())
                .all()
            )
            return [{
                'quotation_id': q.id,
                'quotation_number': q.quotation_number,
                'client_name': q.client_name,
                'amount': round2(q.seller_payout),
                'date': q.created_at,
                'status': q.status,
            } for q in quotations]

        rows = (
            WorkerAssignment.query
            .filter(WorkerAssignment.worker_id == person.id)
            .order_by(WorkerAssignment.created_at.desc())
            .all()
        )
        return [{
            'quotation_id': row.quotation_id,
            'quotation_number': row.quotation.quotation_number,
            'client_name': row.quotation.client_name,
            'amount': round2(row.payout),
            'date': row.created_at,
            'status': row.quotation.status,
        } for row in rows]

    @staticmethod
    def list_liquidations(person_id=None):
        query = Liquidation.query
        if person_id:
            query = query.filter(Liquidation.person_id == person_id)
        return query.order_by(Liquidation.liquidated_at.desc()).all()

    @staticmethod
    def person_detail(person_id):
        person = get_or_raise(User, person_id, 'Person')
        balance = LiquidationService.calculate_balance(person.id)
        return {
            'balance': balance,
            'earnings': LiquidationService.earning_lines(person),
            'liquidations': LiquidationService.list_liquidations(person.id),
        }
