"""Quotation status transitions and acceptance side effects."""
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from quoting.errors import (
    ValidationError, InvalidTransitionError, NotFoundError, PartialAcceptanceFailure,
)
from quoting.models import Client, Job, WorkerAssignment
from quoting.services import QuotationService, JobService, ClientService, LiquidationService


def _accept(quo, staff, **kwargs):
    kwargs.setdefault('seller_id', staff.seller.id)
    kwargs.setdefault('seller_payout', '50000')
    kwargs.setdefault('worker_assignments', [{'worker_id': staff.worker.id, 'payout': '30000'}])
    return QuotationService.change_status(quo.id, 'accepted', changed_by_id=staff.manager.id, **kwargs)


def test_accept_creates_client_job_and_assignments(staff, make_quotation):
    quo = _accept(make_quotation(), staff)
    assert quo.status == 'accepted'
    assert quo.seller_id == staff.seller.id
    assert quo.seller_payout == Decimal('50000')
    client = Client.query.one()
    assert client.email == 'ana@example.com'
    assert client.company == 'casablanca'
    job = Job.query.one()
    assert job.quotation_id == quo.id
    assert job.client_id == client.id
    row = WorkerAssignment.query.one()
    assert row.job_id == job.id
    assert row.payout == Decimal('30000')


def test_accept_reuses_client_matched_by_email(staff, make_quotation):
    quo = make_quotation()
    QuotationService.accept(make_quotation(), worker_assignments=[])
    _accept(quo, staff)
    assert Client.query.count() == 1
    assert Job.query.count() == 2


def test_accept_matches_client_by_phone(staff, make_quotation):
    _accept(make_quotation(client_email=None), staff)
    _accept(make_quotation(client_email='other@example.com'), staff)
    assert Client.query.count() == 1


def test_accepting_twice_is_rejected_without_side_effects(staff, make_quotation):
    quo = _accept(make_quotation(), staff)
    with pytest.raises(InvalidTransitionError):
        _accept(quo, staff)
    assert Client.query.count() == 1
    assert Job.query.count() == 1
    assert WorkerAssignment.query.count() == 1


def test_reject_creates_nothing(staff, make_quotation):
    quo = QuotationService.change_status(make_quotation().id, 'rejected')
    assert quo.status == 'rejected'
    assert Client.query.count() == 0
    assert Job.query.count() == 0
    assert WorkerAssignment.query.count() == 0


@pytest.mark.parametrize('first,second', [
    ('rejected', 'accepted'),
    ('rejected', 'rejected'),
    ('accepted', 'rejected'),
])
def test_invalid_transitions(staff, make_quotation, first, second):
    quo = make_quotation()
    if first == 'accepted':
        _accept(quo, staff)
    else:
        QuotationService.change_status(quo.id, first)
    with pytest.raises(InvalidTransitionError):
        QuotationService.change_status(quo.id, second)


def test_invalid_transition_is_a_validation_error(staff, make_quotation):
    quo = QuotationService.change_status(make_quotation().id, 'rejected')
    with pytest.raises(ValidationError):
        QuotationService.change_status(quo.id, 'rejected')


def test_revert_keeps_side_effects(staff, make_quotation):
    quo = _accept(make_quotation(), staff)
    quo = QuotationService.change_status(quo.id, 'pending')
    assert quo.status == 'pending'
    assert Client.query.count() == 1
    assert Job.query.count() == 1
    assert WorkerAssignment.query.count() == 1


def test_reaccept_after_revert_reuses_job(staff, make_quotation):
    quo = _accept(make_quotation(), staff)
    QuotationService.change_status(quo.id, 'pending')
    _accept(quo, staff, worker_assignments=[])
    assert Job.query.count() == 1
    assert Client.query.count() == 1


def test_reaccept_with_same_worker_updates_payout(staff, make_quotation):
    quo = _accept(make_quotation(), staff)
    QuotationService.change_status(quo.id, 'pending')
    _accept(quo, staff, worker_assignments=[{'worker_id': staff.worker.id, 'payout': '35000'}])
    row = WorkerAssignment.query.one()
    assert row.payout == Decimal('35000')
    assert row.job_id == Job.query.one().id
    assert LiquidationService.calculate_balance(staff.worker.id)['earned'] == Decimal('35000.00')


def test_reaccept_adds_only_new_workers(staff, make_quotation):
    quo = _accept(make_quotation(), staff)
    QuotationService.change_status(quo.id, 'pending')
    _accept(quo, staff, worker_assignments=[
        {'worker_id': staff.worker.id, 'payout': '30000'},
        {'worker_id': staff.worker2.id, 'payout': '8000'},
    ])
    assert sorted(r.worker_id for r in WorkerAssignment.query) == sorted([staff.worker.id, staff.worker2.id])


def test_revert_of_rejected(staff, make_quotation):
    quo = QuotationService.change_status(make_quotation().id, 'rejected')
    assert QuotationService.change_status(quo.id, 'pending').status == 'pending'


def test_unknown_status(staff, make_quotation):
    with pytest.raises(ValidationError):
        QuotationService.change_status(make_quotation().id, 'archived')


def test_unknown_worker_fails_before_any_write(staff, make_quotation):
    quo = make_quotation()
    with pytest.raises(NotFoundError):
        _accept(quo, staff, worker_assignments=[{'worker_id': 'missing', 'payout': '10'}])
    assert quo.status == 'pending'
    assert Client.query.count() == 0


def test_assigning_a_seller_as_worker_fails(staff, make_quotation):
    with pytest.raises(ValidationError):
        _accept(make_quotation(), staff, worker_assignments=[{'worker_id': staff.seller.id, 'payout': '10'}])
    assert Job.query.count() == 0


def test_negative_seller_payout(staff, make_quotation):
    with pytest.raises(ValidationError):
        _accept(make_quotation(), staff, seller_payout='-1')


def test_failed_step_rolls_back_earlier_steps(staff, make_quotation, monkeypatch):
    quo = make_quotation()

    def broken(quotation, client):
        raise SQLAlchemyError('jobs table unavailable')

    monkeypatch.setattr(JobService, 'ensure_job', staticmethod(broken))
    with pytest.raises(PartialAcceptanceFailure) as exc:
        _accept(quo, staff)
    assert exc.value.step == 'create_job'
    assert [c['entity'] for c in exc.value.created] == ['Client']
    assert exc.value.to_dict()['step'] == 'create_job'
    assert Client.query.count() == 0
    assert WorkerAssignment.query.count() == 0
    assert quo.status == 'pending'


def test_failure_while_resolving_client(staff, make_quotation, monkeypatch):
    quo = make_quotation()

    def broken(quotation):
        raise SQLAlchemyError('clients table unavailable')

    monkeypatch.setattr(ClientService, 'resolve_for_quotation', staticmethod(broken))
    with pytest.raises(PartialAcceptanceFailure) as exc:
        _accept(quo, staff)
    assert exc.value.step == 'resolve_client'
    assert exc.value.created == []


def test_accept_without_seller(staff, make_quotation):
    quo = QuotationService.change_status(make_quotation().id, 'accepted')
    assert quo.status == 'accepted'
    assert quo.seller_id is None
    assert Job.query.count() == 1


def test_payout_without_seller_is_rejected(staff, make_quotation):
    with pytest.raises(ValidationError):
        QuotationService.change_status(make_quotation().id, 'accepted', seller_payout='100')
