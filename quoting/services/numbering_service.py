"""Per-company quotation number generation."""
from flask import current_app
from sqlalchemy import func

from quoting import db
from quoting.errors import ConfigurationError
from quoting.models import Quotation, NumberingLock


class NumberingService:
    @staticmethod
    def company_config(company):
        companies = current_app.config.get('COMPANIES') or {}
        conf = companies.get(company)
        if not conf or not conf.get('prefix') or conf.get('start_number') is None:
            raise ConfigurationError(f'No numbering configured for company "{company}"', company=company)
        return conf

    @staticmethod
    def parse_suffix(quotation_number, prefix):
        """Numeric part of ``PREFIX-N``, or None when it doesn't follow the format."""
        head = f'{prefix}-'
        if not quotation_number or not quotation_number.startswith(head):
            return None
        suffix = quotation_number[len(head):]
        return int(suffix) if suffix.isdigit() else None

    @staticmethod
    def _lock(company):
        lock = (
            db.session.query(NumberingLock)
            .filter(NumberingLock.company == company)
            .with_for_update()
            .first()
        )
        if lock is None:
            lock = NumberingLock(company=company)
            db.session.add(lock)
            db.session.flush()
        return lock

    @staticmethod
    def _latest_numbers(company):
        """Numbers of the company's most recently created quotations.

        Several rows can share the latest ``created_at``; their suffixes are
        compared numerically by the caller.
        """
        latest = (
            db.session.query(func.max(Quotation.created_at))
            .filter(Quotation.company == company)
            .scalar()
        )
        if latest is None:
            return []
        rows = (
            db.session.query(Quotation.quotation_number)
            .filter(Quotation.company == company, Quotation.created_at == latest)
            .all()
        )
        return [row.quotation_number for row in rows]

    @staticmethod
    def next_quotation_number(company):
        """Reserve the next number for ``company``. Does not commit.

        The company's lock row stays locked until the caller's transaction ends,
        which serializes concurrent creations for the same company.
        """
        conf = NumberingService.company_config(company)
        prefix, start = conf['prefix'], int(conf['start_number'])
        lock = NumberingService._lock(company)
        parsed = [
            n for n in (
                NumberingService.parse_suffix(number, prefix)
                for number in NumberingService._latest_numbers(company)
            )
            if n is not None
        ]
        seq = max(max(parsed) + 1, start) if parsed else start
        number = f'{prefix}-{seq}'
        lock.last_issued = number
        return number
