"""Client lookup and creation."""
from quoting import db
from quoting.models import Client


class ClientService:
    @staticmethod
    def find_client(email=None, phone=None):
        """Look a client up by email first, then by phone."""
        if email:
            client = Client.query.filter(Client.email == email).order_by(Client.created_at).first()
            if client:
                return client
        if phone:
            client = Client.query.filter(Client.phone == phone).order_by(Client.created_at).first()
            if client:
                return client
        return None

    @staticmethod
    def resolve_for_quotation(quotation):
        """Existing client matching the quotation snapshot, or a new one.

        Returns ``(client, created)``. Flushes but does not commit.
        """
        client = ClientService.find_client(quotation.client_email, quotation.client_phone)
        if client:
            return client, False
        client = Client(
            name=quotation.client_name,
            email=quotation.client_email or None,
            phone=quotation.client_phone or None,
            address=quotation.client_address or None,
            company=quotation.company,
        )
        db.session.add(client)
        db.session.flush()
        return client, True

    @staticmethod
    def list_clients(company=None):
        query = Client.query
        if company:
            query = query.filter(Client.company == company)
        return query.order_by(Client.created_at.desc()).all()
