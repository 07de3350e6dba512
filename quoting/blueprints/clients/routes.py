"""Client routes."""
from flask import jsonify, request
from flask_login import login_required

from quoting.blueprints.clients import clients_bp
from quoting.models import Client
from quoting.services import ClientService
from quoting.services.store import get_or_raise


@clients_bp.route('/')
@login_required
def list():
    clients = ClientService.list_clients(company=request.args.get('company') or None)
    return jsonify([c.to_dict() for c in clients])


@clients_bp.route('/<client_id>')
@login_required
def detail(client_id):
    client = get_or_raise(Client, client_id, 'Client')
    data = client.to_dict()
    data['jobs'] = [j.to_dict() for j in client.jobs]
    return jsonify(data)
