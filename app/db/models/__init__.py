from app.db.models.vehicle import Vehicle
from app.db.models.client import Client
from app.db.models.contract import Contract, ContractAccessory

__all__ = ["Vehicle", "Client", "Contract", "ContractAccessory"]
