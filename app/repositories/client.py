from sqlalchemy.orm import Session

from app.db.models.client import Client as ClientModel


def get_client_by_id(db: Session, client_id: int) -> ClientModel | None:
    """Get a client by ID."""
    return db.query(ClientModel).filter(ClientModel.id == client_id).first()


def client_exists(db: Session, client_id: int) -> bool:
    return (
        db.query(ClientModel.id).filter(ClientModel.id == client_id).first()
        is not None
    )


def create_client(db: Session, full_name: str, email: str | None = None) -> ClientModel:
    """Create a new client in the database. Pure data access - no business logic."""
    db_client = ClientModel(full_name=full_name, email=email)
    db.add(db_client)
    db.commit()
    db.refresh(db_client)
    return db_client
