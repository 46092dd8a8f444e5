from sqlalchemy.orm import Session

from app.db.models.vehicle import Vehicle as VehicleModel


def get_vehicle_by_id(
    db: Session, vehicle_id: int, for_update: bool = False
) -> VehicleModel | None:
    """
    Get a vehicle by ID.

    With for_update=True the row is locked until the end of the transaction
    (SELECT ... FOR UPDATE) and reloaded over any copy already in the session.
    Backends without row locks (SQLite) ignore the lock itself.
    """
    query = db.query(VehicleModel).filter(VehicleModel.id == vehicle_id)
    if for_update:
        query = query.with_for_update().populate_existing()
    return query.first()


def create_vehicle(
    db: Session,
    name: str,
    daily_rate: int,
    is_operational: bool = True,
) -> VehicleModel:
    """Create a new vehicle in the database. Pure data access - no business logic."""
    db_vehicle = VehicleModel(
        name=name,
        daily_rate=daily_rate,
        is_operational=is_operational,
    )
    db.add(db_vehicle)
    db.commit()
    db.refresh(db_vehicle)
    return db_vehicle
