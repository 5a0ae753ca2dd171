import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from .. import models, schemas
from ..auth import require_role
from ..database import transaction
from ..errors import Forbidden, NotFound

Role = models.Role

CREATE_ROLES = {Role.CLIENT}
VIEW_ROLES = {Role.CLIENT, Role.COMPANY}


def _with_details(stmt):
    return stmt.options(
        joinedload(models.Request.client),
        joinedload(models.Request.origin),
        joinedload(models.Request.destination),
    )


def _new_address(owner: models.User, data: schemas.AddressIn, kind: models.AddressKind) -> models.Address:
    return models.Address(
        owner_user_id=owner.id,
        cep=data.cep,
        street=data.street,
        number=data.number,
        complement=data.complement,
        neighborhood=data.neighborhood,
        city=data.city,
        state=data.state,
        kind=kind,
    )


def create_request(db: Session, client: models.User, data: schemas.RequestCreate) -> models.Request:
    """Persist both addresses and the request as one unit."""
    require_role(client, CREATE_ROLES, "Only clients can create requests")

    with transaction(db, "create_request"):
        origin = _new_address(client, data.origin_address, models.AddressKind.ORIGIN)
        destination = _new_address(client, data.destination_address, models.AddressKind.DESTINATION)
        db.add_all([origin, destination])
        db.flush()

        request = models.Request(
            client_id=client.id,
            origin_address_id=origin.id,
            destination_address_id=destination.id,
            description=data.description,
            move_date=data.move_date,
            notes=data.notes,
            status=models.RequestStatus.PENDING,
        )
        db.add(request)
        db.flush()

    logging.info("Request %s created by client %s", request.id, client.id)
    db.refresh(request)
    return request


def list_requests(db: Session, caller: models.User) -> List[models.Request]:
    """Clients see their own requests; companies see every pending one."""
    require_role(caller, VIEW_ROLES)

    stmt = _with_details(select(models.Request))
    if caller.role == Role.CLIENT:
        stmt = stmt.where(models.Request.client_id == caller.id)
    else:
        stmt = stmt.where(models.Request.status == models.RequestStatus.PENDING)
    stmt = stmt.order_by(models.Request.created_at.desc(), models.Request.id.desc())
    return list(db.execute(stmt).scalars().unique())


def get_request(db: Session, caller: models.User, request_id: int) -> models.Request:
    require_role(caller, VIEW_ROLES)

    stmt = _with_details(select(models.Request)).where(models.Request.id == request_id)
    request = db.execute(stmt).scalars().first()
    if request is None:
        raise NotFound("Request not found")
    if caller.role == Role.CLIENT and request.client_id != caller.id:
        raise Forbidden()
    return request
