import logging
from typing import List

from sqlalchemy import exists, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from .. import models, schemas
from ..auth import require_role
from ..database import transaction
from ..errors import AlreadyProcessed, DuplicateQuote, NotFound

Role = models.Role
QuoteStatus = models.QuoteStatus
RequestStatus = models.RequestStatus

CREATE_ROLES = {Role.COMPANY}
VIEW_ROLES = {Role.CLIENT, Role.COMPANY}
DECIDE_ROLES = {Role.CLIENT}

DECISIONS = {QuoteStatus.ACCEPTED, QuoteStatus.REJECTED}


def create_quote(db: Session, company: models.User, data: schemas.QuoteCreate) -> models.Quote:
    require_role(company, CREATE_ROLES, "Only companies can create quotes")

    with transaction(db, "create_quote"):
        # shared lock: the request cannot move to in_progress under us
        request = db.execute(
            select(models.Request)
            .where(
                models.Request.id == data.request_id,
                models.Request.status == RequestStatus.PENDING,
            )
            .with_for_update(read=True)
        ).scalars().first()
        if request is None:
            raise NotFound("Request not found or no longer available")

        already_quoted = db.execute(
            select(models.Quote.id).where(
                models.Quote.request_id == request.id,
                models.Quote.company_id == company.id,
            )
        ).first()
        if already_quoted is not None:
            raise DuplicateQuote()

        quote = models.Quote(
            request_id=request.id,
            company_id=company.id,
            value=data.value,
            service_description=data.service_description,
            deadline_days=data.deadline_days,
            notes=data.notes,
            status=QuoteStatus.PENDING,
        )
        db.add(quote)
        try:
            db.flush()
        except IntegrityError:
            # lost a race against the same company's concurrent submission
            raise DuplicateQuote()

    logging.info("Quote %s created by company %s for request %s", quote.id, company.id, request.id)
    db.refresh(quote)
    return quote


def list_quotes(db: Session, caller: models.User) -> List[models.Quote]:
    """Clients see quotes on their requests; companies see the ones they sent."""
    require_role(caller, VIEW_ROLES)

    stmt = (
        select(models.Quote)
        .join(models.Request, models.Quote.request_id == models.Request.id)
        .options(
            joinedload(models.Quote.company),
            joinedload(models.Quote.request).joinedload(models.Request.client),
        )
    )
    if caller.role == Role.CLIENT:
        stmt = stmt.where(models.Request.client_id == caller.id)
    else:
        stmt = stmt.where(models.Quote.company_id == caller.id)
    stmt = stmt.order_by(models.Quote.created_at.desc(), models.Quote.id.desc())
    return list(db.execute(stmt).scalars().unique())


def decide_quote(db: Session, client: models.User, quote_id: int, decision: QuoteStatus) -> QuoteStatus:
    """Accept or reject a pending quote as a single atomic unit.

    Accepting moves the parent request to in_progress and rejects every
    other pending quote of that request in the same transaction. The
    parent request row is locked first, so decisions on sibling quotes are
    serialized; the conditional updates below re-check ``pending`` at
    write time, so a concurrent loser gets ``AlreadyProcessed`` and leaves
    no writes behind.
    """
    require_role(client, DECIDE_ROLES, "Only clients can accept or reject quotes")
    decision = QuoteStatus(decision)
    if decision not in DECISIONS:
        raise ValueError(f"Invalid decision: {decision.value}")

    with transaction(db, "decide_quote"):
        row = db.execute(
            select(models.Quote.id, models.Quote.status, models.Quote.request_id, models.Request.status)
            .join(models.Request, models.Quote.request_id == models.Request.id)
            .where(models.Quote.id == quote_id, models.Request.client_id == client.id)
            .with_for_update(of=models.Request)
        ).first()
        if row is None:
            raise NotFound("Quote not found")

        _, quote_status, request_id, request_status = row
        if quote_status != QuoteStatus.PENDING or request_status != RequestStatus.PENDING:
            raise AlreadyProcessed()

        now = models.utcnow()
        parent_pending = exists().where(
            models.Request.id == request_id,
            models.Request.status == RequestStatus.PENDING,
        )
        changed = db.execute(
            update(models.Quote)
            .where(
                models.Quote.id == quote_id,
                models.Quote.status == QuoteStatus.PENDING,
                parent_pending,
            )
            .values(status=decision, updated_at=now)
            .execution_options(synchronize_session=False)
        ).rowcount
        if changed != 1:
            logging.warning("Quote %s lost a concurrent decision", quote_id)
            raise AlreadyProcessed()

        if decision == QuoteStatus.ACCEPTED:
            promoted = db.execute(
                update(models.Request)
                .where(
                    models.Request.id == request_id,
                    models.Request.status == RequestStatus.PENDING,
                )
                .values(status=RequestStatus.IN_PROGRESS, updated_at=now)
                .execution_options(synchronize_session=False)
            ).rowcount
            if promoted != 1:
                logging.warning("Request %s was promoted concurrently", request_id)
                raise AlreadyProcessed()

            db.execute(
                update(models.Quote)
                .where(
                    models.Quote.request_id == request_id,
                    models.Quote.id != quote_id,
                    models.Quote.status == QuoteStatus.PENDING,
                )
                .values(status=QuoteStatus.REJECTED, updated_at=now)
                .execution_options(synchronize_session=False)
            )

    logging.info("Quote %s %s by client %s", quote_id, decision.value, client.id)
    return decision
