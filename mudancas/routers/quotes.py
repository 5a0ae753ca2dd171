from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db
from ..services import quotes

router = APIRouter(prefix="/quotes", tags=["Quotes"])

@router.post("/", response_model=schemas.QuoteCreated, status_code=status.HTTP_201_CREATED)
def create_quote(
    req: schemas.QuoteCreate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    new = quotes.create_quote(db, user, req)
    return {"message": "Quote sent successfully", "quote": new}

@router.get("/", response_model=List[schemas.QuoteOut])
def get_quotes(user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    return quotes.list_quotes(db, user)

@router.patch("/{quote_id}/status", response_model=schemas.DecisionOut)
def update_status(
    req: schemas.QuoteDecision,
    quote_id: int = Path(gt=0, le=schemas.MAX_ID),
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    new_status = quotes.decide_quote(db, user, quote_id, req.status)
    return {"message": f"Quote {new_status.value} successfully", "status": new_status}
