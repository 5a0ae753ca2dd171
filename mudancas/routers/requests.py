from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db
from ..services import move_requests

router = APIRouter(prefix="/requests", tags=["Requests"])

@router.post("/", response_model=schemas.RequestCreated, status_code=status.HTTP_201_CREATED)
def create_request(
    req: schemas.RequestCreate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    new = move_requests.create_request(db, user, req)
    return {"message": "Request created successfully", "request": new}

@router.get("/", response_model=List[schemas.RequestOut])
def get_requests(user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    return move_requests.list_requests(db, user)

@router.get("/{request_id}", response_model=schemas.RequestOut)
def get_request(
    request_id: int = Path(gt=0, le=schemas.MAX_ID),
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return move_requests.get_request(db, user, request_id)
