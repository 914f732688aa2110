"""
CRUD operations for Collaborator model.
"""

from typing import List, Optional
from sqlalchemy.orm import Session
from skima.models.collaborator import Collaborator
from skima.schemas.collaborator import CollaboratorCreate, CollaboratorUpdate


def create(db: Session, data: CollaboratorCreate) -> Collaborator:
    """
    Create a new collaborator.

    Args:
        db: Database session
        data: Validated collaborator data

    Returns:
        Created Collaborator instance with id
    """
    collaborator = Collaborator(
        name=data.name,
        role=data.role,
        email=data.email,
        is_active=True,
    )
    if data.joined_at is not None:
        collaborator.joined_at = data.joined_at

    db.add(collaborator)
    db.commit()
    db.refresh(collaborator)

    return collaborator


def get_by_id(db: Session, collaborator_id: int) -> Optional[Collaborator]:
    return db.query(Collaborator).filter(Collaborator.id == collaborator_id).first()


def get_multi(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    active_only: bool = False
) -> List[Collaborator]:
    """
    Retrieve collaborators ordered by name, with pagination.

    Args:
        db: Database session
        skip: Number of records to skip (offset)
        limit: Maximum number of records to return
        active_only: Only return active collaborators

    Returns:
        List of Collaborator instances
    """
    query = db.query(Collaborator)

    if active_only:
        query = query.filter(Collaborator.is_active.is_(True))

    return query.order_by(Collaborator.name, Collaborator.id).offset(skip).limit(limit).all()


def update(db: Session, collaborator_id: int, data: CollaboratorUpdate) -> Optional[Collaborator]:
    """
    Apply a partial update.

    Returns:
        Updated Collaborator instance if found, None otherwise
    """
    collaborator = get_by_id(db, collaborator_id)
    if not collaborator:
        return None

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(collaborator, field, value)

    db.commit()
    db.refresh(collaborator)

    return collaborator
