"""Farmer registration, agent linking and lookup"""

from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agrocredit.domain.exceptions import DuplicateRecordError, NotFoundError, PreconditionViolation
from agrocredit.domain.farmer_import import parse_farmer_csv
from agrocredit.infrastructure.database.models import Farmer, User
from agrocredit.infrastructure.database.repositories import FarmerRepository
from agrocredit.infrastructure.database.session import atomic


def import_farmers(db: Session, csv_text: str) -> List[Farmer]:
    """
    Create farmers from an uploaded CSV as one batch.

    Raises:
        ValidationError: Malformed file or a row missing a required column
        DuplicateRecordError: A phone or national ID is already registered
    """
    rows = parse_farmer_csv(csv_text)
    try:
        with atomic(db):
            farmers = FarmerRepository(db).create_farmers(rows)
    except IntegrityError as e:
        raise DuplicateRecordError("Phone or national ID already registered") from e
    return farmers


def link_farmer(db: Session, farmer_id: str, agent: User) -> Farmer:
    """
    Claim an unlinked farmer for an agent. First claim wins; there is no unlink.

    Raises:
        NotFoundError: Farmer does not exist
        PreconditionViolation: Farmer already belongs to an agent
    """
    repo = FarmerRepository(db)

    with atomic(db):
        farmer = repo.get_farmer_by_id(farmer_id)
        if farmer is None:
            raise NotFoundError("Farmer not found")
        if farmer.agent_id is not None:
            raise PreconditionViolation("Farmer is already linked to an agent")
        if repo.claim(farmer_id, agent.id) != 1:
            raise PreconditionViolation("Farmer was linked by another agent")

    return farmer


def search_for_agent(db: Session, agent: User, search: Optional[str] = None) -> Tuple[List[Farmer], List[Farmer]]:
    """Split search results into the agent's own farmers and those still unlinked"""
    farmers = FarmerRepository(db).list_farmers(search)
    mine = [f for f in farmers if f.agent_id == agent.id]
    available = [f for f in farmers if f.agent_id is None]
    return mine, available


def farmer_for_user(db: Session, user: User) -> Farmer:
    """
    Farmer record behind a farmer login, matched on phone then email.

    Raises:
        NotFoundError: No farmer record matches the account
    """
    farmer = FarmerRepository(db).find_by_contact(user.phone, user.email)
    if farmer is None:
        raise NotFoundError("No farmer record for this account")
    return farmer
