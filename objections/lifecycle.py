"""
Objection Lifecycle

Owns the objection state machine and the one-active-objection-per-farmer rule.

States:
- pending: set on submission
- reviewed: an admin has looked at it
- resolved: terminal, kept as archive

Edges:
- pending -> reviewed (review)
- pending -> resolved (resolve)
- reviewed -> resolved (resolve)

A farmer may hold at most one objection in pending/reviewed. The rule is
checked before insert for a clean error, and enforced by the partial unique
index uq_objections_active_farmer so racing submissions cannot both land.
"""

import logging
from typing import Callable, List

from sqlalchemy.exc import IntegrityError

from database.connection import Storage
from database.crud import get_farmer_by_id
from database.models import (
    Objection,
    ACTIVE_STATUSES,
    STATUS_PENDING,
    STATUS_REVIEWED,
    STATUS_RESOLVED,
    is_row_id,
    utcnow,
)
from objections.codes import generate_objection_code
from objections.errors import Conflict, InvalidTransition, NotFound, StorageUnavailable, ValidationError
from objections.roles import ROLE_ADMIN, require_role

logger = logging.getLogger(__name__)

# target status -> statuses it may be reached from
TRANSITIONS = {
    STATUS_REVIEWED: (STATUS_PENDING,),
    STATUS_RESOLVED: (STATUS_PENDING, STATUS_REVIEWED),
}

MAX_CODE_ATTEMPTS = 5
MAX_TRANSACTION_NUMBER_LENGTH = 100


def can_transition(current_status: str, target_status: str) -> bool:
    return current_status in TRANSITIONS.get(target_status, ())


class ObjectionLifecycle:
    """Submit, list and move objections through their states."""

    def __init__(self, storage: Storage,
                 code_generator: Callable[[], str] = generate_objection_code,
                 max_code_attempts: int = MAX_CODE_ATTEMPTS):
        self.storage = storage
        self.code_generator = code_generator
        self.max_code_attempts = max_code_attempts

    def can_submit(self, farmer_id: int) -> bool:
        """True if the farmer has no pending or reviewed objection."""
        with self.storage.session() as db:
            return not self._has_active(db, farmer_id)

    @staticmethod
    def _has_active(db, farmer_id: int) -> bool:
        return db.query(Objection.id)\
            .filter(Objection.farmer_id == farmer_id, Objection.status.in_(ACTIVE_STATUSES))\
            .first() is not None

    def submit(self, farmer_id: int, transaction_number: str) -> Objection:
        """
        File a new objection for a farmer.

        Args:
            farmer_id: Owning farmer
            transaction_number: Transaction the objection is about

        Returns:
            The created objection (status pending)

        Raises:
            ValidationError: Blank or over-long transaction number
            NotFound: Unknown farmer
            Conflict: Farmer already has a pending or reviewed objection
            StorageUnavailable: Database unreachable, or no free code found
        """
        transaction_number = (transaction_number or "").strip()
        if not transaction_number:
            raise ValidationError("transaction_number is required")
        if len(transaction_number) > MAX_TRANSACTION_NUMBER_LENGTH:
            raise ValidationError(
                f"transaction_number must be at most {MAX_TRANSACTION_NUMBER_LENGTH} characters"
            )
        if not is_row_id(farmer_id):
            raise NotFound(f"Farmer {farmer_id} not found")

        for attempt in range(1, self.max_code_attempts + 1):
            code = self.code_generator()
            try:
                with self.storage.session() as db:
                    if get_farmer_by_id(db, farmer_id) is None:
                        raise NotFound(f"Farmer {farmer_id} not found")
                    if self._has_active(db, farmer_id):
                        raise Conflict("Already have a pending or reviewed objection")

                    objection = Objection(
                        farmer_id=farmer_id,
                        code=code,
                        transaction_number=transaction_number,
                        status=STATUS_PENDING,
                    )
                    db.add(objection)
                    db.flush()
            except IntegrityError as e:
                # Either a concurrent submission won the active slot,
                # or the random code is taken
                if not self.can_submit(farmer_id):
                    logger.info(f"Concurrent submission rejected for farmer {farmer_id}")
                    raise Conflict("Already have a pending or reviewed objection") from e
                logger.warning(f"Objection code {code} collided (attempt {attempt}/{self.max_code_attempts})")
                continue

            logger.info(f"Farmer {farmer_id} submitted objection {objection.code}")
            return objection

        raise StorageUnavailable(
            f"Could not allocate a unique objection code after {self.max_code_attempts} attempts"
        )

    def list_for_farmer(self, farmer_id: int) -> List[Objection]:
        """All objections of a farmer, newest first."""
        with self.storage.session() as db:
            return db.query(Objection)\
                .filter(Objection.farmer_id == farmer_id)\
                .order_by(Objection.created_at.desc(), Objection.id.desc())\
                .all()

    def transition(self, objection_id: int, target_status: str, actor_role: str) -> Objection:
        """
        Move an objection to target_status.

        The update is conditional on the current status so a concurrent
        transition cannot be overwritten.

        Raises:
            Forbidden: actor_role is not admin
            NotFound: Unknown objection
            InvalidTransition: Edge not in the state machine
        """
        require_role(actor_role, ROLE_ADMIN)
        if not is_row_id(objection_id):
            raise NotFound(f"Objection {objection_id} not found")

        with self.storage.session() as db:
            objection = db.query(Objection).filter(Objection.id == objection_id).first()
            if objection is None:
                raise NotFound(f"Objection {objection_id} not found")

            current_status = objection.status
            if not can_transition(current_status, target_status):
                raise InvalidTransition(current_status, target_status)

            updated = db.query(Objection)\
                .filter(
                    Objection.id == objection_id,
                    Objection.status.in_(TRANSITIONS[target_status]),
                )\
                .update(
                    {Objection.status: target_status, Objection.updated_at: utcnow()},
                    synchronize_session=False,
                )
            if updated == 0:
                db.refresh(objection)
                raise InvalidTransition(objection.status, target_status)

            db.refresh(objection)

        logger.info(f"Objection {objection.code}: {current_status} -> {target_status}")
        return objection

    def review(self, objection_id: int, actor_role: str) -> Objection:
        return self.transition(objection_id, STATUS_REVIEWED, actor_role)

    def resolve(self, objection_id: int, actor_role: str) -> Objection:
        return self.transition(objection_id, STATUS_RESOLVED, actor_role)
