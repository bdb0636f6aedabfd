"""
Membership applications and role management for user accounts.
"""
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import case, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import access
from ..access import Operation
from ..content_kinds import validate_payload
from ..content_store import ContentStore
from ..errors import AuthorizationError, ClubError, ConflictError, NotFoundError, StoreError
from ..logging_config import moderation_logger
from ..models.enums import ApplicationStatus, ContentKind, ContentStatus, Decision, UserRole
from ..models.user import User
from ..notifications import EventManager, emit_moderation_decision, event_manager
from .activity_log import record_decision

APPLICATION_KIND = "application"


def _role(user: Optional[User]):
    return user.role if user is not None else None


class ApplicationService:
    """Decides pending applicant accounts and manages user roles.

    Approving an applicant also creates their public member profile in the
    content store. That second write is not atomic with the first; if it
    fails the approval stands and the failure is logged.
    """

    def __init__(
        self,
        db: Session,
        store: Optional[ContentStore] = None,
        events: Optional[EventManager] = None,
    ):
        self.db = db
        self.store = store
        self.events = events or event_manager

    def list_users(self, actor: Optional[User], role: Optional[UserRole] = None) -> List[User]:
        access.require(_role(actor), Operation.READ_ALL)
        query = self.db.query(User)
        if role is not None:
            query = query.filter(User.role == UserRole(role).value)
        return query.order_by(User.created_at.desc(), User.id.desc()).all()

    def list_applicants(
        self,
        actor: Optional[User],
        status: Optional[ApplicationStatus] = ApplicationStatus.PENDING,
    ) -> List[User]:
        access.require(_role(actor), Operation.READ_ALL)
        query = self.db.query(User).filter(User.role == UserRole.APPLICANT.value)
        if status is not None:
            query = query.filter(User.application_status == ApplicationStatus(status).value)
        return query.order_by(User.applied_at.asc(), User.id.asc()).all()

    def decide_application(self, user_id: int, decision: Decision, reviewer: Optional[User]) -> User:
        decision = Decision(decision)
        access.require(_role(reviewer), Operation.MODERATE)

        now = datetime.now(timezone.utc)
        values = {
            "application_status": decision.value,
            "reviewed_by": reviewer.id,
            "reviewed_at": now,
            "updated_at": now,
        }
        if decision is Decision.APPROVED:
            values["approved_at"] = now
            # Promotion rides on the same conditional update as the decision
            values["role"] = case(
                (User.role == UserRole.APPLICANT.value, UserRole.MEMBER.value),
                else_=User.role,
            )

        stmt = (
            update(User)
            .where(User.id == user_id, User.application_status == ApplicationStatus.PENDING.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
            if result.rowcount != 1:
                self.db.rollback()
                return self._raise_undecidable(user_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Identity store failed to update application", {"reason": str(e)}) from e

        user = self.db.query(User).filter(User.id == user_id).first()
        if decision is Decision.APPROVED:
            self._create_member_profile(user, reviewer)

        moderation_logger.info(
            f"Application {decision.value}",
            user_id=user.id,
            reviewer_id=reviewer.id,
        )
        emit_moderation_decision(
            decision.event_type, APPLICATION_KIND, user.id, reviewer.id, manager=self.events,
        )
        record_decision(
            self.db,
            reviewer.id,
            decision,
            APPLICATION_KIND,
            user.id,
            title=f"Application {decision.value}: {user.email}",
            extra_data={"email": user.email},
        )
        return user

    def change_role(self, user_id: int, role: UserRole, actor: Optional[User]) -> User:
        role = UserRole(role)
        access.require(_role(actor), Operation.MANAGE_USERS)

        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User", user_id)
        if user.id == actor.id and role is not UserRole.SUPER_ADMIN:
            raise AuthorizationError("Super admins cannot demote themselves")

        previous = user.role
        user.role = role.value
        try:
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Identity store failed to update role", {"reason": str(e)}) from e

        moderation_logger.info(
            "Role changed",
            user_id=user.id,
            previous_role=previous,
            role=role.value,
            actor_id=actor.id,
        )
        return user

    def _raise_undecidable(self, user_id: int):
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User", user_id)
        raise ConflictError(
            f"Application for user {user_id} was already {user.application_status}",
            current_status=user.application_status,
        )

    def _create_member_profile(self, user: User, reviewer: User):
        if self.store is None:
            return None
        data = {
            "name": user.full_name,
            "email": user.email,
            "position": UserRole.MEMBER.value,
            "bio": user.motivation or "New member of the club",
        }
        if user.profile_image_url:
            data["profile_image_url"] = user.profile_image_url
        try:
            payload = validate_payload(ContentKind.MEMBER, data)
            return self.store.insert(
                ContentKind.MEMBER,
                payload,
                created_by=user.id,
                status=ContentStatus.APPROVED,
                approved_by=reviewer.id,
            )
        except ClubError as e:
            moderation_logger.warning(
                "Member profile creation failed",
                user_id=user.id,
                error_code=e.error_code,
                error_message=e.message,
            )
            return None
