"""Member administration for FundLedger."""
import structlog

from fundledger.exceptions import (
    DuplicateMemberError,
    MemberDeletionBlockedError,
    MemberNotFoundError,
    ValidationError,
)
from fundledger.models import AccountStatus, Member
from fundledger.result import ErrorType, Result
from fundledger.validation import require_id

logger = structlog.get_logger(__name__)


class MemberService:
    """Enrollment, status changes and guarded deletion of members."""

    def __init__(self, store, clock):
        self.store = store
        self.clock = clock

    def add_member(self, member_id, name, email="", phone="", join_date=None):
        """Enroll a new Active member with no contributions and no loan history.

        Raises:
            ValidationError: If the id or name is blank.
            DuplicateMemberError: If the id is already taken.
        """
        require_id(member_id, "member_id")
        require_id(name, "name")
        if self.store.get_member(member_id) is not None:
            raise DuplicateMemberError(member_id)

        member = Member(
            id=member_id,
            name=name,
            email=email or "",
            phone=phone or "",
            join_date=join_date or self.clock().date(),
            account_status=AccountStatus.ACTIVE,
            total_contribution=0.0,
            active_loan_id=None,
            last_loan_paid_date=None,
        )
        with self.store.transaction():
            self.store.add_member(member)

        logger.info("member_added", member_id=member_id)
        return member

    def add_members(self, records):
        """Enroll a batch of members.

        Args:
            records: Iterable of dicts with "id" and "name", optionally
                "email" and "join_date".

        Returns:
            List of the members created. Records without id or name, and ids
            already present (in the store or earlier in the batch), are skipped.
        """
        created = []
        seen = set()
        with self.store.transaction():
            for record in records:
                member_id = str(record.get("id") or "").strip()
                name = str(record.get("name") or "").strip()
                if not member_id or not name or member_id in seen:
                    continue
                if self.store.get_member(member_id) is not None:
                    continue
                seen.add(member_id)
                member = Member(
                    id=member_id,
                    name=name,
                    email=record.get("email") or "",
                    join_date=record.get("join_date") or self.clock().date(),
                )
                self.store.add_member(member)
                created.append(member)

        logger.info("members_batch_added", added=len(created))
        return created

    def set_account_status(self, member_id, status):
        if status not in AccountStatus.ALL:
            raise ValidationError(f"status must be one of {AccountStatus.ALL}", {'status': repr(status)})
        member = self.store.get_member(member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        member.account_status = status
        with self.store.transaction():
            self.store.update_member(member)
        logger.info("member_status_changed", member_id=member_id, status=status)
        return member

    def can_delete_member(self, member_id) -> Result:
        """Check whether a member holds no open ledger obligations."""
        member = self.store.get_member(member_id)
        if member is None:
            return Result.fail(f"Member '{member_id}' not found", ErrorType.NOT_FOUND)
        if member.active_loan_id:
            return Result.fail("member has an active loan", ErrorType.ACTIVE_LOAN)
        if self.store.is_active_cosigner(member_id):
            return Result.fail("member is cosigner on an active loan", ErrorType.ACTIVE_COSIGNER)
        return Result.ok(member)

    def delete_member(self, member_id):
        """Delete a member without open obligations.

        Raises:
            MemberNotFoundError: If the member doesn't exist.
            MemberDeletionBlockedError: If the member has an active loan or
                cosigns one.
        """
        check = self.can_delete_member(member_id)
        if not check:
            if check.error_type == ErrorType.NOT_FOUND:
                raise MemberNotFoundError(member_id)
            logger.warning("member_delete_rejected", member_id=member_id, reason=check.error)
            raise MemberDeletionBlockedError(member_id, check.error)

        with self.store.transaction():
            self.store.delete_member(member_id)
        logger.info("member_deleted", member_id=member_id)
