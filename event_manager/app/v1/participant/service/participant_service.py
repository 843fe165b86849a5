"""Participation workflow.

A join request starts PENDING. Organizers move it to APPROVED or REJECTED and
may flip between the two; the requester may only withdraw while it is still
PENDING. Seat capacity is enforced inside the same transaction as the status
write, with the event row locked, so concurrent approvals cannot overbook.
"""
import logging
import math

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from event_manager.app.common.exceptions import (
    AlreadyRequested,
    Forbidden,
    InvalidState,
    NotFound,
    SeatsFull,
)
from event_manager.app.common.utils.consts import JoinStatus
from event_manager.app.common.utils.send_email import SmtpMailer
from event_manager.app.v1.event.repository.event_repository import EventRepository
from event_manager.app.v1.participant.entity.participant import Participant
from event_manager.app.v1.participant.repository.participant_repository import ParticipantRepository
from event_manager.app.v1.user.repository.user_repository import UserRepository

logger = logging.getLogger(__name__)

DECISION_STATUSES = (JoinStatus.APPROVED, JoinStatus.REJECTED)


def _join_request_mail(participant_name: str, event_title: str) -> tuple[str, str]:
    subject = f"New Join Request for {event_title}"
    body = (
        "Hi,\n\n"
        f'{participant_name} has requested to join your event: "{event_title}".\n\n'
        "Please check your dashboard to review and approve/reject this request.\n\n"
        "Thanks,\nEvent Management Team"
    )
    return subject, body


def _decision_mail(participant_name: str, event_title: str, status: JoinStatus) -> tuple[str, str]:
    subject = f'Your request for "{event_title}" has been {status.value.lower()}'
    if status == JoinStatus.APPROVED:
        body = (
            f"Hi {participant_name},\n\n"
            f'Good news! Your request to join the event "{event_title}" has been approved.\n'
            "You can now participate in the event.\n\n"
            "We're excited to have you with us!\n\n"
            "Best regards,\nEvent Management Team"
        )
    else:
        body = (
            f"Hi {participant_name},\n\n"
            f'We appreciate your interest in joining the event "{event_title}".\n'
            "Unfortunately, your request has been declined by the organizer.\n\n"
            "We hope to see you in our upcoming events! Thank you for understanding.\n\n"
            "Best regards,\nEvent Management Team"
        )
    return subject, body


def _page(items: list[Participant], total: int, page: int, limit: int) -> dict:
    return {
        "items": items,
        "total": total,
        "page": page,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


class ParticipantService:
    def __init__(
        self,
        participant_repo: ParticipantRepository,
        event_repo: EventRepository,
        user_repo: UserRepository,
        mailer: SmtpMailer,
    ):
        self.participant_repo = participant_repo
        self.event_repo = event_repo
        self.user_repo = user_repo
        self.mailer = mailer

    async def _notify(self, to: str, subject: str, body: str) -> None:
        # delivery is best effort; the committed state change stands either way
        try:
            sent = await self.mailer.send(to, subject, body)
        except Exception:
            logger.exception(f"Notification to {to} failed")
            return
        if not sent:
            logger.warning(f"Notification to {to} was not delivered: {subject}")

    async def request_join(self, session: AsyncSession, user_id: int, event_id: int) -> Participant:
        async with session.begin():
            event = await self.event_repo.get_event(session, event_id)
            if event is None:
                raise NotFound("Event not found")
            try:
                participant = await self.participant_repo.create_participant(session, user_id=user_id, event_id=event_id)
            except IntegrityError:
                logger.warning(f"User id={user_id} already requested to join event id={event_id}")
                raise AlreadyRequested() from None

            requester = await self.user_repo.get_user_by_id(session, user_id)
            organizer_emails = [organizer.email for organizer in event.organizers]
            event_title = event.title

        logger.info(f"User id={user_id} requested to join event id={event_id} (participant id={participant.id})")

        if requester is not None:
            subject, body = _join_request_mail(requester.full_name, event_title)
            for email in organizer_emails:
                await self._notify(email, subject, body)
        return participant

    async def decide(self, session: AsyncSession, organizer_id: int, participant_id: int, new_status: JoinStatus) -> Participant:
        if new_status not in DECISION_STATUSES:
            raise InvalidState(f"Cannot move a request to {new_status.value}")

        async with session.begin():
            participant = await self.participant_repo.get_participant_with_event(session, participant_id)
            if participant is None or participant.event.is_deleted:
                raise NotFound("Participant request not found")
            if not participant.event.is_organizer(organizer_id):
                logger.warning(f"User id={organizer_id} is not an organizer of event id={participant.event_id}")
                raise Forbidden()
            if participant.status == new_status:
                return participant

            event_id = participant.event_id
            participant_email = participant.user.email
            participant_name = participant.user.full_name
            event_title = participant.event.title

        async with session.begin():
            event = await self.event_repo.get_event_for_update(session, event_id)
            if event is None or event.is_deleted:
                raise NotFound("Event not found")

            participant = await self.participant_repo.get_participant(session, participant_id)
            if participant is None:
                raise NotFound("Participant request not found")
            # a concurrent decision may already have applied the same status
            if participant.status == new_status:
                return participant

            if new_status == JoinStatus.APPROVED and event.has_seat_limit():
                approved = await self.participant_repo.count_by_status(session, event_id, JoinStatus.APPROVED)
                if approved >= event.total_seats:
                    logger.warning(f"Event id={event_id} is full ({approved}/{event.total_seats}), participant id={participant_id} not approved")
                    raise SeatsFull()

            previous_status = participant.status
            await self.participant_repo.update_status(session, participant, new_status)
            event.confirmed_count = await self.participant_repo.count_by_status(session, event_id, JoinStatus.APPROVED)
            await session.flush()
            confirmed_count = event.confirmed_count

        logger.info(
            f"Participant id={participant_id} moved {previous_status.value} -> {new_status.value} "
            f"by user id={organizer_id}, event id={event_id} confirmed={confirmed_count}"
        )

        subject, body = _decision_mail(participant_name, event_title, new_status)
        await self._notify(participant_email, subject, body)
        return participant

    async def cancel(self, session: AsyncSession, user_id: int, participant_id: int) -> None:
        async with session.begin():
            participant = await self.participant_repo.get_participant(session, participant_id, for_update=True)
            if participant is None:
                raise NotFound("Participant request not found")
            if participant.user_id != user_id:
                raise Forbidden("You can only cancel your own requests")
            if participant.status != JoinStatus.PENDING:
                raise InvalidState("Only pending requests can be cancelled")
            await self.participant_repo.delete_participant(session, participant)
        logger.info(f"User id={user_id} cancelled participant id={participant_id}")

    async def list_my_requests(
        self, session: AsyncSession, user_id: int, page: int, limit: int, status: JoinStatus | None = None
    ) -> dict:
        async with session.begin():
            items, total = await self.participant_repo.list_by_user(session, user_id, page=page, limit=limit, status=status)
        return _page(items, total, page, limit)

    async def list_for_organizer(
        self, session: AsyncSession, organizer_id: int, page: int, limit: int, status: JoinStatus | None = None
    ) -> dict:
        async with session.begin():
            items, total = await self.participant_repo.list_by_organizer(
                session, organizer_id, page=page, limit=limit, status=status
            )
        return _page(items, total, page, limit)

    async def list_for_event(
        self, session: AsyncSession, organizer_id: int, event_id: int, status: JoinStatus | None = None
    ) -> list[Participant]:
        async with session.begin():
            event = await self.event_repo.get_event(session, event_id)
            if event is None:
                raise NotFound("Event not found")
            if not event.is_organizer(organizer_id):
                raise Forbidden()
            return await self.participant_repo.list_by_event(session, event_id, status=status)
