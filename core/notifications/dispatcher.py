"""
Schedule dispatcher - composes one notification and fans it out to every
confirmed registrant over email and, where linked, Discord.

The poller and the operator's "run now" endpoint both call
execute_schedule(), so automatic and manual sends behave identically.
"""

import asyncio
import logging
from datetime import datetime, timezone

from core.config import get_operator_discord_ids
from core.models import Event, Schedule, normalize_email
from core.notifications.channels.discord import ChatMessage, send_discord_dm
from core.notifications.channels.email import send_email
from core.notifications.content import (
    ContentProviderChain,
    build_fallback_body,
    build_notification_prompt,
    default_chain,
)
from core.notifications.recipients import resolve_chat_bindings, resolve_recipients
from core.notifications.results import DispatchResult, Err, Ok, Result
from core.notifications.templates import build_event_context, get_message
from core.repositories import get_repository

logger = logging.getLogger(__name__)

# SendGrid throughput ceiling: pause between consecutive emails in a batch
EMAIL_SEND_DELAY_SECONDS = 1.5

_dispatch_lock: asyncio.Lock | None = None
_dispatch_lock_loop: asyncio.AbstractEventLoop | None = None


def _get_dispatch_lock() -> asyncio.Lock:
    """One lock per event loop, serialising dispatches of any schedule."""
    global _dispatch_lock, _dispatch_lock_loop
    loop = asyncio.get_running_loop()
    if _dispatch_lock is None or _dispatch_lock_loop is not loop:
        _dispatch_lock = asyncio.Lock()
        _dispatch_lock_loop = loop
    return _dispatch_lock


async def _pause_between_emails() -> None:
    await asyncio.sleep(EMAIL_SEND_DELAY_SECONDS)


async def _deliver_email(to_email: str, subject: str, body: str) -> Result:
    """Run the blocking SendGrid call off the event loop."""
    try:
        return await asyncio.to_thread(send_email, to_email, subject, body)
    except Exception as e:
        return Err(f"email channel crashed: {e}")


async def _deliver_chat(discord_id: str, message: ChatMessage) -> Result:
    try:
        return await send_discord_dm(discord_id, message)
    except Exception as e:
        return Err(f"chat channel crashed: {e}")


async def notify_operators(message: ChatMessage) -> int:
    """
    Push a message to every configured operator.

    Returns:
        Number of operators reached
    """
    reached = 0
    for operator_id in get_operator_discord_ids():
        result = await _deliver_chat(operator_id, message)
        if isinstance(result, Ok):
            reached += 1
        else:
            logger.warning(f"Operator {operator_id} not notified: {result.reason}")
    return reached


async def _compose_body(
    event: Event, schedule: Schedule, chain: ContentProviderChain
) -> tuple[str, str | None]:
    """Generated body and provider name, or the template body and None."""
    prompt = build_notification_prompt(event, schedule.kind)
    try:
        generated = await chain.generate(prompt)
    except Exception as e:
        logger.error(f"Content generation crashed for schedule {schedule.id}: {e}")
        generated = None

    if generated is None:
        logger.info(f"Using template body for schedule {schedule.id}")
        return build_fallback_body(event, schedule.kind), None
    return generated.text, generated.provider


async def execute_schedule(
    schedule_id: str,
    chain: ContentProviderChain | None = None,
) -> DispatchResult:
    """
    Dispatch one schedule now.

    Time and enabled checks are the caller's business (the poller filters
    on them, a manual run skips them). The fired guard is always enforced:
    the schedule is re-read under the dispatch lock and an already-fired
    schedule is left alone.

    Args:
        schedule_id: Schedule to dispatch
        chain: Content providers to use (defaults to OpenAI then Gemini)

    Returns:
        DispatchResult. Aborted results (reason set) leave the schedule pending.
    """
    async with _get_dispatch_lock():
        return await _dispatch(schedule_id, chain or default_chain())


async def _dispatch(schedule_id: str, chain: ContentProviderChain) -> DispatchResult:
    repository = get_repository()

    schedule = await repository.get_schedule(schedule_id)
    if schedule is None:
        logger.warning(f"Schedule {schedule_id} not found")
        return DispatchResult.aborted("schedule not found")
    if schedule.fired:
        logger.info(f"Schedule {schedule_id} already fired, skipping")
        return DispatchResult.aborted("already fired")

    # 1. Event
    event = await repository.get_event(schedule.event_id)
    if event is None:
        logger.warning(
            f"Event {schedule.event_id} not found for schedule {schedule_id}, not firing"
        )
        return DispatchResult.aborted("event not found")

    # 2. Recipients
    recipients = await resolve_recipients(event.id)
    if not recipients:
        logger.warning(
            f"No confirmed registrations for event {event.id}, schedule {schedule_id} left pending"
        )
        return DispatchResult.aborted("no confirmed registrations")

    # 3. Content
    body, provider = await _compose_body(event, schedule, chain)
    context = build_event_context(event, schedule.kind)
    subject = get_message("schedule_notification", "email_subject", context)
    chat_message = ChatMessage(
        title=get_message("schedule_notification", "discord_title", context),
        body=body,
    )

    # 4. Fan-out, one recipient at a time
    bindings = await resolve_chat_bindings(recipients)
    result = DispatchResult(
        success=True, total_count=len(recipients), provider=provider
    )

    for index, recipient in enumerate(recipients):
        reached = False

        if index > 0:
            await _pause_between_emails()
        email_result = await _deliver_email(recipient.email, subject, body)
        if isinstance(email_result, Ok):
            reached = True
        else:
            result.add_error(recipient.email, "email", email_result.reason)
            logger.warning(f"Email to {recipient.email} failed: {email_result.reason}")

        discord_id = bindings.get(normalize_email(recipient.email))
        if discord_id:
            chat_result = await _deliver_chat(discord_id, chat_message)
            if isinstance(chat_result, Ok):
                reached = True
            else:
                result.add_error(recipient.email, "discord", chat_result.reason)
                logger.warning(
                    f"Discord DM to {recipient.email} failed: {chat_result.reason}"
                )

        # 5. Count
        if reached:
            result.sent_count += 1

    # 6. Consume the schedule, whatever the delivery outcome
    fired_at = datetime.now(timezone.utc)
    if not await repository.mark_schedule_fired(schedule.id, fired_at):
        logger.warning(f"Schedule {schedule.id} was already marked fired")

    logger.info(
        f"Dispatched schedule {schedule.id} ({schedule.kind.value}) for event {event.id}: "
        f"sent {result.sent_count}/{result.total_count}, {len(result.errors)} errors"
    )

    # 7. Summary to operators
    summary = get_message(
        "dispatch_summary",
        "discord",
        {
            **context,
            "sent_count": result.sent_count,
            "total_count": result.total_count,
        },
    )
    await notify_operators(ChatMessage(title="Dispatch summary", body=summary))

    return result
