"""Tests for the schedule dispatcher.

Storage is the in-memory repository; both delivery channels are mocked.
"""

import asyncio

import pytest

from core.notifications.dispatcher import execute_schedule, notify_operators
from core.notifications.channels.discord import ChatMessage
from core.notifications.results import Err, Ok


def _emailed(channels) -> list[str]:
    return [call.args[0] for call in channels.send_email.call_args_list]


class TestFanOut:
    @pytest.mark.asyncio
    async def test_sends_to_every_confirmed_registration(
        self, repository, schedule, channels, chain
    ):
        result = await execute_schedule(schedule.id, chain=chain)

        assert result.success is True
        assert result.sent_count == 3
        assert result.total_count == 3
        assert result.errors == []
        assert _emailed(channels) == [
            "alice@example.com",
            "bob@example.com",
            "carol@example.com",
        ]

    @pytest.mark.asyncio
    async def test_pending_and_cancelled_registrations_are_skipped(
        self, repository, schedule, channels, chain
    ):
        await execute_schedule(schedule.id, chain=chain)

        assert "dan@example.com" not in _emailed(channels)
        assert "erin@example.com" not in _emailed(channels)

    @pytest.mark.asyncio
    async def test_email_subject_carries_kind_and_title(
        self, repository, schedule, channels, chain
    ):
        await execute_schedule(schedule.id, chain=chain)

        subject = channels.send_email.call_args_list[0].args[1]
        assert subject == "[Event reminder] Intro to AI Image Generation"

    @pytest.mark.asyncio
    async def test_linked_recipient_also_gets_a_discord_dm(
        self, repository, schedule, channels, chain
    ):
        await execute_schedule(schedule.id, chain=chain)

        channels.send_dm.assert_awaited_once()
        discord_id, message = channels.send_dm.call_args.args
        assert discord_id == "111"
        assert message.body == "Generated body"

    @pytest.mark.asyncio
    async def test_padded_email_still_reaches_linked_discord_user(
        self, repository, schedule, channels, chain
    ):
        repository._registrations[1].email = "  BOB@example.com "

        await execute_schedule(schedule.id, chain=chain)

        channels.send_dm.assert_awaited_once()
        assert channels.send_dm.call_args.args[0] == "111"

    @pytest.mark.asyncio
    async def test_pauses_between_emails_but_not_before_the_first(
        self, repository, schedule, channels, chain
    ):
        await execute_schedule(schedule.id, chain=chain)

        assert channels.pause.await_count == 2

    @pytest.mark.asyncio
    async def test_one_email_failure_still_fires(
        self, repository, schedule, channels, chain
    ):
        channels.send_email.side_effect = lambda to, subject, body: (
            Err("mailbox full") if to == "carol@example.com" else Ok()
        )

        result = await execute_schedule(schedule.id, chain=chain)

        assert result.success is True
        assert result.sent_count == 2
        assert result.total_count == 3
        assert result.errors == [
            {"recipient": "carol@example.com", "channel": "email", "reason": "mailbox full"}
        ]
        assert (await repository.get_schedule(schedule.id)).fired is True

    @pytest.mark.asyncio
    async def test_email_crash_is_recorded_not_raised(
        self, repository, schedule, channels, chain
    ):
        channels.send_email.side_effect = RuntimeError("boom")

        result = await execute_schedule(schedule.id, chain=chain)

        # bob is still reached over Discord
        assert result.sent_count == 1
        assert len([e for e in result.errors if e["channel"] == "email"]) == 3

    @pytest.mark.asyncio
    async def test_discord_failure_does_not_affect_email(
        self, repository, schedule, channels, chain
    ):
        channels.send_dm.return_value = Err("Cannot send messages to this user")

        result = await execute_schedule(schedule.id, chain=chain)

        assert result.sent_count == 3
        assert result.errors == [
            {
                "recipient": "bob@example.com",
                "channel": "discord",
                "reason": "Cannot send messages to this user",
            }
        ]

    @pytest.mark.asyncio
    async def test_all_deliveries_failing_still_consumes_schedule(
        self, repository, schedule, channels, chain
    ):
        channels.send_email.return_value = Err("down")
        channels.send_dm.return_value = Err("down")

        result = await execute_schedule(schedule.id, chain=chain)

        assert result.success is True
        assert result.sent_count == 0
        assert len(result.errors) == 4
        assert (await repository.get_schedule(schedule.id)).fired is True


class TestContent:
    @pytest.mark.asyncio
    async def test_reports_provider_that_produced_the_body(
        self, repository, schedule, channels, make_chain
    ):
        result = await execute_schedule(
            schedule.id, chain=make_chain("Gemini text", provider="Gemini")
        )

        assert result.provider == "Gemini"
        assert result.to_dict()["provider"] == "Gemini"
        assert channels.send_email.call_args_list[0].args[2] == "Gemini text"

    @pytest.mark.asyncio
    async def test_falls_back_to_template_when_no_provider_answers(
        self, repository, schedule, channels, make_chain
    ):
        result = await execute_schedule(schedule.id, chain=make_chain(None))

        body = channels.send_email.call_args_list[0].args[2]
        assert result.provider is None
        assert result.sent_count == 3
        assert "Intro to AI Image Generation" in body
        assert "2026-01-15" in body
        assert "14:00 - 17:00" in body

    @pytest.mark.asyncio
    async def test_falls_back_to_template_when_chain_crashes(
        self, repository, schedule, channels, chain
    ):
        chain.generate.side_effect = RuntimeError("provider SDK exploded")

        result = await execute_schedule(schedule.id, chain=chain)

        assert result.success is True
        assert result.provider is None

    @pytest.mark.asyncio
    async def test_prompt_describes_the_event(
        self, repository, schedule, channels, chain
    ):
        await execute_schedule(schedule.id, chain=chain)

        prompt = chain.generate.call_args.args[0]
        assert "Intro to AI Image Generation" in prompt
        assert "Event reminder" in prompt


class TestFireOnce:
    @pytest.mark.asyncio
    async def test_marks_schedule_fired(self, repository, schedule, channels, chain):
        await execute_schedule(schedule.id, chain=chain)

        stored = await repository.get_schedule(schedule.id)
        assert stored.fired is True
        assert stored.fired_at is not None

    @pytest.mark.asyncio
    async def test_second_run_sends_nothing(
        self, repository, schedule, channels, chain
    ):
        await execute_schedule(schedule.id, chain=chain)
        channels.send_email.reset_mock()

        result = await execute_schedule(schedule.id, chain=chain)

        assert result.success is False
        assert result.reason == "already fired"
        channels.send_email.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_runs_dispatch_once(
        self, repository, schedule, channels, chain
    ):
        first, second = await asyncio.gather(
            execute_schedule(schedule.id, chain=chain),
            execute_schedule(schedule.id, chain=chain),
        )

        assert sorted([first.success, second.success]) == [False, True]
        assert channels.send_email.call_count == 3

    @pytest.mark.asyncio
    async def test_manual_run_ignores_enabled_flag(
        self, repository, schedule, channels, chain
    ):
        await repository.update_schedule(schedule.id, enabled=False)

        result = await execute_schedule(schedule.id, chain=chain)

        assert result.success is True
        assert result.sent_count == 3


class TestAborts:
    @pytest.mark.asyncio
    async def test_unknown_schedule(self, repository, channels, chain):
        result = await execute_schedule("missing", chain=chain)

        assert result.success is False
        assert result.reason == "schedule not found"

    @pytest.mark.asyncio
    async def test_missing_event_leaves_schedule_pending(
        self, repository, schedule, channels, chain
    ):
        repository._events.clear()

        result = await execute_schedule(schedule.id, chain=chain)

        assert result.success is False
        assert result.reason == "event not found"
        assert result.to_dict() == {
            "success": False,
            "sentCount": 0,
            "totalCount": 0,
            "errors": [],
            "reason": "event not found",
        }
        assert (await repository.get_schedule(schedule.id)).fired is False
        channels.send_email.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_confirmed_registrations_leaves_schedule_pending(
        self, repository, schedule, channels, chain
    ):
        repository._registrations = [
            r for r in repository._registrations if r.status.value != "confirmed"
        ]

        result = await execute_schedule(schedule.id, chain=chain)

        assert result.success is False
        assert result.reason == "no confirmed registrations"
        assert (await repository.get_schedule(schedule.id)).fired is False
        chain.generate.assert_not_awaited()


class TestOperatorSummary:
    @pytest.mark.asyncio
    async def test_summary_sent_to_each_operator(
        self, repository, schedule, channels, chain
    ):
        channels.operators.return_value = ["900", "901"]

        await execute_schedule(schedule.id, chain=chain)

        summaries = [
            call.args for call in channels.send_dm.call_args_list
            if call.args[0] in ("900", "901")
        ]
        assert [s[0] for s in summaries] == ["900", "901"]
        assert "sent 3/3" in summaries[0][1].body

    @pytest.mark.asyncio
    async def test_no_summary_for_aborted_dispatch(
        self, repository, schedule, channels, chain
    ):
        channels.operators.return_value = ["900"]
        repository._events.clear()

        await execute_schedule(schedule.id, chain=chain)

        channels.send_dm.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_notify_operators_counts_reached(self, channels):
        channels.operators.return_value = ["900", "901"]
        channels.send_dm.side_effect = [Ok("m"), Err("blocked")]

        reached = await notify_operators(ChatMessage(title="t", body="b"))

        assert reached == 1

    @pytest.mark.asyncio
    async def test_operator_dm_crash_does_not_fail_dispatch(
        self, repository, schedule, channels, chain
    ):
        channels.operators.return_value = ["900"]
        channels.send_dm.side_effect = RuntimeError("gateway")

        result = await execute_schedule(schedule.id, chain=chain)

        assert result.success is True
