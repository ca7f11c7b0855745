from __future__ import annotations

import asyncio

import pytest

from uri_handoff.domain.errors import InstallError
from uri_handoff.domain.messages import Message, PackageRecord, SubscriberRecord
from uri_handoff.ports.notification import Severity
from uri_handoff.services.activation import ResolutionAction, ResolutionState, plan_resolution

_RECORD = SubscriberRecord(id="foo.bar", name="bar", display_name="Foo Bar")
_PACKAGE = PackageRecord(id="foo.bar", name="bar", display_name="Foo Bar")


@pytest.mark.parametrize(
    ("installed", "enabled", "installable", "expected"),
    [
        (_RECORD, True, None, ResolutionAction.RESTART),
        (_RECORD, True, _PACKAGE, ResolutionAction.RESTART),
        (_RECORD, False, None, ResolutionAction.ENABLE_AND_RESTART),
        (None, False, _PACKAGE, ResolutionAction.INSTALL),
        (None, False, None, ResolutionAction.DROP),
    ],
)
def test_plan_resolution_is_a_pure_policy(installed, enabled, installable, expected) -> None:
    assert plan_resolution(installed, enabled, installable) is expected


def _resolve(harness, uri: str = "app://foo.bar/open"):
    async def scenario():
        return await harness.service.coordinator.resolve(Message(uri), "foo.bar")

    return asyncio.run(scenario())


def _carried(harness) -> Message | None:
    return harness.service.carry.consume()


def test_installed_enabled_subscriber_restarts_after_consent(harness) -> None:
    harness.resolver.installed["foo.bar"] = _RECORD

    outcome = _resolve(harness)

    assert outcome.action is ResolutionAction.RESTART
    assert outcome.states == [
        ResolutionState.UNRESOLVED,
        ResolutionState.CONFIRM_ACTION,
        ResolutionState.RESTARTING,
    ]
    assert harness.restart.calls == 1
    assert harness.confirmation.prompts[0]["primary_label"] == "&&Restart and Open"
    assert "Foo Bar" in harness.confirmation.prompts[0]["message"]
    assert _carried(harness) == Message("app://foo.bar/open")


def test_declined_restart_has_no_effect(harness) -> None:
    harness.resolver.installed["foo.bar"] = _RECORD
    harness.confirmation.answer = False

    outcome = _resolve(harness)

    assert outcome.state is ResolutionState.DECLINED
    assert harness.restart.calls == 0
    assert _carried(harness) is None
    assert harness.notifications.notifications == []


def test_disabled_subscriber_is_enabled_then_restarted(harness) -> None:
    harness.resolver.installed["foo.bar"] = _RECORD
    harness.resolver.disabled.add("foo.bar")

    outcome = _resolve(harness)

    assert outcome.action is ResolutionAction.ENABLE_AND_RESTART
    assert outcome.states[-2:] == [ResolutionState.ENABLING, ResolutionState.RESTARTING]
    assert harness.resolver.enabled_calls == [("foo.bar", True)]
    assert harness.restart.calls == 1
    assert harness.confirmation.prompts[0]["primary_label"] == "&&Enable and Open"
    assert _carried(harness) == Message("app://foo.bar/open")


def test_declined_enable_leaves_subscriber_disabled(harness) -> None:
    harness.resolver.installed["foo.bar"] = _RECORD
    harness.resolver.disabled.add("foo.bar")
    harness.confirmation.answer = False

    outcome = _resolve(harness)

    assert outcome.state is ResolutionState.DECLINED
    assert harness.resolver.enabled_calls == []
    assert harness.restart.calls == 0


def test_missing_subscriber_without_package_is_dropped_silently(harness) -> None:
    outcome = _resolve(harness)

    assert outcome.action is ResolutionAction.DROP
    assert outcome.state is ResolutionState.DROPPED
    assert harness.confirmation.prompts == []
    assert harness.notifications.notifications == []
    assert harness.restart.calls == 0


def test_install_success_offers_restart_action_on_progress_notification(harness) -> None:
    harness.resolver.installable["foo.bar"] = _PACKAGE

    outcome = _resolve(harness)

    assert outcome.state is ResolutionState.AWAITING_RESTART_CONFIRM
    assert harness.resolver.installed_packages == ["foo.bar"]
    assert harness.restart.calls == 0
    assert harness.confirmation.prompts[0]["primary_label"] == "&&Install"

    [notification] = harness.notifications.notifications
    assert notification.in_progress is False
    assert notification.severity is Severity.INFO
    assert notification.message == "Would you like to restart the host and open the URI 'app://foo.bar/open'?"
    [action] = notification.actions
    assert action.label == "Restart and Open"

    asyncio.run(action.run())
    assert harness.restart.calls == 1
    assert _carried(harness) == Message("app://foo.bar/open")


def test_install_progress_is_indeterminate_while_installing(harness) -> None:
    harness.resolver.installable["foo.bar"] = _PACKAGE
    seen: list[tuple[str, bool]] = []

    def on_install(package: PackageRecord) -> None:
        notification = harness.notifications.notifications[-1]
        seen.append((notification.message, notification.in_progress))

    harness.resolver.on_install = on_install
    _resolve(harness)

    assert seen == [("Installing subscriber 'Foo Bar'...", True)]


def test_install_success_after_notification_closed_uses_sticky_prompt(harness) -> None:
    harness.resolver.installable["foo.bar"] = _PACKAGE
    harness.resolver.on_install = lambda _package: harness.notifications.notifications[-1].close()

    outcome = _resolve(harness)

    assert outcome.state is ResolutionState.AWAITING_RESTART_CONFIRM
    progress, prompt = harness.notifications.notifications
    assert progress.actions == []
    assert prompt.sticky is True
    assert [action.label for action in prompt.actions] == ["Restart and Open"]
    assert harness.notifications.pending_actions() == prompt.actions


def test_install_failure_is_reported_on_progress_notification(harness) -> None:
    harness.resolver.installable["foo.bar"] = _PACKAGE
    harness.resolver.install_error = InstallError("gallery unreachable")

    outcome = _resolve(harness)

    assert outcome.state is ResolutionState.FAILED
    assert outcome.error == "gallery unreachable"
    [notification] = harness.notifications.notifications
    assert notification.severity is Severity.ERROR
    assert notification.message == "gallery unreachable"
    assert notification.in_progress is False
    assert notification.actions == []
    assert harness.restart.calls == 0
    assert _carried(harness) is None


def test_install_failure_after_close_raises_standalone_error(harness) -> None:
    harness.resolver.installable["foo.bar"] = _PACKAGE
    harness.resolver.install_error = RuntimeError("disk full")
    harness.resolver.on_install = lambda _package: harness.notifications.notifications[-1].close()

    outcome = _resolve(harness)

    assert outcome.state is ResolutionState.FAILED
    progress, error = harness.notifications.notifications
    assert progress.severity is Severity.INFO
    assert error.severity is Severity.ERROR
    assert error.message == "disk full"


def test_declined_install_does_not_install(harness) -> None:
    harness.resolver.installable["foo.bar"] = _PACKAGE
    harness.confirmation.answer = False

    outcome = _resolve(harness)

    assert outcome.state is ResolutionState.DECLINED
    assert harness.resolver.installed_packages == []
    assert harness.notifications.notifications == []


def test_router_records_background_outcome(harness) -> None:
    harness.resolver.installed["foo.bar"] = _RECORD

    async def scenario() -> bool:
        handled = await harness.service.route(Message("app://foo.bar/open"))
        await harness.service.settle()
        return handled

    assert asyncio.run(scenario()) is True
    assert harness.service.router.outcomes[-1].state is ResolutionState.RESTARTING
    assert harness.restart.calls == 1


def test_resolver_failure_in_background_is_notified_not_raised(harness) -> None:
    async def broken(address: str) -> SubscriberRecord | None:
        raise ConnectionError("catalog offline")

    harness.resolver.get_installed = broken

    async def scenario() -> bool:
        handled = await harness.service.route(Message("app://foo.bar/open"))
        await harness.service.settle()
        return handled

    assert asyncio.run(scenario()) is True
    [notification] = harness.notifications.notifications
    assert notification.severity is Severity.ERROR
    assert "catalog offline" in notification.message
