from datetime import timedelta

import pytest

from reliefhub.core.errors import DuplicateIdError, InvalidChannelError, NotFoundError
from reliefhub.models.notification import NotificationChannel, NotificationCreate
from reliefhub.services.collaborators import AlertDispatcher, LoggingAlertDispatcher
from reliefhub.services.notification_store import NotificationStore

from tests.conftest import NOW, FakeClock


def alert(title="Flood warning", channel="emergency", **kwargs):
    return NotificationCreate(title=title, body="Move to higher ground", channel=channel, **kwargs)


class BrokenDispatcher(AlertDispatcher):
    def deliver(self, notification, urgency):
        raise ConnectionError("push service unreachable")


def test_unread_count_after_mark_read_is_idempotent(notifications):
    pushed = [notifications.push(alert(f"Alert {i}")) for i in range(3)]
    assert notifications.unread_count() == 3

    assert notifications.mark_read(pushed[0].id) is True
    assert notifications.unread_count() == 2

    assert notifications.mark_read(pushed[0].id) is False
    assert notifications.unread_count() == 2
    assert notifications.get(pushed[0].id).read is True


def test_mark_read_unknown_id(notifications):
    with pytest.raises(NotFoundError):
        notifications.mark_read("missing")


def test_invalid_channel_is_rejected(notifications):
    with pytest.raises(InvalidChannelError):
        notifications.push(alert(channel="carrier-pigeon"))
    assert notifications.unread_count() == 0
    assert len(notifications) == 0


def test_push_accepts_every_channel(notifications):
    for channel in NotificationChannel:
        stored = notifications.push(alert(channel=channel.value))
        assert stored.channel == channel
        assert stored.read is False


def test_duplicate_id_is_rejected(notifications):
    notifications.push(alert(id="n1"))
    with pytest.raises(DuplicateIdError):
        notifications.push(alert(id="n1"))
    assert notifications.unread_count() == 1


def test_list_is_reverse_chronological_regardless_of_channel():
    clock = FakeClock()
    store = NotificationStore(clock=clock)

    first = store.push(alert("first", channel="emergency"))
    clock.now = NOW + timedelta(minutes=5)
    second = store.push(alert("second", channel="achievement"))
    clock.now = NOW + timedelta(minutes=10)
    third = store.push(alert("third", channel="relief-update"))

    assert [n.id for n in store.list()] == [third.id, second.id, first.id]


def test_identical_timestamps_list_newest_push_first(notifications):
    a = notifications.push(alert("a"))
    b = notifications.push(alert("b"))
    assert [n.id for n in notifications.list()] == [b.id, a.id]


def test_list_filters(notifications):
    e = notifications.push(alert("e", channel="emergency"))
    v = notifications.push(alert("v", channel="volunteer-request"))
    notifications.mark_read(e.id)

    assert [n.id for n in notifications.list(channel="volunteer-request")] == [v.id]
    assert [n.id for n in notifications.list(unread_only=True)] == [v.id]
    with pytest.raises(InvalidChannelError):
        notifications.list(channel="sms")


def test_mark_all_read(notifications):
    for i in range(4):
        notifications.push(alert(f"Alert {i}"))
    notifications.mark_read(notifications.list()[0].id)

    assert notifications.mark_all_read() == 3
    assert notifications.unread_count() == 0
    assert notifications.mark_all_read() == 0


@pytest.mark.parametrize(
    "channel, urgency",
    [("emergency", "max"), ("relief-update", "high"), ("volunteer-request", "default"), ("achievement", "low")],
)
def test_urgency_by_channel(channel, urgency):
    assert NotificationStore.urgency_for(channel) == urgency


def test_dispatcher_receives_urgency_hint():
    dispatcher = LoggingAlertDispatcher()
    store = NotificationStore(dispatcher=dispatcher)

    stored = store.push_emergency("Dam breach", "Evacuate low-lying areas")

    assert dispatcher.delivered == [(stored, "max")]


def test_dispatcher_failure_does_not_fail_push():
    store = NotificationStore(dispatcher=BrokenDispatcher())

    stored = store.push_relief_update("New shelter", "Nehru Stadium is open")

    assert store.get(stored.id) == stored
    assert store.unread_count() == 1


def test_events_published_for_push_and_first_read_only(notifications):
    events = []
    notifications.subscribe(events.append)

    stored = notifications.push(alert())
    notifications.mark_read(stored.id)
    notifications.mark_read(stored.id)

    assert [(e.kind, e.entity_id) for e in events] == [("pushed", stored.id), ("read", stored.id)]
