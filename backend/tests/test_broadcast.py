from spinwheel.models.game import get_default_config
from spinwheel.services.broadcast import BroadcastHub, build_message


def test_publish_reaches_every_subscriber_in_order(drain):
    hub = BroadcastHub()
    first, second = hub.subscribe(), hub.subscribe()

    assert hub.publish("spin_started", {"player": 1}) == 2
    hub.publish("spin_completed", {"player": 1})

    for subscription in (first, second):
        assert [m["type"] for m in drain(subscription)] == ["spin_started", "spin_completed"]


def test_envelope_is_json_ready():
    message = build_message("config_updated", get_default_config())
    assert message["type"] == "config_updated"
    assert message["data"]["current_page"] == "lottery1"
    assert message["data"]["mode1_options"][0]["text"] == "奖品1"


def test_full_subscriber_is_dropped_without_affecting_others(drain):
    hub = BroadcastHub()
    slow = hub.subscribe(queue_size=1)
    healthy = hub.subscribe()

    hub.publish("a")
    delivered = hub.publish("b")

    assert delivered == 1
    assert hub.subscriber_count == 1
    assert slow.closed
    assert [m["type"] for m in drain(healthy)] == ["a", "b"]


def test_unsubscribe_is_idempotent(drain):
    hub = BroadcastHub()
    subscription = hub.subscribe()
    hub.unsubscribe(subscription)
    hub.unsubscribe(subscription)

    assert hub.subscriber_count == 0
    assert hub.publish("ignored") == 0
    assert drain(subscription) == []


async def test_closed_subscription_wakes_reader():
    hub = BroadcastHub()
    subscription = hub.subscribe()
    hub.publish("last")
    hub.unsubscribe(subscription)

    assert (await subscription.next_message())["type"] == "last"
    assert await subscription.next_message() is None
