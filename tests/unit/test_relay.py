from fragmentbridge.relay import (
    SESSION_ABORTED_EVENT,
    TOKEN_RECEIVED_EVENT,
    RelayMessage,
    TokenRelay,
)


def test_deliver_then_receive():
    relay = TokenRelay()
    relay.deliver('access_token=abc')
    assert relay.receive(timeout=1) == RelayMessage(TOKEN_RECEIVED_EVENT, 'access_token=abc')


def test_receive_times_out():
    assert TokenRelay().receive(timeout=0.05) is None


def test_notify_aborted():
    relay = TokenRelay()
    relay.notify_aborted('Authentication timeout')
    message = relay.receive(timeout=1)
    assert message.event == SESSION_ABORTED_EVENT
    assert message.payload == 'Authentication timeout'


def test_subscribers_called():
    relay = TokenRelay()
    received = []
    relay.subscribe(received.append)
    relay.deliver('x')
    assert received == [RelayMessage(TOKEN_RECEIVED_EVENT, 'x')]

    relay.unsubscribe(received.append)
    relay.deliver('y')
    assert len(received) == 1


def test_failing_subscriber_does_not_raise(debug_messages):
    relay = TokenRelay(print_debug_fn=debug_messages)
    received = []

    def broken(message):
        raise RuntimeError("no window")

    relay.subscribe(broken)
    relay.subscribe(received.append)
    relay.deliver('x')

    assert len(received) == 1
    assert relay.receive(timeout=1).payload == 'x'
    assert debug_messages.contains("no window")


def test_full_channel_drops_message(debug_messages):
    relay = TokenRelay(max_pending=1, print_debug_fn=debug_messages)
    relay.deliver('first')
    relay.deliver('second')

    assert relay.receive(timeout=1).payload == 'first'
    assert relay.receive(timeout=0.05) is None
    assert debug_messages.contains("relay channel is full")


def test_closed_channel_drops_message(debug_messages):
    relay = TokenRelay(print_debug_fn=debug_messages)
    received = []
    relay.subscribe(received.append)
    relay.close()
    relay.deliver('x')

    assert received == []
    assert relay.receive(timeout=0.05) is None
    assert debug_messages.contains("relay channel is closed")
