import pytest

from runroute.companion import CallbackChannel, CompanionLink, MessageChannel, QueueChannel


class TestChannels:
    def test_closed_channel_drops(self):
        channel = QueueChannel()
        assert not channel.send({"a": 1})
        assert channel.drain() == []

    def test_open_close_lifecycle(self):
        channel = QueueChannel()
        channel.open()
        assert channel.send({"a": 1})
        channel.close()
        assert not channel.send({"a": 2})
        assert channel.drain() == [{"a": 1}]

    def test_context_manager(self):
        with QueueChannel() as channel:
            assert channel.is_open
        assert not channel.is_open

    def test_full_queue_keeps_newest(self):
        channel = QueueChannel(maxsize=2)
        channel.open()
        for i in range(4):
            channel.send({"n": i})
        assert channel.drain() == [{"n": 2}, {"n": 3}]

    def test_callback_channel(self):
        received = []
        with CallbackChannel(received.append) as channel:
            channel.send({"haptic": "success"})
        assert received == [{"haptic": "success"}]

    def test_base_channel_needs_delivery(self):
        channel = MessageChannel()
        channel.open()
        with pytest.raises(NotImplementedError):
            channel.send({})


class TestCompanionLink:
    def test_run_state_message(self):
        channel = QueueChannel()
        channel.open()
        link = CompanionLink(channel, clock=lambda: 1234.5)

        assert link.send_run_state(True, 1500.0, 540.0, 6.0, "On Pace", 5000, 1800)
        assert channel.drain() == [{
            "isRunning": True,
            "distance": 1500.0,
            "elapsedTime": 540.0,
            "currentPace": 6.0,
            "paceStatus": "On Pace",
            "targetDistance": 5000,
            "targetTime": 1800,
            "timestamp": 1234.5,
        }]

    def test_haptic(self):
        channel = QueueChannel()
        channel.open()
        assert CompanionLink(channel).send_haptic("success")
        assert channel.drain() == [{"haptic": "success"}]

    def test_nothing_sent_before_open(self):
        channel = QueueChannel()
        link = CompanionLink(channel)
        assert not link.send_haptic("success")
        assert not link.send_run_state(False, 0, 0, 0, "On Pace", 0, 0)
        assert channel.drain() == []
