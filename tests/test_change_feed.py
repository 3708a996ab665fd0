import asyncio
import threading

from resolvix.services.change_feed import ChangeFeed


def test_subscription_filters_by_table_event_and_column():
    async def scenario():
        feed = ChangeFeed()
        sub = feed.subscribe("chat_messages", ("INSERT",), ticket_id=1)

        feed.publish("chat_messages", "INSERT", {"ticket_id": 2, "message": "other ticket"})
        feed.publish("logs", "INSERT", {"ticket_id": 1})
        feed.publish("chat_messages", "UPDATE", {"ticket_id": 1})
        feed.publish("chat_messages", "INSERT", {"ticket_id": 1, "message": "mine"})

        event = await sub.get(timeout=1)
        assert event.record["message"] == "mine"
        assert await sub.get(timeout=0.05) is None

    asyncio.run(scenario())


def test_publish_from_worker_thread():
    async def scenario():
        feed = ChangeFeed()
        sub = feed.subscribe("logs")
        worker = threading.Thread(target=feed.publish, args=("logs", "INSERT", {"id": 7}))
        worker.start()
        worker.join()
        event = await sub.get(timeout=1)
        assert event.record == {"id": 7}
        assert event.to_sse().startswith(f"id: {event.id}\nevent: logs.insert\n")

    asyncio.run(scenario())


def test_full_queue_drops_subscriber():
    async def scenario():
        feed = ChangeFeed(max_queue_size=1)
        feed.subscribe("logs")
        feed.publish("logs", "INSERT", {"id": 1})
        feed.publish("logs", "INSERT", {"id": 2})
        await asyncio.sleep(0)
        assert feed.subscriber_count == 0

    asyncio.run(scenario())


def test_unsubscribe_stops_delivery():
    async def scenario():
        feed = ChangeFeed()
        sub = feed.subscribe("logs")
        feed.unsubscribe(sub)
        feed.publish("logs", "INSERT", {"id": 1})
        await asyncio.sleep(0)
        assert sub.queue.empty()

    asyncio.run(scenario())
