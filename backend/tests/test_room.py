import threading

from app.models.room import Room


def test_distinct_joins_are_counted_once():
    room = Room("lobby")
    joined = []
    room.user_joined.subscribe(joined.append)

    for user in ("alice", "bob", "alice", "carol", "bob"):
        room.join(user)

    assert sorted(room.list_members()) == ["alice", "bob", "carol"]
    assert joined == ["alice", "bob", "carol"]


def test_exit_emits_even_for_non_members():
    room = Room("lobby")
    left = []
    room.user_left.subscribe(left.append)
    room.join("alice")

    room.exit("alice")
    room.exit("ghost")

    assert left == ["alice", "ghost"]
    assert room.is_empty()


def test_add_message_without_members_still_records_and_emits():
    room = Room("empty")
    seen = []
    room.new_message.subscribe(seen.append)

    room.add_message({"text": "hello?"})

    assert room.messages == [{"text": "hello?"}]
    assert seen == [{"text": "hello?"}]


def test_messages_keep_insertion_order():
    room = Room("lobby")
    for i in range(5):
        room.add_message({"n": i})

    assert [m["n"] for m in room.messages] == [0, 1, 2, 3, 4]


def test_history_limit_discards_oldest():
    room = Room("lobby", history_limit=2)
    for text in ("one", "two", "three"):
        room.add_message(text)

    assert room.messages == ["two", "three"]


def test_listener_can_reenter_the_room():
    room = Room("lobby")
    room.join("alice")
    # the lock is re-entrant, so a listener may read room state
    snapshots = []
    room.user_joined.subscribe(lambda _user: snapshots.append(sorted(room.list_members())))

    room.join("bob")

    assert snapshots == [["alice", "bob"]]


def test_events_across_feeds_follow_mutation_order():
    room = Room("lobby")
    log = []
    room.user_joined.subscribe(lambda user: log.append(("join", user)))
    room.user_left.subscribe(lambda user: log.append(("exit", user)))
    room.new_message.subscribe(lambda msg: log.append(("msg", msg)))

    room.join("alice")
    room.add_message("hi")
    room.exit("alice")

    assert log == [("join", "alice"), ("msg", "hi"), ("exit", "alice")]


def test_concurrent_posts_reach_listeners_in_one_order():
    room = Room("lobby")
    first, second = [], []
    room.new_message.subscribe(first.append)
    room.new_message.subscribe(second.append)
    barrier = threading.Barrier(4)

    def post(sender):
        barrier.wait()
        for i in range(50):
            room.add_message((sender, i))

    threads = [threading.Thread(target=post, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(first) == 200
    assert first == second
    assert room.messages == first
