import threading
import time

import pytest

from conftest import OpenRandom

WINNING_PATH = ("right", "right", "down", "down")


def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def _ticker_threads():
    return [t for t in threading.enumerate() if t.name == "maze-ticker"]


def test_autotick_advances_clock_while_playing(main_module):
    with main_module.new_session(5, rng=OpenRandom(), tick_seconds=0.01) as session:
        assert session.ticking
        assert _wait_for(lambda: session.elapsed_seconds >= 3)


def test_pause_releases_ticker_and_freezes_clock(main_module):
    with main_module.new_session(5, rng=OpenRandom(), tick_seconds=0.01) as session:
        assert _wait_for(lambda: session.elapsed_seconds >= 1)
        main_module.toggle_pause(session)
        assert not session.ticking

        frozen = session.elapsed_seconds
        time.sleep(0.05)
        assert session.elapsed_seconds == frozen

        main_module.toggle_pause(session)
        assert session.ticking
        assert _wait_for(lambda: session.elapsed_seconds > frozen)


def test_win_releases_ticker_and_freezes_clock(main_module):
    with main_module.new_session(5, rng=OpenRandom(), tick_seconds=0.01) as session:
        assert _wait_for(lambda: session.elapsed_seconds >= 1)
        for direction in WINNING_PATH:
            main_module.move_intent(session, direction)

        assert session.state is main_module.SessionState.WON
        assert not session.ticking
        frozen = session.elapsed_seconds
        time.sleep(0.05)
        assert session.elapsed_seconds == frozen


def test_repeated_restarts_do_not_accumulate_tickers(main_module):
    baseline = len(_ticker_threads())
    session = main_module.new_session(6, tick_seconds=0.01)
    for _ in range(5):
        main_module.restart(session)
    main_module.end_session(session)

    assert not session.ticking
    assert _wait_for(lambda: len(_ticker_threads()) <= baseline)


def test_end_session_stops_ticking(main_module):
    session = main_module.new_session(5, rng=OpenRandom(), tick_seconds=0.01)
    assert _wait_for(lambda: session.elapsed_seconds >= 1)
    main_module.end_session(session)

    frozen = session.elapsed_seconds
    time.sleep(0.05)
    assert session.elapsed_seconds == frozen
    assert not session.ticking


def test_win_records_a_single_run(main_module, make_session, repo):
    session = make_session(5, rng=OpenRandom(), runs=repo)
    session.tick()
    session.tick()
    for direction in WINNING_PATH:
        main_module.move_intent(session, direction)
    main_module.move_intent(session, "up")
    main_module.toggle_pause(session)

    runs = repo.top_runs(size=5)
    assert len(runs) == 1
    assert runs[0]["elapsed_seconds"] == 2
    assert runs[0]["moves"] == 4


def test_failing_run_store_does_not_undo_win(main_module, make_session):
    class BrokenRuns:
        def record_run(self, **kwargs):
            raise RuntimeError("disk full")

    session = make_session(5, rng=OpenRandom(), runs=BrokenRuns())
    for direction in WINNING_PATH:
        main_module.move_intent(session, direction)

    assert session.state is main_module.SessionState.WON


@pytest.fixture
def shell_module():
    import shell

    return shell


def test_shell_lists_the_five_games(shell_module):
    ids = [entry.id for entry in shell_module.Shell().games()]
    assert ids == ["maze", "wheel", "match", "speaking", "anagram"]


def test_shell_launches_maze_and_returns_home(shell_module, main_module):
    home = shell_module.Shell(maze_size=6, autotick=False)
    assert home.current_id == "home"

    session = home.launch("maze")
    assert isinstance(session, main_module.MazeSession)
    assert home.current_id == "maze"
    assert session.size == 6

    home.return_home()
    assert session.closed
    assert home.current is None
    assert home.current_id == "home"


def test_shell_launching_another_game_closes_the_maze(shell_module):
    home = shell_module.Shell(autotick=False)
    session = home.launch("maze")

    class Wheel:
        closed = False

        def close(self):
            self.closed = True

    home.register("wheel", Wheel)
    wheel = home.launch("wheel")

    assert session.closed
    assert home.current is wheel
    home.return_home()
    assert wheel.closed


def test_shell_rejects_unknown_or_unregistered_games(shell_module):
    home = shell_module.Shell(autotick=False)
    with pytest.raises(shell_module.UnknownGameError):
        home.launch("tetris")
    with pytest.raises(shell_module.UnknownGameError):
        home.launch("anagram")
    with pytest.raises(shell_module.UnknownGameError):
        home.register("tetris", lambda: None)
