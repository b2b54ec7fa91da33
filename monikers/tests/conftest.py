"""
Pytest fixtures for Monikers tests.
"""

import pytest

from ..config import EnvironmentSettings
from ..engine_core.events import EventBus, GameEvent
from ..engine_core.timer import ManualScheduler
from ..cards.pool import CardPool
from ..session.game_loop import GameLoop
from ..session.review import ReviewWorkflow
from ..storage.store import MemoryStore
from ..api.service import APIService


def keep_order(items):
    """Deterministic 'shuffle' that leaves the list as it is."""


def write_seed_dir(path, base_count=25, family_count=12):
    """Create base/family seed files with numbered card texts."""
    path.mkdir(parents=True, exist_ok=True)
    base = [f"Base Card {i:02d}" for i in range(1, base_count + 1)]
    family = [f"Family Card {i:02d}" for i in range(1, family_count + 1)]
    (path / "base_cards.txt").write_text("\n".join(base) + "\n", encoding="utf-8")
    (path / "family_cards.txt").write_text("\n".join(family) + "\n", encoding="utf-8")
    return path


def play_until_game_over(loop: GameLoop):
    """Guess every card of every round, one turn per round."""
    while not loop.session.is_game_over:
        assert loop.start_turn()
        while loop.correct_guess():
            pass


class EventRecorder:
    """Collects published events for assertions."""

    def __init__(self, bus: EventBus):
        self.events = []
        for event in GameEvent:
            bus.subscribe(event, self._recorder(event))

    def _recorder(self, event):
        def record(**payload):
            self.events.append((event, payload))
        return record

    def names(self):
        return [event for event, _ in self.events]

    def of(self, event):
        return [payload for name, payload in self.events if name is event]


@pytest.fixture
def seed_dir(tmp_path):
    """Seed directory with 25 base cards and 12 family cards."""
    return write_seed_dir(tmp_path / "seeds")


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(bus) -> EventRecorder:
    return EventRecorder(bus)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def pool(bus, seed_dir) -> CardPool:
    card_pool = CardPool(bus=bus, seed_dir=seed_dir)
    card_pool.reload(notify=False)
    return card_pool


@pytest.fixture
def loop(pool, bus, scheduler) -> GameLoop:
    """Game loop with a manual clock and no shuffling."""
    return GameLoop(pool, bus=bus, scheduler=scheduler, shuffle=keep_order)


@pytest.fixture
def make_loop(tmp_path, bus, scheduler):
    """Factory for a game loop over a pool of a given size."""
    def factory(pool_size=25, cards_per_game=20, shuffle=keep_order):
        seeds = write_seed_dir(tmp_path / f"seeds_{pool_size}", base_count=pool_size)
        card_pool = CardPool(bus=bus, seed_dir=seeds)
        card_pool.reload(notify=False)
        return GameLoop(
            card_pool,
            bus=bus,
            scheduler=scheduler,
            shuffle=shuffle,
            cards_per_game=cards_per_game,
        )
    return factory


@pytest.fixture
def review(loop, pool) -> ReviewWorkflow:
    return ReviewWorkflow(loop, pool)


@pytest.fixture
def env_settings(tmp_path, seed_dir) -> EnvironmentSettings:
    return EnvironmentSettings(
        state_path=tmp_path / "state.json",
        seed_dir=seed_dir,
    )


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def service(env_settings, store, scheduler) -> APIService:
    return APIService(
        settings=env_settings,
        store=store,
        scheduler=scheduler,
        shuffle=keep_order,
    )
