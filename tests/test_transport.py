import threading

import pytest

import jazzene.clock
import jazzene.transport


@pytest.fixture
def transport (clock, default_sequence) -> jazzene.transport.Transport:

	"""A transport over the default 16 second sequence, driven by the fake clock."""

	return jazzene.transport.Transport(default_sequence, clock=clock)


def _record (transport: jazzene.transport.Transport, *names: str) -> list:

	"""Collect (event, args) pairs for the named transport events."""

	seen: list = []

	for name in names:
		transport.events.on(name, lambda *args, _name=name: seen.append((_name, args)))

	return seen


def test_empty_transport () -> None:

	"""Without a sequence the transport has nothing to play."""

	transport = jazzene.transport.Transport()

	assert transport.total == 0.0
	transport.play()
	assert not transport.playing
	assert transport.display_time() == "0:00 / 0:00"


def test_play_tick_stop (transport, clock) -> None:

	"""Playback follows the wall clock and stop freezes it."""

	seen = _record(transport, "play", "stop")

	transport.play()
	clock.advance(2.5)
	assert transport.tick().position == pytest.approx(2.5)

	clock.advance(0.5)
	transport.stop()

	assert not transport.playing
	assert transport.position == pytest.approx(3.0)
	assert seen == [("play", (0.0,)), ("stop", (pytest.approx(3.0),))]


def test_stop_policy_rewind (clock, default_sequence) -> None:

	"""The rewind policy returns to zero on stop."""

	transport = jazzene.transport.Transport(default_sequence, jazzene.clock.StopPolicy.REWIND, clock=clock)

	transport.play()
	clock.advance(4.0)
	transport.stop()

	assert transport.position == 0.0


def test_toggle (transport, clock) -> None:

	"""Toggle alternates between play and stop."""

	transport.toggle()
	assert transport.playing

	clock.advance(1.0)
	transport.toggle()
	assert not transport.playing
	assert transport.position == pytest.approx(1.0)


def test_complete_event (transport, clock) -> None:

	"""Reaching the end emits complete once."""

	seen = _record(transport, "complete")

	transport.play()
	clock.advance(30.0)
	transport.tick()
	transport.tick()

	assert seen == [("complete", (16.0,))]
	assert transport.display_time() == "0:16 / 0:16"


def test_wrap_event (transport, clock) -> None:

	"""A loop wrap reports the position before and after."""

	seen = _record(transport, "wrap")

	transport.configure_loop(True, 3.0, 6.0)
	transport.seek(5.5)
	transport.play()
	clock.advance(1.0)
	transport.tick()

	assert len(seen) == 1
	before, after = seen[0][1]
	assert before == pytest.approx(5.5)
	assert after == pytest.approx(3.5)


def test_configure_loop_returns_validated_window (transport) -> None:

	"""An invalid window comes back disabled."""

	assert transport.configure_loop(True, 3.0, 6.0).enabled
	assert not transport.configure_loop(True, 6.0, 3.0).enabled


def test_seek_and_normalized (transport) -> None:

	"""Seek in seconds and through the control both report back."""

	seen = _record(transport, "seek")

	transport.seek(4.0)
	assert transport.normalized == 25.0

	transport.set_normalized(50.0)
	assert transport.position == pytest.approx(8.0)

	transport.seek(100.0)
	assert transport.position == 16.0

	assert [args for _, args in seen] == [(4.0,), (pytest.approx(8.0),), (16.0,)]


def test_click_measure (transport) -> None:

	"""Measures are addressed from zero."""

	transport.click_measure(3)

	assert transport.position == pytest.approx(6.0)


def test_load_sequence_keeps_position (transport, clock, sequence_factory) -> None:

	"""Regeneration keeps the position when it still fits."""

	seen = _record(transport, "sequence", "stop")

	transport.seek(5.0)
	replacement = sequence_factory([(0, 60, 1)], measures=8)
	transport.load_sequence(replacement)

	assert transport.sequence is replacement
	assert transport.position == 5.0
	assert seen == [("sequence", (replacement,))]


def test_load_sequence_mid_playback_without_tick (transport, clock) -> None:

	"""A regeneration landing between ticks keeps the time played so far."""

	transport.play()
	clock.advance(5.0)
	transport.load_sequence(transport.sequence)

	clock.advance(0.001)

	assert transport.tick().position == pytest.approx(5.001)


def test_load_shorter_sequence_clamps (transport, clock, sequence_factory) -> None:

	"""A shorter sequence clamps the position to its end."""

	transport.play()
	clock.advance(12.0)
	transport.tick()

	transport.load_sequence(sequence_factory([(0, 60, 1)], measures=4))

	assert transport.total == 8.0
	assert transport.position == 8.0


def test_load_empty_sequence_stops (transport, clock, sequence_factory) -> None:

	"""An empty sequence stops playback and says so."""

	seen = _record(transport, "stop")

	transport.play()
	clock.advance(1.0)
	transport.load_sequence(sequence_factory([], measures=0))

	assert not transport.playing
	assert transport.position == 0.0
	assert seen == [("stop", (0.0,))]


def test_read_is_consistent (transport) -> None:

	"""read() returns the state with the sequence it belongs to."""

	state, sequence = transport.read()

	assert state.total == sequence.total_seconds


def test_transition_rejects_unknown_event () -> None:

	"""Only transport events can be applied."""

	with pytest.raises(TypeError):
		jazzene.transport.transition(jazzene.clock.initial_state(16.0), "play")


def test_transition_replays () -> None:

	"""Folding the same events over the same state gives the same result."""

	events = [
		jazzene.transport.Play(0.0),
		jazzene.transport.Tick(1.0),
		jazzene.transport.ConfigureLoop(True, 2.0, 4.0),
		jazzene.transport.Tick(3.5),
		jazzene.transport.Tick(4.5),
		jazzene.transport.Seek(10.0, 5.0),
		jazzene.transport.Stop(6.0),
	]

	def replay () -> jazzene.clock.PlaybackState:
		state = jazzene.clock.initial_state(16.0)
		for event in events:
			state = jazzene.transport.transition(state, event)
		return state

	first = replay()

	assert first == replay()
	assert not first.playing
	assert first.position == pytest.approx(11.0)


def test_concurrent_actions_keep_bounds (default_sequence) -> None:

	"""Actions racing from several threads never break the position bounds."""

	transport = jazzene.transport.Transport(default_sequence)
	errors: list = []

	def hammer (offset: int) -> None:
		try:
			for i in range(300):
				action = (i + offset) % 5
				if action == 0:
					transport.play()
				elif action == 1:
					transport.seek(float(i % 20))
				elif action == 2:
					transport.tick()
				elif action == 3:
					transport.set_normalized(float(i % 120))
				else:
					transport.stop()
				state = transport.state
				assert 0.0 <= state.position <= state.total
		except AssertionError as e:
			errors.append(e)

	threads = [threading.Thread(target=hammer, args=(n,)) for n in range(4)]
	for thread in threads:
		thread.start()
	for thread in threads:
		thread.join()

	assert errors == []


@pytest.mark.parametrize("toggles", [40, 41])
def test_concurrent_toggles_each_flip_once (clock, default_sequence, toggles: int) -> None:

	"""Toggles racing from several threads each apply exactly once."""

	transport = jazzene.transport.Transport(default_sequence, clock=clock)
	seen = _record(transport, "play", "stop")
	barrier = threading.Barrier(toggles)

	def press () -> None:
		barrier.wait()
		transport.toggle()

	threads = [threading.Thread(target=press) for _ in range(toggles)]
	for thread in threads:
		thread.start()
	for thread in threads:
		thread.join()

	assert transport.playing == (toggles % 2 == 1)
	assert len(seen) == toggles


def test_toggle_is_one_transition () -> None:

	"""Toggle resolves play or stop from the state it is applied to."""

	state = jazzene.clock.initial_state(16.0)
	state = jazzene.transport.transition(state, jazzene.transport.Toggle(100.0))
	assert state.playing

	state = jazzene.transport.transition(state, jazzene.transport.Toggle(102.0, jazzene.clock.StopPolicy.REWIND))
	assert not state.playing
	assert state.position == 0.0
