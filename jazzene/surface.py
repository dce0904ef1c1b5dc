"""Labeled rendering surface.

A renderer (the web page, the terminal display) binds to regions by these
stable labels. :func:`snapshot` gathers everything those regions show into
one JSON-ready dict keyed by the same labels, taken from a single consistent
read of the transport.
"""

import typing

import jazzene.loop
import jazzene.seek
import jazzene.time_format

if typing.TYPE_CHECKING:
	import jazzene.transport


LEAD_SHEET = "lead sheet"
VISUALIZATION = "visualization"
FALLING_NOTES = "falling notes"
PLAYBACK_POSITION = "playback position"
TIME_DISPLAY = "time display"

# Labels of the settings controls.
SETTING_LABELS = {
	"key": "key",
	"time": "time signature",
	"bpm": "bpm",
	"seed": "seed",
	"measures": "measures",
	"view": "display mode",
	"loop": "enable A-B loop",
	"loop_a": "A loop time",
	"loop_b": "B loop time",
}

# How many seconds ahead of the playhead the falling-notes region shows.
LOOKAHEAD_SECONDS = 4.0


def measure_label (number: int) -> str:

	"""Return the label of a measure region. ``number`` is one-based, as displayed."""

	return f"measure {number}"


def snapshot (transport: "jazzene.transport.Transport", lookahead: float = LOOKAHEAD_SECONDS) -> typing.Dict[str, typing.Any]:

	"""Describe what every labeled region shows right now.

	Parameters:
		transport: The transport to read.
		lookahead: Seconds past the playhead covered by the falling-notes region.

	Returns:
		A dict keyed by region label:

		- ``"time display"``: the ``"M:SS / M:SS"`` text.
		- ``"playback position"``: ``value`` in ``[0, 100]`` and ``enabled``
		  (False when there is nothing to play).
		- ``"lead sheet"``: one entry per measure with its ``label``, chord
		  names, start in seconds, and whether the playhead is in it.
		- ``"falling notes"``: notes sounding between the playhead and the
		  lookahead horizon, clipped at the loop end when looping.
		- ``"visualization"``: playing flag, position, current chord, and the
		  loop window with whether the playhead is inside it.
	"""

	state, sequence = transport.read()
	position = state.position

	current_measure = sequence.measure_at(position) if sequence.measures > 0 else None

	measures: typing.List[typing.Dict[str, typing.Any]] = []

	for measure in range(sequence.measures):
		chords = [span.chord.name() for span in sequence.spans if span.measure == measure and span.duration > 0]
		measures.append({
			"label": measure_label(measure + 1),
			"measure": measure,
			"chords": chords,
			"start": sequence.measure_start_seconds(measure),
			"current": measure == current_measure,
		})

	horizon = position + max(0.0, lookahead)
	if state.loop.enabled and position <= state.loop.b:
		horizon = min(horizon, state.loop.b)

	visible = jazzene.loop.truncate_for_wrap(sequence.notes_between(position, horizon), state.loop, sequence)

	falling = [
		{
			"pitch": note.pitch,
			"start": sequence.beats_to_seconds(note.start),
			"duration": sequence.beats_to_seconds(note.duration),
			"velocity": note.velocity,
			"emphasis": note.emphasis,
		}
		for note in visible
	]

	chord = sequence.chord_at(position)

	return {
		TIME_DISPLAY: jazzene.time_format.format_time(position, state.total),
		PLAYBACK_POSITION: {
			"value": jazzene.seek.get_normalized(state),
			"enabled": state.total > 0,
		},
		LEAD_SHEET: measures,
		FALLING_NOTES: falling,
		VISUALIZATION: {
			"playing": state.playing,
			"position": position,
			"total": state.total,
			"chord": chord.name() if chord is not None else None,
			"loop": {"enabled": state.loop.enabled, "a": state.loop.a, "b": state.loop.b, "active": state.loop.contains(position)},
		},
	}


def click_measure (transport: "jazzene.transport.Transport", number: int) -> None:

	"""Handle a click on the ``measure N`` region (``number`` is one-based)."""

	transport.click_measure(number - 1)
