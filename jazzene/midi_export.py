"""Standard MIDI file export."""

import logging
import typing

import mido

import jazzene.constants

if typing.TYPE_CHECKING:
	import jazzene.generator


logger = logging.getLogger(__name__)


def build_midi_file (sequence: "jazzene.generator.GeneratedSequence", channel: int = 0) -> mido.MidiFile:

	"""Render a sequence as a type 1 ``mido.MidiFile``.

	The single track starts with tempo and time signature meta messages,
	followed by the notes at 480 ticks per beat. Beat positions are exact
	fractions, so ticks are rounded only once, from the absolute position.
	"""

	ticks_per_beat = jazzene.constants.MIDI_TICKS_PER_BEAT

	mid = mido.MidiFile(type=1)
	mid.ticks_per_beat = ticks_per_beat

	track = mido.MidiTrack()
	mid.tracks.append(track)

	track.append(mido.MetaMessage('track_name', name='jazzene solo', time=0))
	track.append(mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(sequence.tempo), time=0))
	track.append(mido.MetaMessage(
		'time_signature',
		numerator = sequence.time_signature.beats_per_measure,
		denominator = sequence.time_signature.beat_unit,
		time = 0
	))

	events: typing.List[typing.Tuple[int, int, mido.Message]] = []

	for note in sequence.notes:

		on_tick = round(note.start * ticks_per_beat)
		off_tick = max(on_tick + 1, round(note.end * ticks_per_beat))

		# Note offs sort before note ons at the same tick so repeated pitches retrigger.
		events.append((on_tick, 1, mido.Message('note_on', channel=channel, note=note.pitch, velocity=note.velocity)))
		events.append((off_tick, 0, mido.Message('note_off', channel=channel, note=note.pitch, velocity=0)))

	events.sort(key=lambda event: (event[0], event[1]))

	last_tick = 0

	for tick, _, message in events:
		message.time = tick - last_tick
		track.append(message)
		last_tick = tick

	end_tick = round(sequence.total_beats * ticks_per_beat)
	track.append(mido.MetaMessage('end_of_track', time=max(0, end_tick - last_tick)))

	return mid


def write_midi (sequence: "jazzene.generator.GeneratedSequence", filename: str, channel: int = 0) -> None:

	"""Write a sequence to a standard MIDI file.

	Parameters:
		sequence: The generated sequence.
		filename: Destination path, usually ending in ``.mid``.
		channel: MIDI channel (0-15) for the notes.

	Raises:
		OSError: If the file cannot be written.
	"""

	mid = build_midi_file(sequence, channel)

	logger.info(f"Saving {len(sequence)} notes to {filename}...")

	mid.save(filename)

	logger.info(f"Saved {filename}")
