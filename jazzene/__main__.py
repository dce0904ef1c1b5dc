import argparse
import asyncio
import logging
import typing

import jazzene.chords
import jazzene.config
import jazzene.display
import jazzene.generator
import jazzene.midi_export
import jazzene.midi_out
import jazzene.player
import jazzene.transport
import jazzene.web_ui
import jazzene.worker


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _add_setting_arguments (parser: argparse.ArgumentParser) -> None:

	"""Options shared by every command. Values stay strings; Settings validates them."""

	parser.add_argument("--config", help="YAML settings file (default: ./jazzene.yaml if present)")
	parser.add_argument("--key", help="tonal center, e.g. C, Bb, F#m")
	parser.add_argument("--time", help="time signature, e.g. 4/4 or 3/4")
	parser.add_argument("--bpm", help="tempo in beats per minute (20-400)")
	parser.add_argument("--seed", help="random seed; equal seeds give equal solos")
	parser.add_argument("--measures", help="number of measures to generate (0-256)")
	parser.add_argument("--chords", help="chord progression, e.g. \"| Dm7 G7 | Cmaj7 |\"")
	parser.add_argument("--view", help="display mode: both, lead_sheet or falling_notes")
	parser.add_argument("--loop", action="store_const", const=True, default=None, help="enable the A-B loop")
	parser.add_argument("--loop-a", dest="loop_a", help="loop start in seconds")
	parser.add_argument("--loop-b", dest="loop_b", help="loop end in seconds")
	parser.add_argument("--stop", help="stop behaviour: preserve or rewind")


def build_parser () -> argparse.ArgumentParser:

	parser = argparse.ArgumentParser(prog="jazzene", description="Improvise a jazz solo over a chord progression.")
	commands = parser.add_subparsers(dest="command", required=True)

	generate_parser = commands.add_parser("generate", help="generate a solo and print it or save it as MIDI")
	_add_setting_arguments(generate_parser)
	generate_parser.add_argument("--output", "-o", help="write a standard MIDI file instead of printing")

	play_parser = commands.add_parser("play", help="play a solo with a live status line")
	_add_setting_arguments(play_parser)
	play_parser.add_argument("--midi", action="store_true", help="send notes to a MIDI output (the first available unless --midi-out is given)")
	play_parser.add_argument("--midi-out", dest="midi_out", help="MIDI output device name")
	play_parser.add_argument("--web", action="store_true", help="start the WebSocket bridge")
	play_parser.add_argument("--ws-port", dest="ws_port", type=int, default=8765, help="WebSocket port (default 8765)")

	return parser


def load_settings (args: argparse.Namespace) -> jazzene.config.Settings:

	"""Config file first, then command-line overrides on top.

	Raises:
		jazzene.config.ConfigError: If ``--config`` names a file that cannot be read.
	"""

	settings = jazzene.config.load_config(args.config)

	overrides = {name: getattr(args, name) for name in ("key", "time", "bpm", "seed", "measures", "chords", "view", "loop", "loop_a", "loop_b", "stop")}

	return jazzene.config.Settings.from_mapping(overrides, base=settings)


def _pitch_name (pitch: int) -> str:
	return f"{jazzene.chords.PC_TO_NOTE_NAME[pitch % 12]}{pitch // 12 - 1}"


def print_sequence (sequence: jazzene.generator.GeneratedSequence) -> None:

	"""Print the chord timeline and the notes, one per line."""

	key = sequence.key.name() if sequence.key is not None else "-"
	print(f"Key: {key}  Time: {sequence.time_signature}  {sequence.tempo:g} BPM  {sequence.measures} measures  {len(sequence)} notes")

	if sequence.is_empty():
		print("(empty)")
		return

	print()

	for span in sequence.spans:
		print(f"  measure {span.measure + 1:<3} beat {float(span.start):7.3f}  {span.chord.name()}")

	print()

	beats_per_measure = sequence.time_signature.beats_per_measure

	for note in sequence.notes:
		beat_in_measure = float(note.start) - note.measure * beats_per_measure + 1
		print(
			f"  {note.measure + 1:>3}:{beat_in_measure:<6.3f} {_pitch_name(note.pitch):<4} "
			f"dur {float(note.duration):.3f}  vel {note.velocity:>3}  {note.emphasis}"
		)


def run_generate (args: argparse.Namespace, settings: jazzene.config.Settings) -> int:

	sequence = jazzene.generator.generate_from_settings(settings)

	if args.output:
		jazzene.midi_export.write_midi(sequence, args.output)
	else:
		print_sequence(sequence)

	return 0


async def run_play (args: argparse.Namespace, settings: jazzene.config.Settings) -> int:

	transport = jazzene.transport.Transport(stop_policy=settings.stop)
	worker = jazzene.worker.GenerationWorker(transport)

	await worker.request(settings)
	transport.configure_loop(settings.loop, settings.loop_a, settings.loop_b)

	if transport.total <= 0 and not args.web:
		logger.warning("Nothing to play (empty progression or zero measures).")
		return 0

	looping = transport.state.loop.enabled
	player = jazzene.player.Player(transport, exit_on_complete=not (args.web or looping))

	display = jazzene.display.Display(transport)
	player.events.on("frame", display.update)

	note_output: typing.Optional[jazzene.midi_out.NoteOutput] = None

	if args.midi or args.midi_out:
		_, port = jazzene.midi_out.select_output_device(args.midi_out)
		if port is not None:
			note_output = jazzene.midi_out.NoteOutput(port)
			player.events.on("frame", lambda _: note_output.update(transport.sequence, transport.position, transport.playing))

	web: typing.Optional[jazzene.web_ui.WebUI] = None

	if args.web:
		web = jazzene.web_ui.WebUI(transport, worker, settings, ws_port=args.ws_port)
		await web.start()

	display.start()
	transport.play()

	try:
		await player.run()

	finally:
		transport.stop()
		display.stop()

		if note_output is not None:
			note_output.close()

		if web is not None:
			web.stop()

	return 0


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point for the jazzene command line.
	"""

	args = build_parser().parse_args(argv)

	try:
		settings = load_settings(args)
	except jazzene.config.ConfigError as e:
		logger.error(str(e))
		return 2

	if args.command == "generate":
		return run_generate(args, settings)

	try:
		return asyncio.run(run_play(args, settings))
	except KeyboardInterrupt:
		logger.info("Stopping...")
		return 0


if __name__ == "__main__":
	raise SystemExit(main())
