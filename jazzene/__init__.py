"""
Jazzene - a jazz improvisation generator with a synchronized playback transport.

Give it a chord progression and it improvises a solo line over the changes:
chord tones on the strong beats, scale and chromatic neighbour tones in
between, swung rhythms chosen per measure, and melodic motion kept singable
by a bounded-leap voice. Every decision comes from one seeded random
generator, so the same progression, parameters and seed always give the same
solo.

What it does:

- **Chord progressions as text.** Absolute symbols (``Cm7``, ``F#m7b5``,
  ``G7b9``, ``C7/E``) or roman numerals relative to the key (``IIm7 V7
  Imaj7``, ``bVII7``). ``|`` marks bars, ``%`` repeats the previous chord,
  and anything unreadable is skipped with a warning.
- **Deterministic improvisation.** ``generate()`` is a pure function of the
  progression, key, tempo, time signature, measure count and seed. Beat
  positions are exact fractions, so nothing drifts.
- **A transport you can trust.** Play, stop, seek, A-B loop and measure
  navigation share one authoritative position derived from wall-clock
  deltas. Transitions are pure functions, applied under a lock.
- **Outputs.** A live terminal status line, a WebSocket bridge for a
  browser front end, live MIDI out and standard MIDI file export.

Minimal example:

    ```python
    import jazzene

    settings = jazzene.Settings.from_query("key=Bb&bpm=160&chords=Cm7 F7 Bbmaj7 Ebmaj7")
    sequence = jazzene.generate_from_settings(settings)

    transport = jazzene.Transport(sequence)
    transport.play()
    print(transport.display_time())   # "0:00 / 0:12"
    ```

Or from the command line::

    python -m jazzene generate --key Bb --chords "Cm7 F7 Bbmaj7 Ebmaj7" --output solo.mid
    python -m jazzene play --bpm 140 --loop --loop-a 2 --loop-b 6

Package-level exports: ``Settings``, ``Transport``, ``GenerationWorker``,
``generate``, ``generate_from_settings``, ``parse_progression``, ``parse_key``.
"""

import jazzene.chords
import jazzene.config
import jazzene.generator
import jazzene.progression
import jazzene.transport
import jazzene.worker


Settings = jazzene.config.Settings
Transport = jazzene.transport.Transport
GenerationWorker = jazzene.worker.GenerationWorker
generate = jazzene.generator.generate
generate_from_settings = jazzene.generator.generate_from_settings
parse_progression = jazzene.progression.parse_progression
parse_key = jazzene.chords.parse_key
