import logging
import time

import atone
import atone.midi_utils

logging.basicConfig(level=logging.INFO)

# Plays live on the first MIDI output until interrupted.
config = atone.EngineConfig(
	algorithm="ca",
	bpm=100,
	scale="E minor pentatonic",
	rule=110,
	neighbours=0b111,
	height=24,
	boundary="infinite",
	bass="lower_eighth",
	chords="whole",
	lead="upper_eighth",
	percussion="Techno",
	seed=110
)

device_name, midi_out = atone.midi_utils.select_output_device()

if midi_out is None:
	raise SystemExit("No MIDI output available")

engine = atone.Engine(config, midi_out=midi_out)

# Ticks are milliseconds, so playback just follows the wall clock.
start = time.monotonic()

try:
	while True:
		engine.play_until(int((time.monotonic() - start) * 1000))
		time.sleep(0.002)

except KeyboardInterrupt:
	engine.sequencer.panic()
	midi_out.close()
