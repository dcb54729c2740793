import logging

import atone

logging.basicConfig(level=logging.INFO)

# A six-bar energy arc: busy, then steady, then building again.
config = atone.EngineConfig(
	algorithm="riff",
	bpm=112,
	scale="A minor",
	riffs="classic",
	numbars=6,
	percussion="Rock",
	instrument="Overdriven Guitar",
	seed=2024
)

engine = atone.Engine(config)
engine.render(bars=24, filename="riffs.mid")
