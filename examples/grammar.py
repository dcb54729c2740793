import logging

import atone
import atone.lsystem

logging.basicConfig(level=logging.INFO)

# Y branches into a rising and a falling copy of itself followed by a rest;
# X (from the rests) becomes a held note one step up.
config = atone.EngineConfig(
	algorithm="lsystem",
	bpm=90,
	scale="D harmonic minor",
	axiom="Y",
	rule1="Y={pY}{mY}X",
	rule2="X=p{F}m",
	generations=5,
	lsystem_end="loop",
	percussion="Bossa Nova",
	instrument="Vibraphone",
	seed=7
)

engine = atone.Engine(config)

assert engine.lsystem_engine is not None
logging.info(f"Expanded grammar: {engine.lsystem_engine.symbols[:80]}...")

engine.render(bars=32, filename="grammar.mid")
