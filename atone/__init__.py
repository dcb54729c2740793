"""
Atone - a generative MIDI composition engine for Python.

Atone writes music one bar at a time, always a bar ahead of playback, from
one of three generators:

- **Riffs.** A catalog of short melodic templates is stitched into bars,
  each riff chosen to start near the last note played and thinned into
  holds and rests along an energy arc.
- **Grammar (L-system).** An axiom is rewritten by one or two rules for a
  number of generations and the result is read as a melody: step up, step
  down, double the duration, play, rest.
- **Cellular automaton.** A 32-cell binary automaton with any neighbourhood
  and rule number runs one generation per eighth note; bass, chord and lead
  voices are read from the live cells with selectable strategies.

Every generator plays over a percussion track, and every pitch goes through
one shared note map built from the configured scale.  Output is pure MIDI:
live to any port via ``mido``, or rendered straight to a MIDI file.

Minimal example:

    ```python
    import atone

    engine = atone.Engine(atone.EngineConfig(algorithm="lsystem", scale="D minor", seed=1))
    engine.render(bars=16, filename="grammar.mid")
    ```

Configs can also be read from YAML with ``atone.load_config()`` and
``EngineConfig.from_dict()``, or rendered from the command line with
``python -m atone config.yaml``.

Package-level exports: ``Engine``, ``EngineConfig``, ``load_config``.
"""

import atone.config
import atone.engine


Engine = atone.engine.Engine
EngineConfig = atone.config.EngineConfig
load_config = atone.config.load_config
