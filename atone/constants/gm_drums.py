"""Drum keys for the percussion tracks.

Only the sounds the built-in tracks use are named here.  All of them sound
on ``atone.constants.PERCUSSION_CHANNEL`` and follow the General MIDI key
layout, so any GM kit plays them.
"""

METRONOME_CLICK = 33
METRONOME_BELL = 34

# Kit
KICK = 36
SIDE_STICK = 37
SNARE = 38
HAND_CLAP = 39
HI_HAT_CLOSED = 42
HI_HAT_OPEN = 46
CRASH = 49

# Latin
MUTE_HIGH_CONGA = 62
OPEN_HIGH_CONGA = 63
LOW_CONGA = 64
CLAVES = 75
