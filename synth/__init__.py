"""
Synth-side collaborators of the tunings subsystem.

Modules:
- frequency_table: MIDI note -> Hz lookup built from a master set
- parameters: Parameter specs and values (A4 reference pitch)
"""
