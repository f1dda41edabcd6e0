"""
Tuning data and state management for the synth.

Modules:
- constants: Filenames, bank indices, cents helpers
- generators: Scale generation (harmonic series, CPS, MOS, ET)
- models: Immutable data structures (Tuning, TuningBank)
- presets: Factory tuning registry (Curated bank)
- persistence: Tunings file I/O (JSON v0/v1, .tbank export)
- config: User settings (~/.tunings/settings.json)
- store: TuningStore (load/migrate/save, selection, mutation)
"""
