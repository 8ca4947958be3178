"""Engine internals: errors, external-program runner, state machine, engine."""
