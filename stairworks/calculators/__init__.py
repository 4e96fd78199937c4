"""
Deterministic stair estimation engine.

Pure Python math. No I/O, no database.
Given a straight, L-shaped or U-shaped stair, decide the masonry courses for every step, plan
the cladding slabs (reusing offcuts step to step) and total up materials and
labour.
"""
