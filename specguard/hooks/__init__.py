"""Editor hook entry points (one module per hook, run with ``python3 -m``)."""
