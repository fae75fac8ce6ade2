"""Developer tooling: opt-in timing hooks enabled with ``ARDUSCOPE_DEBUG=1``."""
