"""Item tree storage, aggregates and document import/export."""
