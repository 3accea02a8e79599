"""User interfaces for sigslot."""
