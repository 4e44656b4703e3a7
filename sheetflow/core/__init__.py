"""Core building blocks shared by the configuration modules."""
