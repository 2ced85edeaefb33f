"""CSV metrics sinks and model trackers."""
