"""HTTP query API for a deployed kernel."""
