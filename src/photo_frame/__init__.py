"""Asset feed for photo frames backed by an Immich server."""
