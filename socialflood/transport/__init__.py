"""HTTP transports for the remote connections API."""
