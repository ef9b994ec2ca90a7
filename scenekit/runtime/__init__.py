"""Runtime composition: configuration, logging, frame lifecycle and event loop."""
