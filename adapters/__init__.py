"""Platform-specific edges: host collectors and transports."""
