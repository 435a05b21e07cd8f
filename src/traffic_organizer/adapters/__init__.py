"""Session store adapters implementing ``core.ports.SessionStore``."""
