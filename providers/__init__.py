"""Resource provider implementations and the factory that builds them."""
