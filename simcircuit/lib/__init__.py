"""Libraries of gates and circuits built with :mod:`simcircuit`."""
