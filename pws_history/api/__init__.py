"""PWS history API application."""
