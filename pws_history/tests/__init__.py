"""Unit and API tests for the pws_history package."""
