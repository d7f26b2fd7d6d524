"""HTTP surface exposing the Hexwar commands to a local front end."""
