"""Core story pipeline: domain types, gateways, modules and the orchestrating program."""
