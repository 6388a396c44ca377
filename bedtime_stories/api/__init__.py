"""HTTP API for the Bedtime Story Generator."""
