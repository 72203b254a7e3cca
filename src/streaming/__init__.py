"""Re-framing of upstream event streams."""
