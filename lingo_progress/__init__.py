"""Adaptive progress and spaced-repetition engine for language learners."""
