# =============================================================================
# learning_core
# Client-side data layer for the personal learning tracker
# =============================================================================

__version__ = "0.1.0"
