"""Script Bible - turn scripts and novel manuscripts into structured setting bibles."""

__version__ = "0.1.0"
